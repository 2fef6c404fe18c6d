"""
Argmatch matching engine: turn a token sequence into bindings.

The engine is a handful of free functions that Parser.parse() runs in order over
one token tuple. Every function either binds values into the given Bindings or
raises a ParseError; the caller decides how faults are surfaced.

phases
- segment(tokens)
  • split into the positional segment (the longest prefix without option markers)
    and the optional segment (everything from the first option marker on).
    positionals and optionals therefore never interleave.
- missing(optionals, tokens)
  • before anything is bound, every required optional must have at least one of
    its aliases literally present in the optional segment.
- allocate(positionals, tokens, bindings)
  • greedy-with-reservation: in registration order, each positional takes what its
    arity allows out of what is left after reserving the minimum that the
    positionals after it need (exact n → n, "+" → 1, "?"/"*" → 0).
  • tokens left once every positional is served are an error.
- scan(optionals, index, tokens, bindings)
  • walk the optional segment: each option marker is resolved through the flag
    index, then takes its values from the run of non-marker tokens right after it
    (exact n must match the run, "+" needs one, "*" takes the run, "?" takes at
    most one). Values are published under every key of the optional, so a later
    occurrence of any alias overwrites the earlier binding for all of them.

positions
- messages lead with the 1-based ordinal of the token in the caller's stream
  (“at third position”); 'offset' shifts local indexes back to that stream.
"""
import difflib
import itertools

from .faults import *
from .specs import Arity, minimum
from .utils import isoption


def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def _describe(nargs):
    match nargs:
        case 0:
            return "no values"
        case int():
            return "exactly %d value%s" % (nargs, "s" * (nargs != 1))
        case Arity.OPTIONAL:
            return "at most one value"
        case Arity.ZERO_OR_MORE:
            return "any number of values"
        case Arity.ONE_OR_MORE:
            return "at least one value"


def _plural(count, word):
    return "%d %s%s" % (count, word, "s" * (count != 1))


def segment(tokens, /):
    """
    Split tokens into (positional segment, optional segment).
    """
    tokens = tuple(tokens)
    for index, token in enumerate(tokens):
        if isoption(token):
            return tokens[:index], tokens[index:]
    return tokens, ()


def missing(optionals, tokens, /):
    """
    Raise MissingRequiredOptionError for the first required optional none of whose
    aliases appears in the optional segment.
    """
    present = set(tokens)
    for optional in optionals:
        if optional.required and present.isdisjoint(optional.aliases):
            if len(optional.aliases) > 1:
                message = "one of the options %s is required" % ", ".join(map(repr, optional.aliases))
            else:
                message = "option %r is required" % optional.aliases[0]
            raise MissingRequiredOptionError(
                message,
                title="missing required option",
                code=FaultCode.MISSING_REQUIRED_OPTION,
                argument=optional,
                hint="add %s %s" % (optional.aliases[0], "<value>" if optional.nargs == 1 else "<values>"),
            )


def allocate(positionals, tokens, bindings, /, *, offset=0):
    """
    Distribute the positional segment over the positional specs.

    parameters
    - positionals: ordered specs (registration order is allocation precedence).
    - tokens: the positional segment.
    - bindings: receives one Values per positional (possibly empty).
    - offset: number of stream tokens preceding 'tokens' (for ordinals).

    raises
    - ArityMismatchError: a positional cannot get what its arity demands.
    - UnmatchedPositionalArgumentsError: tokens remain after every positional is served.
    """
    # reserves[i]: fewest tokens positionals[i:] need between them
    reserves = list(itertools.accumulate(reversed([minimum(positional.nargs) for positional in positionals]), initial=0))
    reserves.reverse()

    cursor = 0
    for index, positional in enumerate(positionals):
        available = len(tokens) - cursor - reserves[index + 1]
        match positional.nargs:
            case int():
                if available < positional.nargs:
                    raise _shortage(positional, max(available, 0), offset + cursor)
                count = positional.nargs
            case Arity.ONE_OR_MORE:
                if available < 1:
                    raise _shortage(positional, 0, offset + cursor)
                count = available
            case Arity.ZERO_OR_MORE:
                count = max(available, 0)
            case Arity.OPTIONAL:
                count = 1 if available > 0 else 0
        bindings.add(positional.name, tokens[cursor:cursor + count])
        cursor += count

    if cursor < len(tokens):
        leftover = tokens[cursor:]
        raise UnmatchedPositionalArgumentsError(
            "unexpected positional %s %s from %s position" % (
                "value" if len(leftover) == 1 else "values",
                ", ".join(map(repr, leftover)),
                _ordinal(offset + cursor + 1),
            ),
            title="unexpected positional",
            code=FaultCode.UNMATCHED_POSITIONALS,
            index=offset + cursor + 1,
            leftover=leftover,
            hint="remove the extra values or check how many each positional takes",
        )


def _shortage(positional, available, position):
    return ArityMismatchError(
        "positional %r expects %s but %s left from %s position" % (
            positional.name,
            _describe(positional.nargs),
            "only " + _plural(available, "value") + (" is" if available == 1 else " are") if available else "none is",
            _ordinal(position + 1),
        ),
        title="arity mismatch",
        code=FaultCode.ARITY_MISMATCH,
        argument=positional,
        input=positional.name,
        index=position + 1,
        hint="positionals are filled in order; pass %s for %r" % (_describe(positional.nargs), positional.name),
    )


def scan(optionals, index, tokens, bindings, /, *, strict=True, offset=0):
    """
    Bind the optional segment.

    parameters
    - optionals: specs addressed by the handles stored in 'index'.
    - index: mapping flag → handle into 'optionals'.
    - tokens: the optional segment.
    - bindings: receives the values of every matched optional under all its keys.
    - strict: when False, non-marker tokens no flag could take are skipped
      instead of raising StrayValueError.
    - offset: number of stream tokens preceding 'tokens' (for ordinals).

    returns
    - list of (position, token) pairs that were skipped (empty when strict).

    raises
    - UndefinedOptionError: a marker matches no registered flag.
    - ArityMismatchError: a flag's value run does not fit its arity.
    - StrayValueError: strict and a leftover value follows a flag that took all it could.
    """
    strays = []
    cursor = 0
    while cursor < len(tokens):
        token = tokens[cursor]
        position = offset + cursor + 1

        if not isoption(token):
            if strict:
                raise StrayValueError(
                    "unexpected value %r at %s position" % (token, _ordinal(position)),
                    title="unexpected value",
                    code=FaultCode.STRAY_VALUE,
                    input=token,
                    index=position,
                    hint="remove it, or move positional values before the first option",
                )
            strays.append((position, token))
            cursor += 1
            continue

        try:
            optional = optionals[index[token]]
        except KeyError:
            suggestions = difflib.get_close_matches(token, index.keys(), 5)
            try:
                hint = "did you mean %r?" % suggestions[0]
            except IndexError:
                hint = "check the spelling; flags are matched exactly"
            raise UndefinedOptionError(
                "unknown option %r at %s position" % (token, _ordinal(position)),
                title="unknown option",
                code=FaultCode.UNDEFINED_OPTION,
                input=token,
                index=position,
                suggestions=suggestions,
                hint=hint,
            ) from None

        end = cursor + 1
        while end < len(tokens) and not isoption(tokens[end]):
            end += 1
        run = tokens[cursor + 1:end]

        match optional.nargs:
            case int():
                if len(run) != optional.nargs:
                    raise _misfit(optional, token, len(run), position)
                count = optional.nargs
            case Arity.ONE_OR_MORE:
                if not run:
                    raise _misfit(optional, token, 0, position)
                count = len(run)
            case Arity.ZERO_OR_MORE:
                count = len(run)
            case Arity.OPTIONAL:
                count = min(len(run), 1)

        for key in optional.keys:
            bindings.add(key, run[:count])
        cursor += 1 + count

    return strays


def _misfit(optional, token, given, position):
    return ArityMismatchError(
        "option %r at %s position expects %s but %s given" % (
            token,
            _ordinal(position),
            _describe(optional.nargs),
            _plural(given, "value") + (" was" if given == 1 else " were") if given else "none was",
        ),
        title="arity mismatch",
        code=FaultCode.ARITY_MISMATCH,
        argument=optional,
        input=token,
        index=position,
        hint="pass %s after %s" % (_describe(optional.nargs), token),
    )


__all__ = (
    "segment",
    "missing",
    "allocate",
    "scan",
)
