r"""
Argmatch argument specifications.

Overview
- Specs
  • Positional: named, position-bound argument (exact count, "?", "*", "+").
  • Optional: flag-introduced argument with one or more aliases (e.g., -o/--output),
    optionally required and optionally carrying a logical name.
- Arity
  • Arity: the three special arities as a string enum ("?", "*", "+"); exact counts
    are plain integers.

- Introspection & representation
  • SpecType metaclass provides stable __repr__/__rich_repr__ and exposes selected
    fields via read-only properties declared in __introspectable__.

Metadata (sanitized on construction)
- Shared
  • nargs: int | "?" | "*" | "+" (exact counts >= 1 for positionals, >= 0 for optionals).
  • help: Unset | str | Text (display-only), non-empty when provided.
- Positional only
  • name: non-empty, must not start with "-", no whitespace.
- Optional only
  • aliases: non-empty; each must start with "-", contain no whitespace and not be
    a numeric literal. Repeated aliases collapse into one (order kept).
  • name: Unset | str (positional naming rules apply).
  • required: bool; incompatible with arities that accept zero values.

Immutability
- Specs never change after construction. Derive a new spec with
  copy.replace(spec, nargs=..., required=..., help=...); the derivation is
  validated exactly like a fresh construction, so the order in which settings
  were chosen never matters.

Quick example:
    >>> from argmatch.specs import Positional, Optional
    >>> Positional("files", nargs="+")
    positional(name='files', nargs='+', help=None)
    >>> Optional("-o", "--output", nargs=1, required=True)
    optional(aliases=('-o', '--output'), name=None, required=True, nargs=1, help=None)

Public API
- Classes: Arity, Positional, Optional
- Functions: minimum
"""
import functools
import operator
import re
from enum import StrEnum

from rich.text import Text

from .faults import InvalidDefinitionError, FaultCode
from .utils import *


class Arity(StrEnum):
    """
    Special arities. Exact counts are given as plain integers.
    """
    OPTIONAL = "?"
    ZERO_OR_MORE = "*"
    ONE_OR_MORE = "+"


def minimum(nargs, /):
    """
    Return the fewest values an arity accepts (the reservation weight).

    - int n → n
    - "?" / "*" → 0
    - "+" → 1
    """
    match nargs:
        case int():
            return nargs
        case Arity.ONE_OR_MORE:
            return 1
        case Arity.OPTIONAL | Arity.ZERO_OR_MORE:
            return 0
        case _:
            raise TypeError("minimum() argument must be an arity")


def _invalid(cls, message, /, hint):
    return InvalidDefinitionError(
        "%s %s" % (cls.__typename__, message),
        title="invalid definition",
        code=FaultCode.INVALID_DEFINITION,
        hint=hint,
    )


class SpecType(type):
    """
    Metaclass that turns spec classes into introspectable value objects.

    Responsibilities
    - Derive __typename__ from the class name (used in messages and help output).
    - Expose every name listed in __introspectable__ as a read-only property backed
      by the matching private field ("_" + name).
    - Provide stable, readable __repr__/__rich_repr__ implementations.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - optional(aliases=('-v', '--verbose'), name=None, ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the display-only 'help' field.

    - Unset becomes None.
    - Strings are trimmed and must remain non-empty.
    """
    if not isinstance(help := metadata["help"], str | Text | Unset | None):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")
    elif isinstance(help, str) and not (help := help.strip()):
        raise _invalid(cls, "'help' cannot be empty", hint="omit 'help' or give it some text")
    metadata["help"] = coalesce(help)


def _sanitize_name(cls, name, /):
    """
    Internal: validate an argument name (positional name or optional logical name).
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} name must be a string")
    if not name:
        raise _invalid(cls, "name cannot be empty", hint="give the argument a name such as 'file'")
    if name.startswith(MARKER):
        raise _invalid(
            cls,
            "name %r cannot start with %r" % (name, MARKER),
            hint="names starting with %r are reserved for flags" % MARKER,
        )
    if re.search(r"\s", name):
        raise _invalid(cls, "name %r cannot contain whitespace" % name, hint="use '-' or '_' between words")
    return name


def _sanitize_named_metadata(cls, metadata, /):
    """
    Internal: validate and normalize aliases (and logical name) of an Optional.

    - aliases: at least one; every alias passes isflag(); repeats collapse while
      keeping first-seen order.
    - name: Unset or a valid argument name; Unset becomes None.
    """
    if not metadata["aliases"]:
        raise _invalid(cls, "must specify at least one alias", hint="pass a flag such as '-v' or '--verbose'")

    aliases = []
    for alias in metadata["aliases"]:
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} aliases must be strings")
        elif not alias:
            raise _invalid(cls, "aliases cannot be empty-strings", hint="flags look like '-x' or '--name'")
        elif not isflag(alias):
            raise _invalid(
                cls,
                "alias %r is not a valid flag" % alias,
                hint="flags start with %r, contain no spaces and are not numbers" % MARKER,
            )
        elif alias not in aliases:
            aliases.append(alias)
    metadata["aliases"] = tuple(aliases)

    if metadata["name"] is not Unset and metadata["name"] is not None:
        _sanitize_name(cls, metadata["name"])
    metadata["name"] = coalesce(metadata["name"])


def _sanitize_arity_metadata(cls, metadata, /, *, zero):
    """
    Internal: validate and normalize 'nargs' (and 'required' when present).

    - nargs: "?", "*", "+" (or Arity members) are stored as plain strings; integers must be
      >= 1, or >= 0 when 'zero' is allowed; bools and anything else are rejected.
    - required: may not be combined with an arity that accepts zero values.
    """
    match nargs := metadata["nargs"]:
        case bool():
            raise _invalid(cls, "'nargs' must be an integer or one of '?', '*', '+'", hint="use nargs=1 for a single value")
        case int() if nargs < (0 if zero else 1):
            raise _invalid(
                cls,
                "'nargs' must be %s integer" % ("a non-negative" if zero else "a positive"),
                hint="use '?' or '*' to accept no values" if not zero else "use 0 for a presence-only flag",
            )
        case int():
            pass
        case str():
            try:
                metadata["nargs"] = Arity(nargs).value
            except ValueError:
                raise _invalid(cls, "'nargs' must be one of '?', '*', or '+'", hint="or an integer count") from None
        case _:
            raise _invalid(cls, "'nargs' must be an integer or one of '?', '*', '+'", hint="use nargs=1 for a single value")

    if metadata.get("required") and minimum(metadata["nargs"]) < 1:
        raise _invalid(
            cls,
            "cannot be required with nargs=%r" % metadata["nargs"],
            hint="a required option needs at least one mandatory value (e.g., nargs=1 or '+')",
        )


class Positional(metaclass=SpecType):
    """
    Positional argument specification.

    Positionals are matched in registration order against the leading run of
    non-flag tokens. Each declares how many tokens it takes:
    - int n: exactly n (n >= 1)
    - "?": zero or one
    - "*": zero or more
    - "+": one or more
    """

    __introspectable__ = (
        "name",
        "nargs",
        "help",
    )

    def __init__(self, name, /, nargs=1, help=Unset):
        metadata = {
            "name": name,
            "nargs": nargs,
            "help": help,
        }
        _sanitize_name(type(self), name)
        _sanitize_arity_metadata(type(self), metadata, zero=False)
        _sanitize_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def keys(self):
        """
        Binding keys under which the matched values are published.
        """
        return (self.name,)

    @property
    def label(self):
        return self.name

    def __replace__(self, **changes):
        return type(self)(
            changes.pop("name", self.name),
            **{name: getattr(self, name) for name in ("nargs", "help")} | changes
        )


class Optional(metaclass=SpecType):
    """
    Optional (flag-introduced) argument specification.

    Highlights
    - Supports aliases (e.g., "-o", "--output"); any alias retrieves the same values.
    - name: optional logical identifier, published as an extra binding key.
    - Arity: int (>= 0), "?", "*", "+". Defaults to "?" (zero or one value).
    - required: the parse fails unless one of the aliases is present; only allowed
      with arities that demand at least one value.
    """

    __introspectable__ = (
        "aliases",
        "name",
        "required",
        "nargs",
        "help",
    )

    def __init__(self, *aliases, name=Unset, required=False, nargs=Arity.OPTIONAL, help=Unset):
        metadata = {
            "aliases": aliases,
            "name": name,
            "required": bool(required),
            "nargs": nargs,
            "help": help,
        }
        _sanitize_named_metadata(type(self), metadata)
        _sanitize_arity_metadata(type(self), metadata, zero=True)
        _sanitize_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def keys(self):
        """
        Binding keys under which the matched values are published: every alias,
        then the logical name when one was given.
        """
        return self.aliases + ((self.name,) if self.name is not None else ())

    @property
    def label(self):
        return " / ".join(self.aliases)

    def __replace__(self, **changes):
        aliases = changes.pop("aliases", self.aliases)
        if isinstance(aliases, str):
            aliases = (aliases,)
        return type(self)(
            *aliases,
            **{name: getattr(self, name) for name in ("name", "required", "nargs", "help")} | changes
        )


__all__ = (
    "Arity",
    "Positional",
    "Optional",
    "minimum",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del SpecType
