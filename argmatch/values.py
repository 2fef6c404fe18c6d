"""
Argmatch parse results: value containers and the binding map.

What this module provides
- Values: an immutable, ordered sequence of the raw tokens bound to one argument,
  with typed, fallible accessors:
  • cast(type=str, index=0) → one converted token
  • castall(type=str) → every token converted (all-or-nothing)
- Bindings: the read-only mapping from argument key to Values produced by one parse.

Conversions
- Targets form a closed set, dispatched through a table of per-type parsers:
  str ("string"), int ("integer", "long"), float ("float", "double").
- Parsers accept strict literals only: integers are [+-]digits, floats use the same
  numeric grammar that classifies "-3.14" as a value rather than a flag. ASCII
  digits only, no surrounding whitespace, no underscores, no inf/nan spellings, and
  no float literal that overflows to infinity ("1e999").
- A token that does not parse raises ConversionError (a ValueError); a negative
  index or one past the end raises IndexOutOfRangeError (an IndexError).

Lookups
- Bindings[key] raises UndefinedArgumentError (a KeyError) when the key was never
  bound. A flag given without values is bound to an empty Values, so
  "present with zero values" and "absent" stay distinguishable.
"""
import math
from collections.abc import Sequence, Mapping

from .faults import ConversionError, IndexOutOfRangeError, UndefinedArgumentError, FaultCode
from .utils import NUMBER, INTEGER, Unset, coalesce


def _tostr(token, /):
    return token


def _toint(token, /):
    if not INTEGER.fullmatch(token):
        raise ValueError(token)
    return int(token)


def _tofloat(token, /):
    if not NUMBER.fullmatch(token):
        raise ValueError(token)
    if not math.isfinite(value := float(token)):
        raise ValueError(token)
    return value


# target → (display name, parser)
_CONVERTERS = {
    str: ("string", _tostr),
    "str": ("string", _tostr),
    "string": ("string", _tostr),
    int: ("integer", _toint),
    "int": ("integer", _toint),
    "integer": ("integer", _toint),
    "long": ("integer", _toint),
    float: ("float", _tofloat),
    "float": ("float", _tofloat),
    "double": ("float", _tofloat),
}


def _converter(type, /):
    try:
        return _CONVERTERS[type]
    except (KeyError, TypeError):
        raise TypeError("conversion target must be one of str, int, float (or 'string', 'integer', "
                        "'long', 'float', 'double'), not %r" % (type,)) from None


class Values(Sequence):
    """
    Immutable ordered sequence of raw tokens bound to one argument.

    Behaves like a tuple of strings (len, iteration, indexing, slicing, equality
    with any sequence of strings) and adds typed accessors.
    """
    __slots__ = ("_tokens", "_key")

    def __init__(self, tokens=(), /, *, key=Unset):
        tokens = tuple(tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("values must be strings")
        self._tokens = tokens
        self._key = coalesce(key)

    @property
    def key(self):
        """
        Binding key this container was published under (None when built standalone).
        """
        return self._key

    def __len__(self):
        return len(self._tokens)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Values(self._tokens[index], key=self._key)
        return self._tokens[index]

    def __iter__(self):
        return iter(self._tokens)

    def __eq__(self, other):
        if isinstance(other, Values):
            return self._tokens == other._tokens
        if isinstance(other, Sequence) and not isinstance(other, str | bytes | bytearray):
            return self._tokens == tuple(other)
        return NotImplemented

    def __hash__(self):
        return hash(self._tokens)

    def __repr__(self):
        return "values(%s)" % ", ".join(map(repr, self._tokens))

    def __rich_repr__(self):
        yield from self._tokens

    def _where(self):
        return "" if self._key is None else " of %r" % self._key

    def cast(self, type=str, index=0):
        """
        Convert the token at 'index' (first by default) to 'type'.

        Raises
        - IndexOutOfRangeError: index is negative or not below len().
        - ConversionError: the token is not a valid literal of 'type'.
        - TypeError: 'type' is not a supported conversion target.
        """
        name, parser = _converter(type)
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError("cast() index must be an integer")
        if not 0 <= index < len(self):
            raise IndexOutOfRangeError(
                "index %d is out of range for %d value%s%s" % (index, len(self), "s" * (len(self) != 1), self._where()),
                title="index out of range",
                code=FaultCode.INDEX_OUT_OF_RANGE,
                hint="check len() before indexing",
                key=self._key,
                index=index,
            )
        token = self._tokens[index]
        try:
            return parser(token)
        except ValueError:
            raise ConversionError(
                "cannot convert %r%s to %s" % (token, self._where(), name),
                title="conversion error",
                code=FaultCode.CONVERSION,
                hint="pass a valid %s literal" % name,
                key=self._key,
                index=index,
                input=token,
            ) from None

    def castall(self, type=str):
        """
        Convert every token to 'type' and return them as a tuple.

        The first failing token raises ConversionError; no partial result is returned.
        """
        _converter(type)
        return tuple(self.cast(type, index) for index in range(len(self)))


class Bindings(Mapping):
    """
    Read-only mapping from argument key to Values, built fresh by every parse.

    Keys are positional names, every alias of each matched optional, and the
    optional's logical name when it has one. Re-binding a key overwrites it.
    """
    __slots__ = ("_map",)

    def __init__(self):
        self._map = {}

    def add(self, key, values, /):
        """
        Insert or overwrite the container published under 'key'.
        """
        if not isinstance(key, str):
            raise TypeError("binding keys must be strings")
        if not isinstance(values, Values) or values.key != key:
            values = Values(values, key=key)
        self._map[key] = values

    def __getitem__(self, key):
        try:
            return self._map[key]
        except KeyError:
            raise UndefinedArgumentError(
                "argument %r was not given" % (key,),
                title="undefined argument",
                code=FaultCode.UNDEFINED_ARGUMENT,
                hint="check 'in' before looking up arguments that may be absent",
                key=key,
            ) from None

    def __contains__(self, key):
        return key in self._map

    def __iter__(self):
        return iter(self._map)

    def __len__(self):
        return len(self._map)

    def __repr__(self):
        return "bindings({%s})" % ", ".join("%r: %r" % item for item in self._map.items())

    def __rich_repr__(self):
        yield from self._map.items()


__all__ = (
    "Values",
    "Bindings",
)
