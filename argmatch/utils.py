"""
Argmatch utilities (internal helpers, carefully exposed)

Scope
- Core building blocks used across the package for consistent semantics.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the specs/values/matching layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr).

- Token predicates
  • isnumber(token): the token is a numeric literal ("1", "-3.14", "+2e10", ".5").
  • isoption(token): the token is an option marker ("-x", "--name"), i.e. it starts
    with "-" and is not a numeric literal ("-1" is a value, not a flag).
  • isflag(name): the string is an acceptable flag alias for an optional spec.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> isoption("-v"), isoption("-1"), isoption("value")
    (True, False, False)
"""
import builtins
import functools
import re
from collections.abc import Sequence, Mapping, Set
from typing import final

# Numeric literal accepted both for classification and for float conversion.
# ASCII digits only; no whitespace, no underscores, no inf/nan spellings.
NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)

# Integer literal accepted by integer conversion.
INTEGER = re.compile(r"[+-]?\d+", re.ASCII)

# Option marker character.
MARKER = "-"


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value, but the API needs a way
    to distinguish “not provided” from “provided as None”. A single instance,
    Unset, is exposed for use as the default in internal parameters.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations and isinstance checks (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when UnsetType appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        """
        Ensure a single instance for this sentinel type.
        """
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        """
        Disallow subclassing to preserve sentinel semantics.
        """
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, 0, "", or [] are preserved as-is; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                # Some callables (e.g., built-ins) disallow attribute updates.
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Shallow-freeze container values so public accessors cannot leak mutable state.

    - Sequence (non-string) → tuple
    - Mapping → dict copy
    - Set → frozenset
    - Anything else → as-is
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    elif isinstance(object, Mapping):
        return dict(object)
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute "_{name}".
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


def isnumber(token, /):
    """
    Return True when the token is a numeric literal (integer or decimal, optional
    sign and exponent).
    """
    if not isinstance(token, str):
        raise TypeError("isnumber() argument must be a string")
    return NUMBER.fullmatch(token) is not None


def isoption(token, /):
    """
    Return True when the token is an option marker.

    A token is an option marker iff it begins with "-" and does not parse as a
    numeric literal. This lets negative numbers flow through as ordinary values.
    """
    if not isinstance(token, str):
        raise TypeError("isoption() argument must be a string")
    return token.startswith(MARKER) and not isnumber(token)


def isflag(name, /):
    """
    Return True when the string is usable as a flag alias.

    Flags are non-empty, start with "-", contain no whitespace, and are option
    markers themselves (a numeric literal like "-1" could never be matched).
    """
    if not isinstance(name, str):
        raise TypeError("isflag() argument must be a string")
    return isoption(name) and not re.search(r"\s", name)


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None is a valid, user-meaningful value but you still
need to distinguish “no input” from “explicitly passed None”.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "isnumber",
    "isoption",
    "isflag",

    # Types
    "UnsetType",

    # Constants
    "Unset",
    "MARKER",
)
