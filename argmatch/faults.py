"""
Argmatch faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings). Codes are grouped by domain to keep copy consistent
  and make logs/searches predictable.
- ArgumentException / ArgumentWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).

Families
- DefinitionError: grammar declaration problems, raised while registering specs.
- ParseError: token stream does not match the grammar, raised by Parser.parse().
- AccessError: typed lookups over a parse result (also KeyError/ValueError/IndexError).
- HelpRequested: a help flag was seen; carries the rendered help text.

Integration
- Parser code builds faults and calls Parser.trigger(fault, **ctx).
- In non-shell mode, exceptions are raised; in shell mode, they are rendered via rich
  and the process exits.
"""
import copy
import inspect
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the library (stable identifiers).

    grouping (by high-level domain)
    - informational (100xx)
      • HELP_REQUESTED
    - definitions (101xx)
      • INVALID_DEFINITION, NAME_COLLISION
    - matching (111xx)
      • UNDEFINED_OPTION, MISSING_REQUIRED_OPTION, UNMATCHED_POSITIONALS,
        ARITY_MISMATCH, STRAY_VALUE
    - access (1115x)
      • UNDEFINED_ARGUMENT, CONVERSION, INDEX_OUT_OF_RANGE
    - warnings (12xxx)
      • STRAY_VALUE_SKIPPED
    """
    # --- informational (100xx) ---
    HELP_REQUESTED              = 10001

    # --- definition errors (101xx) ---
    INVALID_DEFINITION          = 10101
    NAME_COLLISION              = 10102

    # --- matching errors (11xxx) ---
    UNDEFINED_OPTION            = 11112
    MISSING_REQUIRED_OPTION     = 11117
    UNMATCHED_POSITIONALS       = 11121
    ARITY_MISMATCH              = 11122
    STRAY_VALUE                 = 11141

    # --- access errors (11xxx) ---
    UNDEFINED_ARGUMENT          = 11151
    CONVERSION                  = 11152
    INDEX_OUT_OF_RANGE          = 11153

    # --- warnings (12xxx) ---
    STRAY_VALUE_SKIPPED         = 12141

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _palette(defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _prog(options):
    return coalesce(options.get("prog", Unset), getattr(__import__("__main__"), "__prog__", "argmatch"))


def _render(self, styles, title_style, message_style):
    # Shared body of ArgumentException.__rich__ and ArgumentWarning.__rich__.
    colorful = self.options.get("colorful", False)
    fancy = self.options.get("fancy", False)

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    width = console.width - 4 * fancy

    code = self.options.get("code")
    header = Text.assemble(
        "[ ",
        text(_prog(self.options), styler("prog-name")),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "?", styler("code")),
        " | ",
        text(str(self.options.get("title", type(self).__name__)).title(), styler(title_style)),
        " ]"
    )
    message = text(self.message, styler(message_style))
    renders = [message]
    if hint := self.options.get("hint"):
        renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    if fancy:
        try:
            width = int(width * self.options["ratio"])
        except KeyError:
            width = None
        return Panel(Group(*renders), title=header, title_align="left", width=width)

    return Group(header, *renders)


class ArgumentException(Exception):
    """
    Base class of every argmatch error.

    Carries a lowercased message and a read-only mapping of options:
    code (FaultCode), title, hint, plus context such as input/argument/index
    and the runtime rendering switches (prog/shell/fancy/colorful).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def hint(self):
        return self.options.get("hint")

    def __str__(self):
        return self.message

    def __rich__(self):
        styles = _palette({
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })
        return _render(self, styles, "error-title", "error-message")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DefinitionError(ArgumentException): ...
class InvalidDefinitionError(DefinitionError, ValueError): ...
class NameCollisionError(DefinitionError, ValueError): ...

class ParseError(ArgumentException): ...
class MissingRequiredOptionError(ParseError): ...
class ArityMismatchError(ParseError): ...
class UnmatchedPositionalArgumentsError(ParseError): ...
class UndefinedOptionError(ParseError): ...
class StrayValueError(ParseError): ...

class AccessError(ArgumentException): ...
class UndefinedArgumentError(AccessError, KeyError): ...
class ConversionError(AccessError, ValueError): ...
class IndexOutOfRangeError(AccessError, IndexError): ...


class HelpRequested(ArgumentException):
    """
    Raised (or, in shell mode, printed then exited with status 0) when a help
    flag is present in the token stream. The rendered help is in .help.
    """

    @property
    def help(self):
        return self.options.get("help", "")

    def __rich__(self):
        return self.options.get("renderable", Text(self.help))

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        Console().print(self)
        sys.exit(0)


class ArgumentWarning(Warning):
    """
    Base class of every argmatch warning (non-fatal, parsing continues).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __str__(self):
        return self.message

    def __rich__(self):
        styles = _palette({
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        })
        return _render(self, styles, "warning-title", "warning-message")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class StrayValueWarning(ArgumentWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are raised
      and warnings are emitted through the warnings module.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "ArgumentException",
    "DefinitionError",
    "InvalidDefinitionError",
    "NameCollisionError",
    "ParseError",
    "MissingRequiredOptionError",
    "ArityMismatchError",
    "UnmatchedPositionalArgumentsError",
    "UndefinedOptionError",
    "StrayValueError",
    "AccessError",
    "UndefinedArgumentError",
    "ConversionError",
    "IndexOutOfRangeError",
    "HelpRequested",
    "ArgumentWarning",
    "StrayValueWarning",
    "FaultCode",
    "trigger",
)
