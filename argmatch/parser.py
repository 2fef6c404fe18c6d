"""
Argmatch parser: declare a grammar, then match token streams against it.

What this module provides
- Parser: the grammar registry and the entry point of the matching engine.
  • add_positional(...) / add_optional(...): register specs, rejecting name and
    flag collisions immediately.
  • update(key, **changes): re-derive a registered spec (copy.replace semantics).
  • parse(tokens): run segmentation → required check → positional allocation →
    optional scan, and return a fresh Bindings.
  • format_help() / print_help(): Rich-based usage and argument listing.
- getargs(): the process argument vector as a tuple (program name included).

Lifecycle (configure-then-freeze)
- Register every spec first. The first parse() freezes the registry; later
  add_positional/add_optional/update calls raise InvalidDefinitionError.
- parse() holds no state between calls: each call builds its own Bindings.

Faults
- Outside shell mode, parse faults are raised (see argmatch.faults).
- With shell=True they are rendered on stderr and the process exits with status 1;
  a help flag prints the help on stdout and exits with status 0.

Quick start
    from argmatch import Parser

    parser = Parser("copy", "Copy files somewhere else.")
    parser.add_positional("sources", nargs="+", help="files to copy")
    parser.add_positional("target", help="destination directory")
    parser.add_optional("-j", "--jobs", nargs=1, help="parallel workers")
    parser.add_optional("-n", "--dry-run", nargs=0)

    bindings = parser.parse(["a.txt", "b.txt", "out/", "-j", "4"])
    bindings["sources"]              # values('a.txt', 'b.txt')
    bindings["--jobs"].cast(int)     # 4
    "-n" in bindings                 # False
"""
import copy
import io
import os.path
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .faults import *
from .faults import trigger as _trigger
from .matching import segment, missing, allocate, scan, _ordinal
from .specs import Arity, Positional, Optional
from .utils import *
from .values import Bindings


def getargs():
    """
    Return the raw argument vector of the running process (program name first).
    """
    return tuple(sys.argv)


def _invalid(message, /, hint):
    return InvalidDefinitionError(
        message,
        title="invalid definition",
        code=FaultCode.INVALID_DEFINITION,
        hint=hint,
    )


def _collision(message, /, hint):
    return NameCollisionError(
        message,
        title="name collision",
        code=FaultCode.NAME_COLLISION,
        hint=hint,
    )


class Parser:
    """
    Grammar registry and matching entry point.

    Options
    - prog: program name used in usage lines and fault headers. Defaults to
      __main__.__prog__, then to the basename of sys.argv[0].
    - description: paragraph shown under the usage line.
    - helpers: help flags; when one appears, parse() stops and shows the help.
      Pass () to disable.
    - skip: leading tokens to discard unconditionally on every parse.
    - strict: reject stray values in the optional segment (default) instead of
      skipping them with a StrayValueWarning.
    - shell / fancy / colorful: fault and help rendering switches.
    """

    def __init__(
            self,
            prog=Unset,
            description=Unset,
            *,
            helpers=("-h", "--help"),
            skip=0,
            strict=True,
            shell=False,
            fancy=False,
            colorful=False,
    ):
        if not isinstance(prog, str | Unset):
            raise TypeError("parser 'prog' must be a string")
        elif isinstance(prog, str) and not (prog := prog.strip()):
            raise _invalid("parser 'prog' cannot be empty", hint="omit it to use the running program's name")

        if not isinstance(description, str | Text | Unset):
            raise TypeError("parser 'description' must be a string")
        elif isinstance(description, str) and not (description := description.strip()):
            raise _invalid("parser 'description' cannot be empty", hint="omit it or give it some text")

        if isinstance(helpers, str) or not isinstance(helpers, Iterable):
            raise TypeError("parser 'helpers' must be an iterable of strings")
        sanitized = []
        for helper in helpers:
            if not isinstance(helper, str):
                raise TypeError("parser 'helpers' must be an iterable of strings")
            if not isflag(helper):
                raise _invalid("help flag %r is not a valid flag" % helper, hint="flags look like '-h' or '--help'")
            if helper not in sanitized:
                sanitized.append(helper)

        if not isinstance(skip, int) or isinstance(skip, bool):
            raise TypeError("parser 'skip' must be an integer")
        elif skip < 0:
            raise _invalid("parser 'skip' cannot be negative", hint="use 0 to keep every token")

        self._prog = prog
        self._description = coalesce(description)
        self._helpers = tuple(sanitized)
        self._skip = skip
        self._strict = bool(strict)
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

        self._positionals = []
        self._optionals = []
        self._names = set()     # positional names and optional logical names
        self._flags = {}        # flag → handle into self._optionals
        self._frozen = False

    @property
    def prog(self):
        if self._prog is not Unset:
            return self._prog
        return getattr(__import__("__main__"), "__prog__", os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "argmatch")

    description = property(lambda self: self._description)
    helpers = property(lambda self: self._helpers)
    skip = property(lambda self: self._skip)
    strict = property(lambda self: self._strict)
    shell = property(lambda self: self._shell)
    fancy = property(lambda self: self._fancy)
    colorful = property(lambda self: self._colorful)
    frozen = property(lambda self: self._frozen)

    @property
    def positionals(self):
        """
        Registered positional specs in allocation order.
        """
        return tuple(self._positionals)

    @property
    def optionals(self):
        """
        Registered optional specs in registration order.
        """
        return tuple(self._optionals)

    def __repr__(self):
        return "parser(prog=%r, positionals=%r, optionals=%r)" % (self.prog, self.positionals, self.optionals)

    def __rich_repr__(self):
        yield "prog", self.prog
        yield "description", self.description
        yield "positionals", self.positionals
        yield "optionals", self.optionals
        yield "helpers", self.helpers
        yield "skip", self.skip
        yield "strict", self.strict
        yield "shell", self.shell

    def _mutable(self):
        if self._frozen:
            raise _invalid(
                "parser grammar is frozen after the first parse",
                hint="register every argument before calling parse()",
            )

    def _claim(self, spec, /, *, handle=None):
        # Raise NameCollisionError if spec's name or flags are taken by another spec.
        if spec.name is not None and spec.name in self._names:
            raise _collision("argument name %r is already registered" % spec.name, hint="pick a different name")
        for alias in getattr(spec, "aliases", ()):
            if alias in self._helpers:
                raise _collision("flag %r is reserved for help" % alias, hint="pass helpers=() to free it")
            if self._flags.get(alias, handle) != handle:
                raise _collision("flag %r is already registered" % alias, hint="each flag may belong to one option only")

    def add_positional(self, source, /, **metadata):
        """
        Register a positional argument and return its spec.

        Accepts a name plus Positional keywords (nargs, help), or a prebuilt
        Positional (keywords, if any, are applied through copy.replace).
        """
        self._mutable()
        if isinstance(source, Positional):
            positional = copy.replace(source, **metadata) if metadata else source
        else:
            positional = Positional(source, **metadata)
        self._claim(positional)
        self._positionals.append(positional)
        self._names.add(positional.name)
        return positional

    def add_optional(self, *aliases, **metadata):
        """
        Register an optional argument and return its spec.

        Accepts flags plus Optional keywords (name, required, nargs, help), or a
        single prebuilt Optional (keywords, if any, are applied through copy.replace).
        """
        self._mutable()
        if len(aliases) == 1 and isinstance(aliases[0], Optional):
            optional = copy.replace(aliases[0], **metadata) if metadata else aliases[0]
        else:
            optional = Optional(*aliases, **metadata)
        self._claim(optional)
        handle = len(self._optionals)
        self._optionals.append(optional)
        if optional.name is not None:
            self._names.add(optional.name)
        for alias in optional.aliases:
            self._flags[alias] = handle
        return optional

    def update(self, key, /, **changes):
        """
        Replace a registered spec by copy.replace(spec, **changes) and return it.

        key is a positional name, an optional's logical name, or any of its flags.
        The derived spec is validated like a fresh one and collision-checked
        against every other registered spec.
        """
        self._mutable()
        if key in self._flags:
            handle = self._flags[key]
        else:
            for handle, optional in enumerate(self._optionals):
                if optional.name is not None and optional.name == key:
                    break
            else:
                handle = None

        if handle is not None:
            old = self._optionals[handle]
            new = copy.replace(old, **changes)
            self._names.discard(old.name)
            try:
                self._claim(new, handle=handle)
            except NameCollisionError:
                if old.name is not None:
                    self._names.add(old.name)
                raise
            for alias in old.aliases:
                del self._flags[alias]
            for alias in new.aliases:
                self._flags[alias] = handle
            if new.name is not None:
                self._names.add(new.name)
            self._optionals[handle] = new
            return new

        for index, old in enumerate(self._positionals):
            if old.name == key:
                new = copy.replace(old, **changes)
                self._names.discard(old.name)
                try:
                    self._claim(new)
                except NameCollisionError:
                    self._names.add(old.name)
                    raise
                self._names.add(new.name)
                self._positionals[index] = new
                return new

        raise KeyError("parser has no argument %r" % (key,))

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this parser's rendering options merged in.
        """
        _trigger(
            fault,
            **options,
            prog=self.prog,
            shell=self.shell,
            fancy=self.fancy,
            colorful=self.colorful,
        )

    def parse(self, prompt=Unset, /, *, skip=Unset):
        """
        Match a token stream against the grammar and return its Bindings.

        Parameters
        - prompt:
          • Unset: read getargs() (the program name is skipped unless 'skip' says otherwise).
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence, used as-is.
        - skip: leading tokens to discard; defaults to the parser's 'skip'.

        Raises
        - TypeError: prompt is not Unset/str/Iterable[str].
        - ParseError subclasses (outside shell mode), HelpRequested.
        """
        if prompt is Unset:
            tokens = getargs()
            skip = coalesce(skip, max(self.skip, 1))
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("parse() argument must be a string or an iterable of strings")
        else:
            raise TypeError("parse() argument must be a string or an iterable of strings")

        skip = coalesce(skip, self.skip)
        if not isinstance(skip, int) or isinstance(skip, bool) or skip < 0:
            raise TypeError("parse() 'skip' must be a non-negative integer")

        self._frozen = True
        tokens = tuple(tokens)[skip:]
        bindings = Bindings()

        positionals, optionals = segment(tokens)
        try:
            if requested := [token for token in optionals if token in self._helpers]:
                raise HelpRequested(
                    "help requested",
                    title="help",
                    code=FaultCode.HELP_REQUESTED,
                    input=requested[0],
                    help=self.format_help(),
                    renderable=self._helper(Console()),
                )
            missing(self._optionals, optionals)
            allocate(self._positionals, positionals, bindings, offset=skip)
            strays = scan(
                self._optionals,
                self._flags,
                optionals,
                bindings,
                strict=self.strict,
                offset=skip + len(positionals),
            )
        except (ParseError, HelpRequested) as fault:
            self.trigger(fault)
            raise

        for position, token in strays:
            self.trigger(StrayValueWarning(
                "ignoring unexpected value %r at %s position" % (token, _ordinal(position)),
                title="stray value",
                code=FaultCode.STRAY_VALUE_SKIPPED,
                input=token,
                index=position,
                hint="remove it, or move positional values before the first option",
            ))

        return bindings

    def format_help(self, *, width=Unset):
        """
        Render the help text to a string (styled only when colorful=True).
        """
        console = Console(
            file=io.StringIO(),
            width=coalesce(width, 80),
            force_terminal=self.colorful,
            color_system="truecolor" if self.colorful else None,
            highlight=False,
        )
        console.print(self._helper(console))
        return console.file.getvalue()

    def print_help(self, *, stderr=False):
        """
        Print the help to the terminal (stdout by default).
        """
        (console := Console(stderr=stderr)).print(self._helper(console))

    def _helper(self, console):
        """
        Build the help renderable.

        Palette keys
        - usage-label, program-name, description-section
        - group-label, argument-description
        - option-name, required-name, positional-name, metavar
        - panel-title

        Customization
        - Define a mapping named __styles__ in __main__ to override any palette entry.
        - When colorful is False, styling is suppressed.
        """
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "description-section": "italic #A3A3A3",

            "group-label": "bold #FFFFFF",
            "argument-description": "#9CA3AF",

            "option-name": "bold #00E6FF",
            "required-name": "bold #22C55E",
            "positional-name": "bold #36C5F0",
            "metavar": "bold #FFD600",

            "panel-title": "bold #FF4D94",
        } | getattr(__import__('__main__'), "__styles__", {}))

        def styler(style):
            return styles[style] if self.colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not self.colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        def names(x):
            style = "required-name" if x.required else "option-name"
            return Text(" | ").join(text(alias, styler(style)) for alias in x.aliases)

        def metavar(label, nargs):
            label = Text.assemble("<", text(label, styler("metavar")), ">")
            match nargs:
                case Arity.OPTIONAL:
                    return Text.assemble("[", label, "]")
                case Arity.ZERO_OR_MORE:
                    return Text.assemble("[", label, " ...]")
                case Arity.ONE_OR_MORE:
                    return Text.assemble(label, " [", label, " ...]")
                case int():
                    return Text(" ").join(label for _ in range(nargs))

        def label(x):
            return x.name if x.name is not None else max(x.aliases, key=len).lstrip(MARKER)

        width = console.width - 4 * self.fancy
        renders = []

        # Usage line: program, help flags, optionals, then positionals in order
        usage = Text()
        usage.append(text("usage", styler("usage-label"))).append(": ")
        usage.append(text(self.prog, styler("program-name")))
        offset = len(usage) + 1
        inputs = []
        if self.helpers:
            inputs.append(Text.assemble("[", Text(" | ").join(text(x, styler("option-name")) for x in self.helpers), "]"))
        for optional in self._optionals:
            input = names(optional)
            if optional.nargs != 0:
                input = Text.assemble(input, " ", metavar(label(optional), optional.nargs))
            inputs.append(input if optional.required else Text.assemble("[", input, "]"))
        for positional in self._positionals:
            inputs.append(metavar(positional.name, positional.nargs))

        line = len(usage)
        for input in inputs:
            if line + 1 + len(input) > width and line > offset:
                usage.append("\n").append(" " * offset)
                line = offset
            else:
                usage.append(" ")
                line += 1
            usage.append(input)
            line += len(input)
        renders.append(usage)

        if self.description:
            renders.append(Text("\n").append(text(self.description, styler("description-section"))))

        padding = 2
        indent = 24

        def section(head, help):
            row = Text(" " * padding).append(head)
            if help := text(help, styler("argument-description")):
                if len(row) + 2 > indent:
                    row.append("\n").append(" " * indent)
                else:
                    row.append(" " * (indent - len(row)))
                wrapped = help.wrap(console, max(width - indent, 16))
                for index, line in enumerate(wrapped):
                    if index:
                        row.append("\n").append(" " * indent)
                    row.append(line)
            return row

        if self._positionals:
            group = Text("\n").append(text("positionals", styler("group-label"))).append(":")
            for positional in self._positionals:
                group.append("\n").append(section(text(positional.name, styler("positional-name")), positional.help))
            renders.append(group)

        options = []
        if self.helpers:
            options.append((Text(", ").join(text(x, styler("option-name")) for x in self.helpers), "show this help and exit"))
        for optional in self._optionals:
            head = Text(", ").join(
                text(alias, styler("required-name" if optional.required else "option-name")) for alias in optional.aliases
            )
            if optional.nargs != 0:
                head.append(" ").append(metavar(label(optional), optional.nargs))
            help = optional.help
            if optional.required:
                help = Text.assemble(text(help) if help else "", " (required)" if help else "(required)")
            options.append((head, help))
        if options:
            group = Text("\n").append(text("optionals", styler("group-label"))).append(":")
            for head, help in options:
                group.append("\n").append(section(head, help))
            renders.append(group)

        renderable = Group(*renders)

        if self.fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[ ", f"{self.prog} HELP".upper(), " ]", style=styler("panel-title")),
                title_align="left",
            )

        return renderable


__all__ = (
    "Parser",
    "getargs",
)
