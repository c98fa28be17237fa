"""
Commandeer faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain (schema, routing, parameters, invocation, warnings)
  so logs and searches stay predictable.
- CommandException / CommandWarning: base types carrying a message plus options
  (code, title, argument, hint, ...) and able to render themselves with rich.
- SchemaError / DispatchError: the two error classes. Schema errors are raised once
  by the builder and abort construction; dispatch errors are raised per call and
  are recoverable at the call site.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Integration
- Outside shell mode exceptions are raised and warnings go through warnings.warn.
- In shell mode both are printed on stderr by a rich console; exceptions then
  terminate the process with status 1.
"""
import copy
import inspect
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, program

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - schema (211xx)
      • DUPLICATE_COMMAND_NAME, DUPLICATE_DEFAULT_COMMAND, HELP_COMMAND_SIGNATURE,
        PARAMETER_NAME_UNDEFINED, AMBIGUOUS_VALIDATOR
    - routing (221xx)
      • DUPLICATE_COMMAND, UNKNOWN_COMMAND, NO_COMMAND_SPECIFIED
    - parameters (2211x/2212x)
      • UNKNOWN_PARAMETER, MISSING_REQUIRED_PARAMETER, EMPTY_PARAMETER,
        UNSUPPORTED_PARAMETER_TYPE, MALFORMED_VALUE, VALIDATION_ERROR
    - invocation (2213x)
      • INVOKE_ERROR
    - warnings (231xx)
      • REPEATED_OPTION, SHADOWED_OPTION

    normalize() lets the host remap codes to its own labels.
    """
    # --- schema errors (21xxx) ---
    DUPLICATE_COMMAND_NAME      = 21101
    DUPLICATE_DEFAULT_COMMAND   = 21102
    HELP_COMMAND_SIGNATURE      = 21103
    PARAMETER_NAME_UNDEFINED    = 21111
    AMBIGUOUS_VALIDATOR         = 21112

    # --- routing errors (22xxx) ---
    DUPLICATE_COMMAND           = 22101
    UNKNOWN_COMMAND             = 22102
    NO_COMMAND_SPECIFIED        = 22103

    # --- parameter errors (22xxx) ---
    UNKNOWN_PARAMETER           = 22111
    MISSING_REQUIRED_PARAMETER  = 22112
    EMPTY_PARAMETER             = 22113
    UNSUPPORTED_PARAMETER_TYPE  = 22114
    MALFORMED_VALUE             = 22115
    VALIDATION_ERROR            = 22121

    # --- invocation errors (22xxx) ---
    INVOKE_ERROR                = 22131

    # --- warnings (23xxx) ---
    REPEATED_OPTION             = 23111
    SHADOWED_OPTION             = 23112

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette):
    """
    build the rich renderable shared by exceptions and warnings.

    layout
    - header: [ prog — code | title ]
    - body:   message
    - hint:   → hint
    - docs:   optional host documentation for the code (see getdoc)
    """
    main = __import__("__main__")
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = fault.options.get("colorful", False)
    fancy = fault.options.get("fancy", False)

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

    prog = text(fault.options.get("prog") or program(), styler("prog-name"))

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(fault.code.normalize(), styler("code")),
        " | ",
        text(fault.title.title(), styler("title")),
        " ]"
    )
    message = text(fault.message, styler("message"))
    parts = [message]
    if fault.hint:
        parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(fault.hint, styler("hint"))))
    if docs := getdoc(fault.code):
        parts.append(text(docs, styler("docs")))

    if fancy:
        try:
            width = int((console.width - 4) * fault.options["ratio"])
        except KeyError:
            width = None
        return Panel(Group(*parts), title=header, title_align="left", width=width)

    return Group(header, *parts)


class CommandException(Exception):
    """
    base type of every commandeer error.

    contract
    - message: human-readable, lower-cased sentence.
    - options: read-only mapping with the fault context. well-known keys:
      • code (FaultCode), title (str), argument (offending name), hint (str)
      • cause (original exception, for delegated failures)
      • prog, shell, fancy, colorful (runtime presentation options)
    - subclasses set __code__ and __title__ as defaults for code and title.
    """
    __code__ = Unset
    __title__ = "command error"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code", type(self).__code__)

    @property
    def kind(self):
        return self.code.name.lower()

    @property
    def title(self):
        return self.options.get("title", type(self).__title__)

    @property
    def argument(self):
        return self.options.get("argument")

    @property
    def hint(self):
        return self.options.get("hint")

    @property
    def cause(self):
        return self.options.get("cause")

    def __str__(self):
        if self.argument is None:
            return str(self.message)
        return "%s (%s)" % (self.message, self.argument)

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title

            # body
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
            "docs": "#737373",  # dim footer gray
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from self.cause
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class SchemaError(CommandException):
    __title__ = "invalid schema"


class DuplicateCommandNameError(SchemaError):
    __code__ = FaultCode.DUPLICATE_COMMAND_NAME
    __title__ = "duplicate command name"


class DuplicateDefaultCommandError(SchemaError):
    __code__ = FaultCode.DUPLICATE_DEFAULT_COMMAND
    __title__ = "duplicate default command"


class HelpCommandSignatureError(SchemaError):
    __code__ = FaultCode.HELP_COMMAND_SIGNATURE
    __title__ = "help command signature"


class ParameterNameUndefinedError(SchemaError):
    __code__ = FaultCode.PARAMETER_NAME_UNDEFINED
    __title__ = "parameter name undefined"


class AmbiguousValidatorError(SchemaError):
    __code__ = FaultCode.AMBIGUOUS_VALIDATOR
    __title__ = "ambiguous validator"


class DispatchError(CommandException):
    __title__ = "invalid command"


class DuplicateCommandError(DispatchError):
    __code__ = FaultCode.DUPLICATE_COMMAND
    __title__ = "duplicate command"


class UnknownCommandError(DispatchError):
    __code__ = FaultCode.UNKNOWN_COMMAND
    __title__ = "unknown command"


class NoCommandSpecifiedError(DispatchError):
    __code__ = FaultCode.NO_COMMAND_SPECIFIED
    __title__ = "no command specified"


class UnknownParameterError(DispatchError):
    __code__ = FaultCode.UNKNOWN_PARAMETER
    __title__ = "unknown option"


class MissingRequiredParameterError(DispatchError):
    __code__ = FaultCode.MISSING_REQUIRED_PARAMETER
    __title__ = "missing required option"


class EmptyParameterError(DispatchError):
    __code__ = FaultCode.EMPTY_PARAMETER
    __title__ = "empty option"


class UnsupportedParameterTypeError(DispatchError):
    __code__ = FaultCode.UNSUPPORTED_PARAMETER_TYPE
    __title__ = "unsupported option type"


class MalformedValueError(UnsupportedParameterTypeError):
    __code__ = FaultCode.MALFORMED_VALUE
    __title__ = "malformed value"


class ValidationError(DispatchError):
    __code__ = FaultCode.VALIDATION_ERROR
    __title__ = "invalid value"


class InvokeError(DispatchError):
    __code__ = FaultCode.INVOKE_ERROR
    __title__ = "command failed"


class CommandWarning(ABC, Warning):
    """
    base type of every commandeer warning (same options contract as CommandException).
    """
    __code__ = Unset
    __title__ = "command warning"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    code = CommandException.code
    kind = CommandException.kind
    title = CommandException.title
    argument = CommandException.argument
    hint = CommandException.hint

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
            "docs": "#737373",
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class RepeatedOptionWarning(CommandWarning):
    __code__ = FaultCode.REPEATED_OPTION
    __title__ = "repeated option"


class ShadowedOptionWarning(CommandWarning):
    __code__ = FaultCode.SHADOWED_OPTION
    __title__ = "shadowed option"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(fault, **options) first.
    - exceptions never return: they raise (or exit in shell mode).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    returns None when no entry is found.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "CommandException",
    "SchemaError",
    "DuplicateCommandNameError",
    "DuplicateDefaultCommandError",
    "HelpCommandSignatureError",
    "ParameterNameUndefinedError",
    "AmbiguousValidatorError",
    "DispatchError",
    "DuplicateCommandError",
    "UnknownCommandError",
    "NoCommandSpecifiedError",
    "UnknownParameterError",
    "MissingRequiredParameterError",
    "EmptyParameterError",
    "UnsupportedParameterTypeError",
    "MalformedValueError",
    "ValidationError",
    "InvokeError",
    "CommandWarning",
    "RepeatedOptionWarning",
    "ShadowedOptionWarning",
    "trigger",
    "getdoc",
)
