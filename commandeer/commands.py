"""
Commandeer command layer: the Command model and the @command declaration.

What this module provides
- Command: an immutable description of one invocable unit:
  • identity: name and optional short name (both lower-cased),
  • descr: help text (defaults to the first line of the callback docstring),
  • parameters: ordered Parameter specs (discovered from the callback signature
    when not given explicitly),
  • help/default markers,
  • callback: the callable the dispatcher invokes.
- command(...): marks a function (or method) as a command for schema discovery,
  keeping the function itself untouched so methods still bind normally.

Quick start
    from commandeer import command, Parameter, IntegerRange, invoke

    class Program:
        verbose = Parameter("verbose", "v", type=bool)

        @command("complex", "c", descr="complex command with parameters")
        def complex(
            self,
            value1=Parameter("value1", type=int, validator=IntegerRange(10, 100)),
            value2=Parameter("value2", "v2", required=True),
        ):
            ...

    if __name__ == "__main__":
        invoke(Program())

Signature rules
- Every parameter of the (bound) callback must default to a Parameter spec; a
  parameter without one has no name and fails the schema build.
- Positional parameters receive values positionally, keyword-only ones by keyword.
- *args and **kwargs cannot be bound and are rejected.
- A help command takes exactly one positional parameter (the rendered help text).
"""
import functools
import inspect
import operator
import re
from inspect import Parameter as Signature
from types import MappingProxyType

from .faults import HelpCommandSignatureError, ParameterNameUndefinedError
from .utils import *


class CommandType(type):
    """
    Metaclass exposing __introspectable__ names as read-only properties and
    providing __repr__/__rich_repr__ (see ArgumentType in commandeer.arguments).
    """
    __introspectable__ = ()
    __displayable__ = Unset

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
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _resolve_parameter(cls, name, x):
    """
    Return the Parameter behind a declaration (anything exposing __parameter__()).
    """
    if not hasattr(x, "__parameter__") or not callable(x.__parameter__):
        raise ParameterNameUndefinedError(
            "handler parameter %r of command %r has no name" % (x, name),
            argument=name,
            hint="declare it with a Parameter(\"name\", ...) spec",
        )
    parameter = x.__parameter__()
    if not hasattr(parameter, "ensure") or not hasattr(parameter, "names"):
        raise TypeError("__parameter__() non-parameter returned")
    return parameter


def _process_source(cls, metadata):
    """
    Introspect the callback and materialize its parameters.

    Builds, in signature order:
    - metadata["parameters"]: tuple of Parameter specs,
    - metadata["keywords"]: tuple of the same length holding the python name of
      keyword-only parameters and None for positional ones.

    Errors
    - TypeError/ValueError on non-inspectable callbacks or variadic parameters.
    - ParameterNameUndefinedError when a signature parameter carries no spec.
    """
    try:
        signature = inspect.signature(metadata["callback"])
    except TypeError:
        raise TypeError(f"{cls.__typename__} 'callback' must be callable") from None
    except ValueError:
        raise ValueError(f"{cls.__typename__} 'callback' must be an inspectable callable") from None

    parameters = []
    keywords = []
    for name, parameter in signature.parameters.items():
        if parameter.kind in (Signature.VAR_POSITIONAL, Signature.VAR_KEYWORD):
            raise TypeError(f"{cls.__typename__} 'callback' parameter {name!r} cannot be variadic")
        if parameter.default is Signature.empty:
            raise ParameterNameUndefinedError(
                "handler parameter %r of command %r has no name" % (name, metadata["name"]),
                argument=name,
                hint="declare it as %s=Parameter(\"name\", ...)" % name,
            )
        parameters.append(_resolve_parameter(cls, metadata["name"], parameter.default))
        keywords.append(name if parameter.kind is Signature.KEYWORD_ONLY else None)

    metadata["parameters"] = tuple(parameters)
    metadata["keywords"] = tuple(keywords)


def _process_strings(cls, metadata):
    """
    Normalize identity and help strings in place.

    - name: required bare word, lower-cased (no leading '-', no whitespace).
    - short: optional bare word, lower-cased; blank becomes None.
    - descr: optional text; blank becomes None.
    """
    for field in ("name", "short"):
        value = metadata[field]
        if not isinstance(value, str | Unset):
            raise TypeError(f"{cls.__typename__} {field!r} must be a string")
        if isinstance(value, str):
            if not (value := value.strip().lower()):
                value = Unset
            elif not re.fullmatch(r"[^\s-]\S*", value):
                raise ValueError(f"{cls.__typename__} {field!r} must be a bare word")
        metadata[field] = coalesce(value)

    if metadata["name"] is None:
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    if isinstance(descr, str):
        descr = descr.strip() or Unset
    metadata["descr"] = coalesce(descr)


class Command(metaclass=CommandType):
    """
    Immutable command description consumed by the dispatcher.

    Lifecycle
    - Created once while building a schema; read-only afterwards.
    - Calling the command forwards to its callback unchanged.
    """

    __introspectable__ = (
        "name",
        "short",
        "descr",
        "parameters",
        "help",
        "default",
        "callback",
    )

    __displayable__ = (
        "name",
        "short",
        "descr",
        "parameters",
        "help",
        "default",
    )

    def __new__(
            cls,
            callback,
            /,
            name=Unset,
            short=Unset,
            descr=Unset,
            parameters=Unset,
            *,
            help=False,
            default=False,
    ):
        """
        Construct a Command from a callback.

        Parameters
        - callback: Callable
          The handler. Its signature defines the parameters unless given explicitly.
        - name: Unset | str
          Command name; defaults to the callback's __name__.
        - short: Unset | str
          Optional short alias.
        - descr: Unset | str
          Help text; defaults to the first line of the callback docstring.
        - parameters: Unset | Iterable[Parameter]
          Explicit parameter list; values are then passed positionally.
        - help: bool
          Marks the help command (invoked with the rendered help text).
        - default: bool
          Marks the command run when no command token is given.

        Raises
        - TypeError/ValueError on malformed metadata.
        - ParameterNameUndefinedError/AmbiguousValidatorError on malformed parameters.
        - HelpCommandSignatureError when a help command does not take exactly one
          positional parameter.
        """
        if not callable(callback):
            raise TypeError(f"{cls.__typename__} 'callback' must be callable")

        doc = inspect.getdoc(callback) if not isinstance(callback, functools.partial) else None
        metadata = {
            "callback": callback,
            "name": coalesce(name, getattr(callback, "__name__", Unset)),
            "short": short,
            "descr": coalesce(descr, doc.splitlines()[0] if doc else Unset),
            "help": bool(help),
            "default": bool(default),
        }
        _process_strings(cls, metadata)

        if parameters is Unset:
            _process_source(cls, metadata)
        else:
            metadata["parameters"] = tuple(
                _resolve_parameter(cls, metadata["name"], parameter) for parameter in parameters
            )
            metadata["keywords"] = (None,) * len(metadata["parameters"])

        for parameter in metadata["parameters"]:
            parameter.ensure("command %r" % metadata["name"])

        # the help handler receives the rendered text as its only argument
        if metadata["help"] and metadata["keywords"] != (None,):
            raise HelpCommandSignatureError(
                "help command %r must take exactly one positional parameter" % metadata["name"],
                argument=metadata["name"],
                hint="declare it as def %s(self, text=Parameter(\"help\")): ..." % metadata["name"],
            )

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def names(self):
        return tuple(name for name in (self._name, self._short) if name)

    def matches(self, name, /):
        """
        True when the (already lower-cased) name is this command's full or short name.
        """
        return name in self.names

    def bind(self, values, /):
        """
        Split resolved values (parameter order) into call arguments.

        Returns (args, kwargs): positional parameters go to args, keyword-only
        parameters to kwargs under their python name.
        """
        args = ()
        kwargs = {}
        for keyword, value in zip(self._keywords, values, strict=True):
            if keyword is None:
                args += (value,)
            else:
                kwargs[keyword] = value
        return args, kwargs

    def __call__(self, *args, **kwargs):
        return self._callback(*args, **kwargs)


def command(source=Unset, /, *args, **kwargs):
    """
    Mark a function as a command, for schema discovery.

    Invocation modes
    - Bare decorator:
        @command
        def build(self, ...): ...
    - Decorator with metadata (forwarded to Command(...) at build time):
        @command("complex", "c", descr="...", default=True)
        def complex(self, ...): ...

    The function is returned unchanged with a read-only __command__ mapping
    attached; the schema builder turns it into a Command bound to the object
    being discovered.
    """
    if isinstance(source, str):
        # @command("name", ...), name given positionally
        args = (source, *args)
        source = Unset

    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        if hasattr(source, "__command__"):
            raise TypeError("@command() must be applied only once")
        names = ("name", "short", "descr")
        if len(args) > len(names):
            raise TypeError("@command() takes at most %d positional arguments" % len(names))
        source.__command__ = MappingProxyType(dict(zip(names, args)) | kwargs)
        return source

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Command",
    "command",
)

# Keep the metaclass out of star-imports and docs.
del CommandType
