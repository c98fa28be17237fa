"""
Commandeer schema: registration, discovery and the frozen model.

Building a schema
- Explicitly, through the Schema builder:
    schema = Schema()

    @schema.command("simple", "s", default=True)
    def simple(): ...

    schema.parameter(Parameter("verbose", "v", type=bool), Slot(settings, "verbose"))
    model = schema.build()

- Declaratively, by discovering an object (instance or module):
    model = build(Program())

  Discovery walks the namespaces base classes first, in declaration order:
  • functions marked with @command become commands (bound to the object),
  • Parameter attributes become global parameters written back to the object.

Checks (raised immediately, never deferred to dispatch)
- DuplicateCommandNameError: a name or short name is already taken.
- DuplicateDefaultCommandError: a second command is marked default.
- ParameterNameUndefinedError / AmbiguousValidatorError: see Parameter.ensure().

The model is immutable; dispatching never changes it.
"""
from collections.abc import Mapping
from types import ModuleType

from .arguments import Parameter, Slot, GlobalParameter
from .commands import Command
from .faults import DuplicateCommandNameError, DuplicateDefaultCommandError
from .utils import *


class SchemaModel:
    """
    Frozen result of a build: commands, the default command and global parameters.
    """
    __slots__ = ("_commands", "_default", "_globals")

    def __init__(self, commands=(), default=None, globals=(), /):
        self._commands = tuple(commands)
        self._default = default
        self._globals = tuple(globals)

    @property
    def commands(self):
        return self._commands

    @property
    def default(self):
        return self._default

    @property
    def globals(self):
        return self._globals

    def find(self, name, /):
        """
        Return the command named (or short-named) name, case-insensitively, or None.
        """
        name = name.lower()
        for command in self._commands:
            if command.matches(name):
                return command
        return None

    def __rich_repr__(self):
        yield "commands", self._commands
        yield "default", self._default
        yield "globals", self._globals

    def __repr__(self):
        return "schema-model(commands=%r, default=%r, globals=%r)" % (
            [command.name for command in self._commands],
            self._default.name if self._default else None,
            [entry.parameter.name for entry in self._globals],
        )


class Schema:
    """
    Mutable schema builder.

    Registration order is preserved and drives both help output and the order
    in which global parameters are written during a dispatch.
    """

    def __init__(self):
        self._commands = []
        self._default = None
        self._globals = []

    def add(self, command, /):
        """
        Register a ready-made Command.

        Raises
        - DuplicateCommandNameError: name or short name collides with a registered command.
        - DuplicateDefaultCommandError: command is default and a default is already set.
        """
        if not isinstance(command, Command):
            raise TypeError("Schema.add() argument must be a command")

        for name in command.names:
            for other in self._commands:
                if other.matches(name):
                    raise DuplicateCommandNameError(
                        "command name %r is already used by command %r" % (name, other.name),
                        argument=name,
                        hint="rename one of the commands or drop the clashing short name",
                    )

        if command.default and self._default is not None:
            raise DuplicateDefaultCommandError(
                "command %r cannot be default, %r already is" % (command.name, self._default.name),
                argument=command.name,
                hint="mark a single command with default=True",
            )

        self._commands.append(command)
        if command.default:
            self._default = command
        return command

    def command(self, source=Unset, /, *args, **kwargs):
        """
        Register a callable as a command; usable directly or as a decorator.

        - schema.command(function, "name", "n", descr=...)
        - @schema.command / @schema.command("name", "n", help=True)

        Returns the Command (which forwards calls to the function).
        """
        if isinstance(source, str):
            args = (source, *args)
            source = Unset

        @rename("command")
        def wrapper(source, /):
            return self.add(Command(source, *args, **kwargs))

        return wrapper(source) if source is not Unset else wrapper

    def parameter(self, parameter, slot, /):
        """
        Register a global parameter written through slot on every dispatch.
        """
        if not hasattr(parameter, "__parameter__") or not callable(parameter.__parameter__):
            raise TypeError("Schema.parameter() first argument must be a parameter")
        if not isinstance(slot, Slot):
            raise TypeError("Schema.parameter() second argument must be a slot")
        parameter = parameter.__parameter__().ensure("global options")
        self._globals.append(GlobalParameter(parameter, slot))
        return parameter

    def discover(self, source, /):
        """
        Register every command and global parameter declared on source.

        - modules: their namespace, in definition order.
        - instances: the namespaces of their class MRO, bases first; a name
          redefined in a subclass keeps its first position but takes the most
          derived definition.

        Classes themselves are rejected: global parameters would overwrite the
        class attributes declaring them.
        """
        if isinstance(source, ModuleType):
            namespaces = [vars(source)]
        elif isinstance(source, type):
            raise TypeError("Schema.discover() argument must be an instance or a module, not a class")
        else:
            namespaces = [vars(base) for base in reversed(type(source).__mro__) if base is not object]

        names = {}
        for namespace in namespaces:
            for name, member in namespace.items():
                names[name] = member
        # dict keeps the first insertion position, the assignment the latest value

        for name, member in names.items():
            if isinstance(member, staticmethod | classmethod):
                member = member.__func__
            if isinstance(metadata := getattr(member, "__command__", None), Mapping):
                self.add(Command(getattr(source, name), **metadata))
            elif isinstance(member, Parameter):
                self.parameter(member, Slot(source, name))
        return self

    def build(self):
        """
        Freeze the registrations into a SchemaModel.
        """
        return SchemaModel(self._commands, self._default, self._globals)


def build(source, /):
    """
    Return a SchemaModel for source: a model, a Schema builder or any object to discover.
    """
    match source:
        case SchemaModel():
            return source
        case Schema():
            return source.build()
        case _:
            return Schema().discover(source).build()


__all__ = (
    "Schema",
    "SchemaModel",
    "build",
)
