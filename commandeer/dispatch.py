"""
Commandeer dispatcher: route an argument vector to one command handler.

Flow of a dispatch
1) scan: one pass over the tokens.
   • option tokens (-x, --name[:value]) go into a name → Option map, last one wins;
   • the first bare word names the command, the next ones fill its unnamed
     parameters in declaration order.
2) route: look the command up (case-insensitive), fall back to the default one.
3) check: every option must belong to a global parameter or to the command.
4) resolve: full name, short name, required check, default, zero value; then
   coercion and validation.
5) invoke: write every global parameter through its slot, then call the
   handler (the help command receives the rendered help text instead).

Faults
- every dispatch fault goes through Dispatcher.trigger(), which stamps the
  runtime options (prog, shell, fancy, colorful) on it before surfacing it.
- outside shell mode they are raised; in shell mode they are printed with rich
  on stderr and the process exits with status 1.
- a non-commandeer exception escaping the handler becomes an InvokeError whose
  __cause__ is the original exception.
"""
import difflib
import shlex
import sys
from collections import deque
from collections.abc import Iterable

from .coercion import coerce, zero, is_array
from .faults import *
from .help import render
from .schema import build
from .tokens import Option, is_option, parse_option
from .utils import *


def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.
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

    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def _suggest(name, candidates, /):
    """
    'did you mean ...' hint for a misspelled name, or None.
    """
    if suggestions := difflib.get_close_matches(name, list(candidates), 3):
        return "did you mean %s?" % " or ".join(map(repr, suggestions))
    return None


class Dispatcher:
    """
    Runs dispatches against a schema model built once from source.

    Parameters
    - source: SchemaModel | Schema | any object to discover (see commandeer.schema.build)
    - prog: Unset | str
      Program name in faults and help (defaults to commandeer.utils.program()).
    - shell: bool
      Print faults on stderr and exit(1) instead of raising.
    - fancy: bool
      Frame printed faults in a rich Panel.
    - colorful: bool
      Colorize printed faults.

    Schema errors raised while building propagate from the constructor.
    """

    def __init__(self, source, /, *, prog=Unset, shell=False, fancy=False, colorful=False):
        self._model = build(source)
        self._prog = prog
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

    @property
    def model(self):
        return self._model

    @property
    def prog(self):
        return coalesce(self._prog, None) or program()

    @property
    def shell(self):
        return self._shell

    @property
    def fancy(self):
        return self._fancy

    @property
    def colorful(self):
        return self._colorful

    def help(self):
        """
        Rendered help text of the schema (see commandeer.help.render).
        """
        return render(self._model, prog=self.prog)

    def trigger(self, fault, /, **options):
        if (
                not hasattr(fault, "__trigger__") or
                not callable(fault.__trigger__) or
                not hasattr(fault, "__replace__") or
                not callable(fault.__replace__)
        ):
            raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
        trigger(fault, **options, prog=self.prog, shell=self._shell, fancy=self._fancy, colorful=self._colorful)

    def _hint(self, subject, /):
        for command in self._model.commands:
            if command.help:
                return "run '%s %s' to list the available %s" % (self.prog, command.name, subject)
        return None

    def _remember(self, options, option, index, /):
        # last occurrence wins
        if option.name in options:
            self.trigger(RepeatedOptionWarning(
                "option %r at %s position overrides an earlier value" % (option.name, _ordinal(index)),
                argument=option.name,
                hint="pass each option once; only the last value is used",
            ))
        options[option.name] = option

    def _scan(self, tokens):
        """
        Single pass over the tokens.

        Returns (command, options) where command is the routed Command (or None
        when no bare word was given) and options maps names to their last Option.
        """
        options = {}
        command = None
        unnamed = deque()

        for index, token in enumerate(tokens, start=1):
            if not isinstance(token, str):
                raise TypeError("dispatch() argument must be a sequence of strings")

            if is_option(token):
                self._remember(options, parse_option(token), index)
            elif command is None:
                if (command := self._model.find(token)) is None:
                    hint = _suggest(token.lower(), (name for each in self._model.commands for name in each.names))
                    self.trigger(UnknownCommandError(
                        "unknown command %r at %s position" % (token, _ordinal(index)),
                        argument=token,
                        hint=hint or self._hint("commands"),
                    ))
                unnamed.extend(parameter for parameter in command.parameters if parameter.unnamed)
            elif unnamed:
                self._remember(options, Option(unnamed.popleft().name, token), index)
            else:
                self.trigger(DuplicateCommandError(
                    "unexpected command %r at %s position, %r was already given" % (
                        token, _ordinal(index), command.name
                    ),
                    argument=token,
                    hint="give a single command per invocation",
                ))

        return command, options

    def _check(self, command, options):
        parameters = [*(entry.parameter for entry in self._model.globals), *command.parameters]
        known = [name for parameter in parameters for name in parameter.names]
        for name in options:
            if name not in known:
                self.trigger(UnknownParameterError(
                    "unknown option %r for command %r" % (name, command.name),
                    argument=name,
                    hint=_suggest(name, known) or self._hint("options"),
                ))

    def _resolve(self, parameter, options):
        """
        Value of one parameter: full name, short name, required, default, zero.
        """
        full = options.get(parameter.name)
        short = options.get(parameter.short) if parameter.short else None

        if full is not None and short is not None:
            self.trigger(ShadowedOptionWarning(
                "option %r shadows %r, both were given" % (parameter.name, parameter.short),
                argument=parameter.name,
                hint="pass either --%s or -%s" % (parameter.name, parameter.short),
            ))

        if full is not None:
            name, raw = parameter.name, full.value
        elif short is not None:
            name, raw = parameter.short, short.value
        elif parameter.required:
            self.trigger(MissingRequiredParameterError(
                "missing required option %r" % parameter.name,
                argument=parameter.name,
                hint="pass it as --%s:<value>" % parameter.name,
            ))
        elif parameter.default is not None:
            name, raw = parameter.name, parameter.default
        else:
            name, raw = parameter.name, Unset

        try:
            value = coerce(parameter.type, raw, name=name) if raw is not Unset else zero(parameter.type)
        except DispatchError as fault:
            self.trigger(fault)

        # zero values are validated too; arrays per element (None has none)
        if (validator := parameter.validator) is not None:
            if is_array(parameter.type):
                items = () if value is None else value
            else:
                items = (value,)
            for item in items:
                if (message := validator(item)) is not None:
                    self.trigger(ValidationError(
                        message,
                        argument=parameter.name,
                        hint="check the value given to --%s" % parameter.name,
                    ))
        return value

    def dispatch(self, args, /):
        """
        Run one dispatch and return the handler's result.

        Parameters
        - args: Sequence[str], the argument vector without the program name.

        Raises
        - DispatchError subclasses (outside shell mode).
        - TypeError when args is not a sequence of strings.
        """
        if isinstance(args, str) or not isinstance(args, Iterable):
            raise TypeError("dispatch() argument must be a sequence of strings")

        command, options = self._scan(args)
        if command is None and (command := self._model.default) is None:
            self.trigger(NoCommandSpecifiedError(
                "no command specified",
                hint=self._hint("commands"),
            ))

        self._check(command, options)
        values = [self._resolve(parameter, options) for parameter in command.parameters]
        bindings = [(entry.slot, self._resolve(entry.parameter, options)) for entry in self._model.globals]

        try:
            for slot, value in bindings:
                slot.set(value)
            if command.help:
                return command(self.help())
            args, kwargs = command.bind(values)
            return command(*args, **kwargs)
        except CommandException as fault:
            self.trigger(fault)
        except Exception as exception:
            self.trigger(InvokeError(
                "command %r failed: %s" % (command.name, exception),
                argument=command.name,
                hint="the handler raised %s" % type(exception).__name__,
                cause=exception,
            ))

    def __invoke__(self, prompt=Unset):
        """
        Dispatch a prompt: Unset reads sys.argv[1:], a str is split with shlex,
        any other iterable is used as is (blank items dropped).
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            def _sanitized(iterable):
                for item in iterable:
                    if not isinstance(item, str):
                        raise TypeError(f"__invoke__() argument must be a string or an iterable of strings")
                    if item := item.strip():
                        yield item
            tokens = list(_sanitized(prompt))
        else:
            raise TypeError(f"__invoke__() argument must be a string or an iterable of strings")
        return self.dispatch(tokens)


def dispatch(source, args, /, **options):
    """
    Build a Dispatcher for source and dispatch args once.
    """
    return Dispatcher(source, **options).dispatch(args)


def invoke(object, prompt=Unset, /, **options):
    """
    Shell-mode runner: dispatch prompt (argv by default) against object.

    - object: a Dispatcher (used as is), or any schema source wrapped in a
      Dispatcher with shell=True unless options say otherwise.
    - prompt: Unset | str | Iterable[str] (see Dispatcher.__invoke__).

    Faults are printed on stderr and the process exits with status 1.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        if options:
            raise TypeError("invoke() options cannot be given with a dispatcher")
        return object.__invoke__(prompt)
    return Dispatcher(object, **{"shell": True} | options).__invoke__(prompt)


__all__ = (
    "Dispatcher",
    "dispatch",
    "invoke",
)
