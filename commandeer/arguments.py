r"""
Commandeer parameter specifications.

Overview
- Parameter: one named argument of a command, or a global option.
  • name/short: full and short option names (--name, -short).
  • descr: help text.
  • type: declared value type (see commandeer.coercion).
  • default: raw string, coerced lazily at dispatch time.
  • required: the option must be supplied.
  • validator: at most one value validator (see commandeer.validators).
  • unnamed: the value may also be given positionally after the command.
- Slot: a mutable reference (target + key) a global parameter is written through.
- GlobalParameter: a (parameter, slot) pair registered in a schema.

Declaring parameters
- As handler defaults, the signature defines the command surface:
    def complex(value1=Parameter("value1", type=int, validator=IntegerRange(10, 100)),
                value2=Parameter("value2", "v2", required=True)): ...
- As class attributes, they declare global parameters bound to that attribute:
    class Program:
        verbose = Parameter("verbose", "v", type=bool)
  Until the first dispatch writes it, the attribute reads as None on instances.

Metadata (sanitized on construction)
- name/short: Unset | str, no whitespace nor ':' and not starting with '-'.
  An Unset (or blank) name is accepted here and rejected by the schema builder.
- descr: Unset | str | Text, non-empty when provided.
- default: Unset | str.
- validator: Unset | callable | Iterable[callable]. More than one validator is
  accepted here and rejected by the schema builder as ambiguous.
"""
import functools
import operator
import re
from collections.abc import Iterable, MutableMapping
from typing import NamedTuple

from rich.text import Text

from .faults import ParameterNameUndefinedError, AmbiguousValidatorError
from .utils import *


class ArgumentType(type):
    """
    Metaclass giving specs a stable shape.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_" + name field.
    - Provide __repr__/__rich_repr__ built from __displayable__ (or
      __introspectable__ when not set).
    - Derive __typename__ (camel-case split with hyphens) for messages.
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


def _sanitize_name(cls, field, name, /):
    if not isinstance(name, str | Unset):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    if isinstance(name, str):
        if not (name := name.strip()):
            return None
        if not re.fullmatch(r"[^\s:-][^\s:]*", name):
            raise ValueError(f"{cls.__typename__} {field!r} cannot start with '-' nor contain spaces or ':'")
    return coalesce(name)


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate Parameter metadata in place.

    Raises
    - TypeError: wrong types (names, descr, default, validator, flags).
    - ValueError: malformed names or blank descriptions.
    """
    metadata["name"] = _sanitize_name(cls, "name", metadata["name"])
    metadata["short"] = _sanitize_name(cls, "short", metadata["short"])

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not isinstance(default := metadata["default"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'default' must be a raw string")
    metadata["default"] = coalesce(default)

    if metadata["type"] is None:
        raise TypeError(f"{cls.__typename__} 'type' cannot be None")

    # A single callable or a collection of them; the builder decides on ambiguity.
    match validator := metadata.pop("validator"):
        case UnsetType():
            validators = ()
        case _ if callable(validator):
            validators = (validator,)
        case Iterable():
            validators = tuple(validator)
            if not all(map(callable, validators)):
                raise TypeError(f"{cls.__typename__} 'validator' must be callable")
        case _:
            raise TypeError(f"{cls.__typename__} 'validator' must be callable")
    metadata["validators"] = validators


class Parameter(metaclass=ArgumentType):
    """
    Named argument specification (command parameter or global option).

    Properties
    - The names listed in __introspectable__ are read-only attributes.
    - names: the non-empty subset of (name, short), full name first.
    - validator: the single validator, or None.
    """

    __introspectable__ = (
        "name",
        "short",
        "descr",
        "type",
        "default",
        "required",
        "validators",
        "unnamed",
    )

    __displayable__ = (
        "name",
        "short",
        "type",
        "default",
        "required",
        "unnamed",
    )

    def __new__(
            cls,
            name=Unset,
            short=Unset,
            descr=Unset,
            type=str,
            default=Unset,
            required=False,
            validator=Unset,
            *,
            unnamed=False,
    ):
        """
        Construct a Parameter spec.

        Parameters
        - name: Unset | str
          Full option name (--name). Required by the schema builder.
        - short: Unset | str
          Short option name (-short).
        - descr: Unset | str | Text
          Help text.
        - type: declared type (str, bool, int, float, a coercion family, list[T]...)
        - default: Unset | str
          Raw default, coerced at dispatch when the option is omitted.
        - required: bool
          Omitting the option fails with MissingRequiredParameterError.
        - validator: Unset | callable | Iterable[callable]
          Value check returning an error message or None.
        - unnamed: bool
          Accept the value as a bare word after the command token.
        """
        metadata = {
            "name": name,
            "short": short,
            "descr": descr,
            "type": type,
            "default": default,
            "required": bool(required),
            "validator": validator,
            "unnamed": bool(unnamed),
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def names(self):
        return tuple(name for name in (self._name, self._short) if name)

    @property
    def validator(self):
        return self._validators[0] if self._validators else None

    def matches(self, name, /):
        """
        True when the option name is this parameter's full or short name.
        """
        return name in self.names

    def ensure(self, owner, /):
        """
        Schema checks run by the builder; owner names the declaring command or "global".

        Raises
        - ParameterNameUndefinedError: the parameter has no full name.
        - AmbiguousValidatorError: more than one validator was declared.
        """
        if not self._name:
            raise ParameterNameUndefinedError(
                "a parameter of %s has no name" % owner,
                argument=self._short,
                hint="give every parameter a name, for example Parameter(\"name\")",
            )
        if len(self._validators) > 1:
            raise AmbiguousValidatorError(
                "parameter %r of %s declares %d validators" % (self._name, owner, len(self._validators)),
                argument=self._name,
                hint="keep a single validator per parameter",
            )
        return self

    def __get__(self, instance, owner=None):
        # As a class attribute, reads as None until the dispatcher binds a value.
        if instance is None:
            return self
        return None

    def __parameter__(self):
        """
        Introspection hook: identify this spec as a Parameter.
        """
        return self


class Slot:
    """
    Mutable reference written by the dispatcher when binding a global parameter.

    - Slot(mapping, key): item assignment (mapping[key] = value).
    - Slot(object, attribute): attribute assignment (setattr).
    """
    __slots__ = ("_target", "_key")

    def __init__(self, target, key, /):
        if not isinstance(target, MutableMapping) and not isinstance(key, str):
            raise TypeError("Slot() attribute must be a string")
        self._target = target
        self._key = key

    @property
    def target(self):
        return self._target

    @property
    def key(self):
        return self._key

    def set(self, value, /):
        if isinstance(self._target, MutableMapping):
            self._target[self._key] = value
        else:
            setattr(self._target, self._key, value)

    def __repr__(self):
        return "slot(target=%s, key=%r)" % (type(self._target).__name__, self._key)


class GlobalParameter(NamedTuple):
    parameter: Parameter
    slot: Slot


__all__ = (
    "Parameter",
    "Slot",
    "GlobalParameter",
)

# Keep the metaclass out of star-imports and docs.
del ArgumentType
