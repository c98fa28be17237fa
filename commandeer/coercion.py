"""
Type coercion of raw option values.

Declared types
- str: the raw value passes through unchanged (None included).
- bool: an absent value means True; otherwise "true"/"false" (case-insensitive).
- integers: int (unbounded) and the sized families Byte, Short, Int, Long.
- reals: float, and the Float (single precision) / Double markers.
- arrays: list[T] or tuple[T, ...] of one of the above, written comma-separated.

coerce() raises dispatch faults (EmptyParameterError, MalformedValueError,
UnsupportedParameterTypeError); zero() gives the value used when an optional
parameter without default is omitted; typename() gives the label shown in help.
"""
from abc import ABC, abstractmethod
import math
import re
import struct
import typing

from .faults import EmptyParameterError, MalformedValueError, UnsupportedParameterTypeError


class Family(ABC):
    """
    Numeric family marker (usable as a declared parameter type).
    """
    __slots__ = ("_name",)

    def __init__(self, name, /):
        self._name = name

    @property
    def name(self):
        return self._name

    def __repr__(self):
        return self._name

    @abstractmethod
    def parse(self, raw, /):
        """
        Parse a non-empty raw value, raising ValueError when it is malformed.
        """


class Integral(Family):
    __slots__ = ("_bits",)

    def __init__(self, name, /, bits=None):
        super().__init__(name)
        self._bits = bits

    @property
    def bounds(self):
        if self._bits is None:
            return None
        return -(1 << (self._bits - 1)), (1 << (self._bits - 1)) - 1

    def parse(self, raw, /):
        if not re.fullmatch(r"[+-]?[0-9]+", raw):
            raise ValueError("%r is not a valid %s" % (raw, self._name))
        value = int(raw)
        if bounds := self.bounds:
            low, high = bounds
            if not low <= value <= high:
                raise ValueError("%r is out of range for %s (%d to %d)" % (raw, self._name, low, high))
        return value


class Floating(Family):
    __slots__ = ("_single",)

    def __init__(self, name, /, single=False):
        super().__init__(name)
        self._single = single

    def parse(self, raw, /):
        if "_" in raw:
            raise ValueError("%r is not a valid %s" % (raw, self._name))
        try:
            value = float(raw)
        except ValueError:
            raise ValueError("%r is not a valid %s" % (raw, self._name)) from None
        if not self._single or not math.isfinite(value):
            return value
        try:
            return struct.unpack("<f", struct.pack("<f", value))[0]
        except OverflowError:
            return math.copysign(math.inf, value)


Integer = Integral("int")
Byte = Integral("byte", 8)
Short = Integral("short", 16)
Int = Integral("int32", 32)
Long = Integral("long", 64)
Float = Floating("float32", single=True)
Double = Floating("float")

_FAMILIES = {int: Integer, float: Double}


def _family(type, /):
    if isinstance(type, Family):
        return type
    try:
        return _FAMILIES.get(type)
    except TypeError:  # unhashable declarations
        return None


def _element(type, /):
    """
    return (container, element type) for array declarations, None otherwise.
    """
    origin = typing.get_origin(type)
    arguments = typing.get_args(type)
    if origin is list and len(arguments) == 1:
        return list, arguments[0]
    if origin is tuple and len(arguments) == 2 and arguments[1] is Ellipsis:
        return tuple, arguments[0]
    return None


def is_array(type, /):
    """
    True for list[T] and tuple[T, ...] declarations.
    """
    return _element(type) is not None


def _scalar(type, /):
    return type is str or type is bool or _family(type) is not None


def supported(type, /):
    """
    True when coerce() knows how to handle the declared type.
    """
    if array := _element(type):
        return _scalar(array[1])
    return _scalar(type)


def _coerce_scalar(type, raw, name):
    if type is str:
        return raw
    if type is bool:
        if raw is None:
            return True
        match raw.lower():
            case "true":
                return True
            case "false":
                return False
        raise MalformedValueError(
            "option %r expects 'true' or 'false', got %r" % (name, raw),
            argument=name,
            hint="use --%s:true, --%s:false or just --%s" % (name, name, name),
        )
    if raw is None:
        raise EmptyParameterError(
            "option %r cannot be empty" % name,
            argument=name,
            hint="give it a value, for example --%s:<value>" % name,
        )
    family = _family(type)
    try:
        return family.parse(raw)
    except ValueError as error:
        raise MalformedValueError(
            "option %r has a malformed value: %s" % (name, error),
            argument=name,
            hint="pass a valid %s, for example --%s:0" % (family.name, name),
        ) from None


def coerce(type, raw, /, name=None):
    """
    convert a raw option value to the declared type.

    parameters
    - type: declared type (see module docstring).
    - raw: str | None (None means the option was given without a value).
    - name: option name reported in faults.

    raises
    - UnsupportedParameterTypeError: the declared type is not supported.
    - EmptyParameterError: a numeric or array option was given without a value.
    - MalformedValueError: the text does not parse as the declared type.
    """
    if not supported(type):
        raise UnsupportedParameterTypeError(
            "option %r has an unsupported type %r" % (name, typename(type)),
            argument=name,
            hint="declare it as str, bool, an integer or real family, or an array of those",
        )
    if array := _element(type):
        container, element = array
        if raw is None:
            raise EmptyParameterError(
                "option %r cannot be empty" % name,
                argument=name,
                hint="give it comma-separated values, for example --%s:a,b" % name,
            )
        return container(_coerce_scalar(element, part, name) for part in (raw.split(",") if raw else ()))
    return _coerce_scalar(type, raw, name)


def zero(type, /):
    """
    zero value of a declared type: "", False, numeric zero, or None otherwise.
    """
    if type is str:
        return ""
    if type is bool:
        return False
    match _family(type):
        case Integral():
            return 0
        case Floating():
            return 0.0
    return None


def typename(type, /):
    """
    label of a declared type, as shown in help.
    """
    if array := _element(type):
        container, element = array
        return "%s[%s]" % (container.__name__, typename(element))
    if family := _family(type):
        return family.name
    return getattr(type, "__name__", None) or repr(type)


__all__ = (
    "Family",
    "Integral",
    "Floating",
    "Integer",
    "Byte",
    "Short",
    "Int",
    "Long",
    "Float",
    "Double",
    "is_array",
    "supported",
    "coerce",
    "zero",
    "typename",
)
