"""
Value validators.

A validator is a stateless callable receiving an already coerced value and
returning None when the value is acceptable, or a short lower-cased message
explaining the problem otherwise. A parameter carries at most one validator.

Variants
- NonEmpty(): strings that are not blank.
- Regex(pattern): strings fully matching a regular expression.
- IntegerRange(min, max): integers within an inclusive range.
- FloatRange(min, max): real numbers within an inclusive range.
"""
import math
import numbers
import operator
import re
from abc import ABC, abstractmethod

_LONG_MIN = -(1 << 63)
_LONG_MAX = (1 << 63) - 1


class Validator(ABC):
    """
    Base type of every validator.

    Subclasses implement __call__(value) -> str | None.
    """
    __slots__ = ()

    @abstractmethod
    def __call__(self, value, /):
        raise NotImplementedError

    def __rich_repr__(self):
        yield from ()

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ", ".join("%s=%r" % pair for pair in self.__rich_repr__()))

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return tuple(self.__rich_repr__()) == tuple(other.__rich_repr__())

    def __hash__(self):
        return hash((type(self), tuple(self.__rich_repr__())))


class NonEmpty(Validator):
    __slots__ = ()

    def __call__(self, value, /):
        if value is None or not str(value).strip():
            return "value must not be empty"
        return None


class Regex(Validator):
    """
    Full-match validator (the whole value must match, not just a prefix).
    """
    __slots__ = ("_pattern",)

    def __init__(self, pattern, /):
        if not isinstance(pattern, str):
            raise TypeError("Regex() argument must be a string")
        try:
            self._pattern = re.compile(pattern)
        except re.error as error:
            raise ValueError("Regex() argument must be a valid regular expression (%s)" % error) from None

    @property
    def pattern(self):
        return self._pattern.pattern

    def __call__(self, value, /):
        if value is None:
            return "value must not be null"
        if not self._pattern.fullmatch(str(value)):
            return "value doesn't match the required pattern %r" % self.pattern
        return None

    def __rich_repr__(self):
        yield "pattern", self.pattern


class IntegerRange(Validator):
    __slots__ = ("_min", "_max")

    def __init__(self, min=_LONG_MIN, max=_LONG_MAX):
        try:
            self._min = operator.index(min)
            self._max = operator.index(max)
        except TypeError:
            raise TypeError("IntegerRange() bounds must be integers") from None
        if self._min > self._max:
            raise ValueError("IntegerRange() 'min' cannot be greater than 'max'")

    @property
    def min(self):
        return self._min

    @property
    def max(self):
        return self._max

    def __call__(self, value, /):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            return "value must be an integer"
        if not self._min <= value <= self._max:
            return "value must be between %d and %d" % (self._min, self._max)
        return None

    def __rich_repr__(self):
        yield "min", self._min
        yield "max", self._max


class FloatRange(Validator):
    __slots__ = ("_min", "_max")

    def __init__(self, min=-math.inf, max=math.inf):
        if isinstance(min, bool) or isinstance(max, bool):
            raise TypeError("FloatRange() bounds must be real numbers")
        if not isinstance(min, numbers.Real) or not isinstance(max, numbers.Real):
            raise TypeError("FloatRange() bounds must be real numbers")
        if math.isnan(min) or math.isnan(max):
            raise ValueError("FloatRange() bounds cannot be nan")
        if min > max:
            raise ValueError("FloatRange() 'min' cannot be greater than 'max'")
        self._min = float(min)
        self._max = float(max)

    @property
    def min(self):
        return self._min

    @property
    def max(self):
        return self._max

    def __call__(self, value, /):
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            return "value must be a number"
        # nan fails both comparisons, so it is rejected here as well
        if not self._min <= value <= self._max:
            return "value must be between %.3f and %.3f" % (self._min, self._max)
        return None

    def __rich_repr__(self):
        yield "min", self._min
        yield "max", self._max


__all__ = (
    "Validator",
    "NonEmpty",
    "Regex",
    "IntegerRange",
    "FloatRange",
)
