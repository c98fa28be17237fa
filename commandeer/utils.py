"""
Commandeer utilities (small shared building blocks).

Overview
- UnsetType / Unset
  • Singleton sentinel for “not provided”, distinct from None (None is a valid
    value for many parameters, e.g. a string option given without a value).
- coalesce(value, default=None)
  • Materialize Unset into a concrete default while preserving None/0/"".
- rename(callable, name) / @rename("name")
  • Give generated callables a stable __name__/__qualname__.
- mirror("attr")
  • Read-only property over a private backing field (self._attr); containers are
    returned as fresh copies so the public state of a spec cannot be mutated.
- program()
  • Program name used in usage lines and fault headers.

Names outside __all__ are internal.
"""
import builtins
import functools
import os.path
import sys
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel type for a value that was not provided.

    Characteristics
    - Falsey, but not equal to None, 0 or "".
    - repr() is "Unset".
    - Singleton: UnsetType() always returns the same instance.
    - Sealed: cannot be subclassed.
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return object unless it is Unset, in which case return default.

    Falsey values are preserved:
    - coalesce(Unset, "x") -> "x"
    - coalesce(None, "x")  -> None
    - coalesce("", "x")    -> ""
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or build a decorator doing so.

    Forms
    - rename(callable, name) -> callable (renamed in place)
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


def program():
    """
    Name shown in usage lines and fault headers.

    Lookup order: __main__.__prog__, the basename of sys.argv[0], then "program".
    """
    return getattr(__import__("__main__"), "__prog__", None) or os.path.basename(sys.argv[0]) or "program"


def _immortalize(object):
    """
    Copy containers recursively (sequences become lists, mappings dicts, sets sets).

    Strings and every other object are returned as-is.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set):
        return set(map(_immortalize, object))
    return object


def mirror(name, /):
    """
    Build a read-only property exposing self._{name}.

    Containers are handed out as copies (see _immortalize), so callers can
    iterate and index freely without touching the backing state.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()
"""
Sentinel for “not provided”. Use coalesce(value, default) to materialize it.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "program",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
