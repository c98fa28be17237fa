"""
Tokenizer for the argument vector.

Syntax (bit-exact)
- --name:value, -short:value  → Option(name, value)
- --name, -short              → Option(name, None)   (value absent)
- --name:                     → Option(name, "")     (value present but empty)
- anything not starting with '-' is a bare word (command name or unnamed value).

Only the first ':' after the name separates it from the value, so values may
contain colons themselves (--url:http://host:80). A ':' right after the prefix
does not split: the name is then the whole remaining text.
"""
from typing import NamedTuple


class Option(NamedTuple):
    """
    One parsed option token. value is None when the token carried no ':'.
    """
    name: str
    value: str | None = None


def is_option(token, /):
    return token.startswith("-")


def parse_option(token, /):
    """
    split an option token into its name and value.

    - the '--' prefix takes precedence over '-'.
    - the first ':' at index > 0 of the remaining text splits name from value.
    """
    if not isinstance(token, str):
        raise TypeError("parse_option() argument must be a string")

    if token.startswith("--"):
        token = token[2:]
    elif token.startswith("-"):
        token = token[1:]

    name, separator, value = token.partition(":")
    if separator and name:
        return Option(name, value)
    return Option(token)


__all__ = (
    "Option",
    "is_option",
    "parse_option",
)
