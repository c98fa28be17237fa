"""
Help text rendering.

Layout (plain text, one entry per line)

    Usage: {prog} <command> [options...]

    Global options:
      --name, -short    description [type, Required, Default=x]

    Commands:
      name (short)      description
        --name, -short    description [type, Unnamed]

- global option names are padded to 18 columns, command names (with their two
  leading spaces) and command parameter names to 20.
- a name that fills its column is followed by a single space.
- the bracketed attributes list the type label, then Required, Default=<raw>
  and Unnamed when they apply.
- every command block ends with an empty line.
"""
from .coercion import typename
from .utils import *


def _column(text, width, /):
    # always one space before the next column
    return text.ljust(width) if len(text) < width else text + " "


def _parameter(parameter, width, /):
    names = "--%s" % parameter.name
    if parameter.short:
        names += ", -%s" % parameter.short

    attributes = [typename(parameter.type)]
    if parameter.required:
        attributes.append("Required")
    if parameter.default:
        attributes.append("Default=%s" % parameter.default)
    if parameter.unnamed:
        attributes.append("Unnamed")

    return "%s%s [%s]" % (_column(names, width), parameter.descr or "", ", ".join(attributes))


def _command(command, /):
    label = "  %s" % command.name
    if command.short:
        label += " (%s)" % command.short
    return ("%s%s" % (_column(label, 20), command.descr or "")).rstrip()


def render(model, /, prog=Unset):
    """
    Render the help text of a schema model.

    Parameters
    - model: SchemaModel
    - prog: Unset | str
      Program name in the usage line (defaults to program()).
    """
    lines = [
        "Usage: %s <command> [options...]" % (coalesce(prog, None) or program()),
        "",
        "Global options:",
    ]
    for entry in model.globals:
        lines.append("  " + _parameter(entry.parameter, 18))

    lines.append("")
    lines.append("Commands:")
    for command in model.commands:
        lines.append(_command(command))
        for parameter in command.parameters:
            lines.append("    " + _parameter(parameter, 20))
        lines.append("")

    return "\n".join(lines) + "\n"


__all__ = (
    "render",
)
