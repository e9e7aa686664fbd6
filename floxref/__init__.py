"""floxref — installable reference resolution for the flox CLI."""

__version__ = "0.1.0"

# Program name used in example invocations and hints.
PROG_NAME = "floxref"
