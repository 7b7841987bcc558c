from __future__ import annotations


class MalformedGraphError(ValueError):
    """A map definition references unknown nodes or repeats node ids."""


class InvalidColorCountError(ValueError):
    pass


class CallerMisuseError(RuntimeError):
    """A solve sequence was advanced after finishing, or from two callers at once."""
