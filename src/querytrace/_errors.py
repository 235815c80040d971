"""Decoration-time errors raised by ``instrument_query``."""

from __future__ import annotations


class TransformError(Exception):
    """Base class for errors raised while decorating a function."""

    def __init__(self, message: str, *, function: str | None = None) -> None:
        super().__init__(message)
        self.function = function


class TargetSyntaxError(TransformError):
    """The decorator was applied to something that is not a plain or async function."""


class UnknownParameterError(TransformError):
    """An option names a parameter the function does not have."""

    def __init__(self, name: str, *, function: str, option: str = "skip") -> None:
        super().__init__(
            f"{option}: {function}() has no parameter named {name!r}",
            function=function,
        )
        self.name = name
        self.option = option


class UnknownOptionError(TransformError):
    """An unrecognised keyword was passed to the decorator."""

    def __init__(self, key: str, *, function: str) -> None:
        super().__init__(
            f"unknown instrument_query option {key!r} on {function}()",
            function=function,
        )
        self.key = key


class OptionValueError(TransformError):
    """A recognised option was given a value of the wrong type."""

    def __init__(self, key: str, message: str, *, function: str) -> None:
        super().__init__(f"{key}: {message} (on {function}())", function=function)
        self.key = key


class FieldConflictError(TransformError):
    """A captured parameter would overwrite a fixed or extra span field."""

    def __init__(self, name: str, *, function: str) -> None:
        super().__init__(
            f"parameter {name!r} of {function}() collides with a reserved span "
            f"field; add it to skip",
            function=function,
        )
        self.name = name
