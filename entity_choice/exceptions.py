from __future__ import annotations

from collections.abc import Iterable
from typing import Any


__all__ = (
    "FormError",
    "InvalidOptionsError",
    "TransformationFailedError",
    "UnexpectedTypeError",
)


class FormError(Exception):
    pass


class InvalidOptionsError(FormError):
    options: tuple[str, ...]

    def __init__(self, message: str, options: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.options = tuple(options)


class TransformationFailedError(FormError):
    value: Any

    def __init__(self, message: str, value: Any = None) -> None:
        super().__init__(message)
        self.value = value


class UnexpectedTypeError(FormError, TypeError):
    def __init__(self, value: Any, expected_type: str) -> None:
        given = type(value).__name__
        super().__init__(
            f'Expected argument of type "{expected_type}", "{given}" given'
        )
