"""
Result type shared by use cases and repositories.

A Result is either ok (carrying a value) or an error (carrying an Error).
Callers check `is_ok()` / `is_err()` and then read `value` or `error`.
"""

from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class Error:
    """Error with a machine-readable code and a human-readable message"""

    def __init__(self, code: str, message: str = "", details: Optional[Any] = None):
        self.code = code
        self.message = message
        self.details = details

    def __repr__(self) -> str:
        return f"Error(code={self.code!r}, message={self.message!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Error):
            return NotImplemented
        return self.code == other.code and self.message == other.message


class Result(Generic[T]):
    def __init__(self, value: Optional[T] = None, error: Optional[Error] = None):
        self._value = value
        self._error = error

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T:
        if self._error is not None:
            raise ValueError(f"Cannot read value of an error result: {self._error!r}")
        return self._value

    @property
    def error(self) -> Error:
        if self._error is None:
            raise ValueError("Cannot read error of an ok result")
        return self._error

    def __repr__(self) -> str:
        if self.is_ok():
            return f"Ok({self._value!r})"
        return f"Err({self._error!r})"


class Return:
    """Factory for Result values"""

    @staticmethod
    def ok(value: Optional[T] = None) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def err(error: Error) -> Result[Any]:
        return Result(error=error)
