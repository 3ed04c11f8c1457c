"""Exceptions raised at the I/O boundary of the payments engine."""

from typing import Optional


class PaymentsError(Exception):
    """Base exception for all payments engine errors."""


class MalformedInputError(PaymentsError):
    """The input stream does not follow the transaction CSV schema."""

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class OutputError(PaymentsError):
    """The account snapshot could not be written."""
