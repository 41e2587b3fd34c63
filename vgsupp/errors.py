"""Exceptions raised while reading suppression files."""

from __future__ import annotations

from typing import Optional


class SuppressionParseError(ValueError):
    """A parse failure located at a line of the input.

    Attributes:
        line_number: 1-based line of the offending text.  When the
            input ends inside a block this is the line of the block's
            opening brace.
        message: Description of the defect.
        filename: Path of the file being parsed, if known.
    """

    def __init__(self, line_number: int, message: str, filename: Optional[str] = None) -> None:
        super().__init__(line_number, message)
        self.line_number = line_number
        self.message = message
        self.filename = filename

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line_number}: {self.message}"
        return f"line {self.line_number}: {self.message}"
