"""CSV dialect configuration for reading and writing tabular data."""

import csv
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class CSVDialect(BaseModel):
    """Options handed to the ``csv`` reader and writer.

    The defaults produce RFC 4180 output: comma delimiter, double-quote
    quoting with doubled quotes inside fields, minimal quoting and CRLF line
    endings.
    """

    delimiter: str = Field(default=",", description="Field separator")
    quote_char: str = Field(default='"', description="Quote character")
    escape_char: Optional[str] = Field(
        default=None, description="Escape character (None means double quoting)"
    )
    double_quote: bool = Field(
        default=True, description="Escape quotes inside fields by doubling them"
    )
    line_terminator: str = Field(
        default="\r\n", description="Row terminator used when writing"
    )
    skip_initial_space: bool = Field(
        default=False, description="Ignore whitespace right after the delimiter"
    )
    has_header: bool = Field(default=True, description="First row holds column names")
    encoding: str = Field(default="utf-8", description="Text encoding")

    @field_validator("delimiter", "quote_char")
    @classmethod
    def validate_single_char(cls, v):
        """Validate delimiter and quote are one character."""
        if len(v) != 1:
            raise ValueError("must be a single character")
        return v

    @field_validator("escape_char")
    @classmethod
    def validate_escape_char(cls, v):
        if v is not None and len(v) != 1:
            raise ValueError("must be a single character")
        return v

    @field_validator("line_terminator")
    @classmethod
    def validate_line_terminator(cls, v):
        """Validate line terminator is CRLF, LF or CR."""
        if v not in ("\r\n", "\n", "\r"):
            raise ValueError("line_terminator must be '\\r\\n', '\\n' or '\\r'")
        return v

    def reader_kwargs(self) -> dict[str, Any]:
        return {
            "delimiter": self.delimiter,
            "quotechar": self.quote_char,
            "escapechar": self.escape_char,
            "doublequote": self.double_quote,
            "skipinitialspace": self.skip_initial_space,
            "strict": True,
        }

    def writer_kwargs(self) -> dict[str, Any]:
        return {
            "delimiter": self.delimiter,
            "quotechar": self.quote_char,
            "escapechar": self.escape_char,
            "doublequote": self.double_quote,
            "lineterminator": self.line_terminator,
            "quoting": csv.QUOTE_MINIMAL,
        }
