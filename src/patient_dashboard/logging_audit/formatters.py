"""Custom log formatters for Patient Dashboard.

This module provides specialized formatters for logging, including PII redaction.
"""

import logging
import re
from typing import List, Tuple

# Double-quoted JSON string value, escaped quotes included
_JSON_STRING = r'"(?:[^"\\]|\\.)*"'


class PIIRedactingFormatter(logging.Formatter):
    """Formatter that redacts patient identifying details from log messages.

    Covers names logged as ``name=...`` or ``Patient: First Last``, dates of
    birth logged as ``date_of_birth=...`` or ``dob=...``, ZIP codes logged
    as ``zip_code=...``, and the same fields inside JSON request and response
    bodies.

    Attributes:
        redact_pii: Whether to enable PII redaction
        patterns: List of (regex_pattern, replacement_text) tuples for redaction

    Example:
        >>> formatter = PIIRedactingFormatter(
        ...     fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        ...     redact_pii=True
        ... )
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
    """

    def __init__(
        self,
        fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt: str | None = None,
        redact_pii: bool = False,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.redact_pii = redact_pii

        self.patterns: List[Tuple[re.Pattern[str], str]] = [
            # first_name=Jane, last_name='Doe', middle_name="Q"
            (
                re.compile(r'\b((?:first_|middle_|last_)?name)=["\']?[^"\'\s,|]+["\']?'),
                r'\1=[NAME-REDACTED]',
            ),
            # "Patient: John Doe"
            (
                re.compile(r'(Patient):\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)+'),
                r'\1: [NAME-REDACTED]',
            ),
            (
                re.compile(r'\b(date_of_birth|dob)=["\']?\d{4}-\d{2}-\d{2}["\']?'),
                r'\1=[DOB-REDACTED]',
            ),
            (
                re.compile(r'\b(zip_code)=["\']?\d{5}["\']?'),
                r'\1=[ZIP-REDACTED]',
            ),
            # JSON bodies: {"first_name": "Jane", "zip_code": "62701"}
            (
                re.compile(r'("(?:first_|middle_|last_)name")\s*:\s*' + _JSON_STRING),
                r'\1: "[NAME-REDACTED]"',
            ),
            (
                re.compile(r'("date_of_birth")\s*:\s*' + _JSON_STRING),
                r'\1: "[DOB-REDACTED]"',
            ),
            (
                re.compile(r'("zip_code")\s*:\s*' + _JSON_STRING),
                r'\1: "[ZIP-REDACTED]"',
            ),
        ]

    def format(self, record: logging.LogRecord) -> str:
        original = super().format(record)

        if self.redact_pii:
            for pattern, replacement in self.patterns:
                original = pattern.sub(replacement, original)

        return original
