"""
Input sanitization for user supplied text.

Rejects:
- Null bytes in strings
- Control characters (except newlines/tabs in message text)
- Path traversal (../ sequences) in single-line fields and filenames
- Script/XSS payloads (basic detection) outside message text
"""
import re
from typing import Optional

MAX_MESSAGE_LENGTH = 5000


class InputSanitizer:
    """Validates and sanitizes user input."""

    NULL_BYTE_PATTERN = re.compile(r'\x00')
    CONTROL_CHAR_PATTERN = re.compile(r'[\x00-\x08\x0b-\x0c\x0e-\x1f\x7f]')  # Except \t=0x09, \n=0x0a, \r=0x0d
    LINE_BREAK_PATTERN = re.compile(r'[\r\n]')
    PATH_TRAVERSAL_PATTERN = re.compile(r'\.\.[/\\]')
    SCRIPT_PATTERN = re.compile(r'<script|javascript:|onerror=|onclick=|<iframe|<embed', re.IGNORECASE)

    @staticmethod
    def sanitize_string(
        value: str,
        max_length: Optional[int] = None,
        allow_newlines: bool = False,
        check_paths: bool = True,
        check_scripts: bool = True,
    ) -> str:
        """
        Sanitize string input.

        Args:
            value: Input string
            max_length: Optional max length
            allow_newlines: Allow \\n and \\r characters (for message text)
            check_paths: Reject ../ sequences
            check_scripts: Reject script/XSS markers

        Returns:
            The unchanged string

        Raises:
            ValueError: If input contains dangerous patterns
        """
        if not isinstance(value, str):
            raise ValueError("Input must be string")

        if InputSanitizer.NULL_BYTE_PATTERN.search(value):
            raise ValueError("Null bytes not allowed")

        if InputSanitizer.CONTROL_CHAR_PATTERN.search(value):
            raise ValueError("Control characters not allowed")

        if not allow_newlines and InputSanitizer.LINE_BREAK_PATTERN.search(value):
            raise ValueError("Line breaks not allowed")

        if check_paths and InputSanitizer.PATH_TRAVERSAL_PATTERN.search(value):
            raise ValueError("Path traversal patterns not allowed")

        if check_scripts and InputSanitizer.SCRIPT_PATTERN.search(value):
            raise ValueError("Script/XSS patterns not allowed")

        if max_length and len(value) > max_length:
            raise ValueError(f"Input exceeds max length of {max_length}")

        return value

    @staticmethod
    def sanitize_username(value: str) -> str:
        """Validate username format (alphanumeric + underscore/dash)."""
        value = value.strip()
        if len(value) < 3:
            raise ValueError("Username must be between 3 and 30 characters")

        sanitized = InputSanitizer.sanitize_string(value, max_length=30)

        if not re.match(r'^[a-zA-Z0-9_\-]+$', sanitized):
            raise ValueError("Username can only contain letters, numbers, underscores, and hyphens")

        return sanitized

    @staticmethod
    def sanitize_filename(filename: str) -> str:
        """Prevent path traversal in uploaded filenames."""
        if not filename or len(filename) > 255:
            raise ValueError("Invalid filename length")

        filename = filename.replace('\\', '/').split('/')[-1]

        if '..' in filename:
            raise ValueError("Path traversal not allowed")

        # Allow alphanumeric, dot, dash, underscore, space, parentheses
        filename = re.sub(r'[^a-zA-Z0-9._\-() ]', '', filename)

        filename = re.sub(r'[ ]{2,}', ' ', filename)
        filename = re.sub(r'[.]{2,}', '.', filename)

        if not filename:
            raise ValueError("Filename becomes empty after sanitization")

        return filename

    @staticmethod
    def sanitize_message_text(value: str) -> str:
        """
        Sanitize chat message text (newlines allowed, trailing spaces trimmed per line).

        Markup is kept as typed; renderers escape it.
        """
        sanitized = InputSanitizer.sanitize_string(
            value,
            max_length=MAX_MESSAGE_LENGTH,
            allow_newlines=True,
            check_paths=False,
            check_scripts=False,
        )

        lines = [line.rstrip() for line in sanitized.split('\n')]
        return '\n'.join(lines).strip()
