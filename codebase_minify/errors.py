"""Exception types raised outside the scanner/transformer core."""

from pathlib import Path


class MinifyError(Exception):
    """Base class for codebase_minify errors."""


class UnknownLanguageError(MinifyError, ValueError):
    """A requested language name has no built-in profile."""

    def __init__(self, name: str):
        super().__init__(f"Unknown language '{name}'")
        self.name = name


class ReadFailure(MinifyError):
    """A source file could not be read or decoded."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Could not read {path}: {reason}")
        self.path = path
        self.reason = reason
