"""Custom exceptions for depsupdater."""


class DepsUpdaterError(Exception):
    """Base exception for all depsupdater errors."""


class VersionMismatchError(DepsUpdaterError):
    """Raised when the text at a recorded version location no longer matches."""

    def __init__(self, file_path: str, line: int, column: int, expected: str, found: str):
        self.file_path = file_path
        self.line = line
        self.column = column
        self.expected = expected
        self.found = found
        super().__init__(
            f"{file_path}:{line}:{column}: expected version {expected!r}, found {found!r}"
        )


class UnknownDependencyTypeError(DepsUpdaterError):
    """Raised when a dependency type filter names no known ecosystem."""

    def __init__(self, value: str, known: list[str]):
        self.value = value
        self.known = known
        super().__init__(f"unknown dependency type {value!r} (expected one of: {', '.join(known)})")


class RegistryProtocolError(DepsUpdaterError):
    """Raised when a registry answers with a document we cannot use."""
