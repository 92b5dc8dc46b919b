class Pro2OlError(Exception):
    """Base exception for pro2ol."""


class ChordProParseError(Pro2OlError):
    """Raised when ChordPro input cannot be read into a song."""

    def __init__(self, line_no: int, reason: str):
        self.line_no = line_no
        self.reason = reason
        super().__init__(f"Line {line_no}: {reason}")


class WriteError(Pro2OlError):
    """Base class for failures while writing an OpenLyrics file."""


class OutputExistsError(WriteError, FileExistsError):
    """Raised when the target file exists and overwriting was not requested."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"The file {path} exists.")


class WriteAccessDeniedError(WriteError, PermissionError):
    """Raised when the target file exists but cannot be written."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Write access denied: {path}")


class SerializationError(WriteError):
    """Raised when a document tree cannot be rendered to XML."""

    def __init__(self, reason: str, path=None):
        self.reason = reason
        self.path = path
        super().__init__(f"Cannot serialize document: {reason}")
