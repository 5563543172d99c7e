"""Exceptions raised by paper-renamer.

Every failure the tool reports to the user is a subclass of
PaperRenamerError, so the CLI only needs a single except clause.
"""


class PaperRenamerError(Exception):
    """Base class for all paper-renamer errors."""


class ModelServiceUnavailableError(PaperRenamerError):
    """The Ollama server could not be reached."""


class NoModelAvailableError(PaperRenamerError):
    """Ollama is running but has no models installed."""


class ModelResponseError(PaperRenamerError):
    """The model service answered with an error, non-JSON, or incomplete data."""


class PDFTextError(PaperRenamerError):
    """No usable text could be extracted from the PDF."""


class InvalidFilenameError(PaperRenamerError):
    """A candidate filename failed validation."""


class DestinationExistsError(PaperRenamerError):
    """A file already exists at the rename destination."""


class SourceFileError(PaperRenamerError):
    """The source path is missing, not a regular file, or not a PDF."""
