"""Paper Renamer - LLM-assisted renaming of academic paper PDFs.

This package extracts the first author, year and title from a paper's text
with a locally running Ollama model, proposes a standardized filename
(<author>-<year>-<title>.pdf) and renames the file after the user confirms
or edits the proposal.
"""

__version__ = "0.1.0"

from .confirm import Action, LoopOutcome, confirm_rename
from .core import extract_text_from_pdf, rename_file, rename_pdf
from .filename import generate_filename, sanitize, validate_filename
from .llm_extract import PaperMetadata, extract_metadata_with_llm

__all__ = [
    "Action",
    "LoopOutcome",
    "PaperMetadata",
    "confirm_rename",
    "extract_metadata_with_llm",
    "extract_text_from_pdf",
    "generate_filename",
    "rename_file",
    "rename_pdf",
    "sanitize",
    "validate_filename",
    "__version__",
]
