#!/usr/bin/env python3
"""
Paper Renamer - Core Module

Renames an academic PDF to <author>-<year>-<title>.pdf using metadata that a
local Ollama model extracts from the first pages of the document.

This module holds the pipeline around the model call: configuration, PDF
text extraction, the rename itself and the command line entry point.

Configuration:
Defaults can be set in ~/.paper-renamer/config.json:
{
    "model": "llama3.2:latest",
    "host": "http://localhost:11434",
    "max_pages": 3,
    "max_chars": 3000
}
Command-line options override the config file, which overrides the
OLLAMA_HOST environment variable.
"""

import argparse
import json
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, List, Optional

import pdfplumber
from pypdf import PdfReader
from rich.console import Console
from rich.logging import RichHandler

from .confirm import confirm_rename
from .exceptions import (
    DestinationExistsError,
    InvalidFilenameError,
    PaperRenamerError,
    PDFTextError,
    SourceFileError,
)
from .filename import PDF_EXTENSION, validate_filename
from .llm_extract import DEFAULT_MODEL, extract_metadata_with_llm, get_host
from .ui import TerminalPrompter, display_cancelled, display_error, display_metadata, display_success

log = logging.getLogger(__name__)

# Text extraction limits. The first pages carry title, authors and date;
# the character budget keeps the prompt small.
DEFAULT_MAX_PAGES = 3
DEFAULT_MAX_CHARS = 3000

CONFIG_KEYS = {"model": str, "host": str, "max_pages": int, "max_chars": int}


def get_config_path() -> Path:
    return Path.home() / ".paper-renamer" / "config.json"


def load_config(config_path: Optional[Path] = None) -> Dict[str, object]:
    """
    Load user configuration from ~/.paper-renamer/config.json.

    Unknown keys and values of the wrong type are ignored with a warning.

    Returns:
        Dictionary with configuration options. Empty dict if no config file.
    """
    config_path = config_path or get_config_path()

    if not config_path.exists():
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        log.warning("Could not load config from %s: %s", config_path, e)
        return {}

    if not isinstance(data, dict):
        log.warning("Ignoring config %s: expected a JSON object", config_path)
        return {}

    config = {}
    for key, value in data.items():
        expected = CONFIG_KEYS.get(key)
        if expected is None:
            log.warning("Unknown config option '%s' in %s, ignoring", key, config_path)
        elif not isinstance(value, expected) or isinstance(value, bool):
            log.warning("Config option '%s' must be %s, ignoring", key, expected.__name__)
        elif expected is int and value < 1:
            log.warning("Config option '%s' must be at least 1, ignoring", key)
        else:
            config[key] = value

    log.debug("Loaded config from %s", config_path)
    return config


def setup_logging(verbose: bool = False) -> None:
    """Send package logs to stderr through rich. WARNING by default, DEBUG when verbose."""
    logger = logging.getLogger("paper_renamer")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


@contextmanager
def quiet_pdfminer():
    """Silence pdfminer's warnings about malformed PDFs while extracting."""
    logger = logging.getLogger("pdfminer")
    previous = logger.level
    logger.setLevel(logging.ERROR)
    try:
        yield
    finally:
        logger.setLevel(previous)


def _extract_with_pdfplumber(pdf_path: Path, max_pages: int) -> str:
    with quiet_pdfminer(), pdfplumber.open(pdf_path) as pdf:
        text_parts = []
        for page in pdf.pages[:max_pages]:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
        return "\n".join(text_parts)


def _extract_with_pypdf(pdf_path: Path, max_pages: int) -> str:
    reader = PdfReader(pdf_path)
    text_parts = []
    for page in reader.pages[:max_pages]:
        page_text = page.extract_text()
        if page_text:
            text_parts.append(page_text)
    return "\n".join(text_parts)


def extract_text_from_pdf(
    pdf_path: Path, max_pages: int = DEFAULT_MAX_PAGES, max_chars: int = DEFAULT_MAX_CHARS
) -> str:
    """
    Extract text from the first few pages of a PDF.

    pdfplumber is tried first; pypdf is more lenient with damaged files and
    is used when pdfplumber fails to open or parse the document.

    Args:
        pdf_path: Path to PDF file
        max_pages: Maximum number of pages to extract
        max_chars: Maximum number of characters returned

    Returns:
        Extracted text, at most max_chars characters

    Raises:
        PDFTextError: Both backends failed, or the PDF has no text layer
    """
    pdf_path = Path(pdf_path)
    try:
        text = _extract_with_pdfplumber(pdf_path, max_pages)
    except Exception as e:
        log.debug("pdfplumber failed on %s (%s), trying pypdf", pdf_path.name, e)
        try:
            text = _extract_with_pypdf(pdf_path, max_pages)
        except Exception as e2:
            raise PDFTextError(f"Failed to extract text from PDF: {e2}") from e2

    if not text.strip():
        raise PDFTextError(
            "No text could be extracted from the PDF. The file may be a scanned image."
        )

    log.debug("Extracted %d characters from %s", len(text), pdf_path.name)
    return text[:max_chars]


def get_filename(path) -> str:
    """Get just the filename from a path."""
    name = Path(path).name
    if not name:
        raise SourceFileError(f"Failed to get filename from path: {path}")
    return name


def check_source(path) -> Path:
    """
    Make sure the file to rename exists, is a regular file and is a PDF.

    Returns:
        The path as a Path object
    """
    path = Path(path)
    if path.suffix.lower() != PDF_EXTENSION:
        raise SourceFileError(f"File must be a PDF (*.pdf): {path}")
    if not path.exists():
        raise SourceFileError(f"Original file does not exist: {path}")
    if not path.is_file():
        raise SourceFileError(f"Path is not a file: {path}")
    return path


def plan_rename(path, new_filename: str) -> Path:
    """
    Run every check of rename_file without touching the filesystem.

    Returns:
        Destination path in the same directory as the source

    Raises:
        InvalidFilenameError, SourceFileError, DestinationExistsError
    """
    if not validate_filename(new_filename):
        raise InvalidFilenameError(f"Invalid filename: '{new_filename}'")

    original = check_source(path)
    new_path = original.parent / new_filename

    # Racy by nature; acceptable for a single-user interactive tool
    if new_path.exists():
        raise DestinationExistsError(
            f"Target file already exists: {new_path}. Choose a different name."
        )
    return new_path


def rename_file(path, new_filename: str) -> Path:
    """
    Rename a file within its own directory, never overwriting.

    Args:
        path: Path to the existing PDF
        new_filename: Bare filename (no directory part)

    Returns:
        Path of the renamed file
    """
    new_path = plan_rename(path, new_filename)
    try:
        Path(path).rename(new_path)
    except OSError as e:
        raise PaperRenamerError(f"Failed to rename file: {e}") from e
    return new_path


def rename_pdf(
    pdf_path,
    model: str = DEFAULT_MODEL,
    host: Optional[str] = None,
    max_pages: int = DEFAULT_MAX_PAGES,
    max_chars: int = DEFAULT_MAX_CHARS,
    dry_run: bool = False,
    prompter: Optional[TerminalPrompter] = None,
) -> Optional[Path]:
    """
    Rename one PDF based on LLM-extracted metadata, after user confirmation.

    Args:
        pdf_path: Path to the PDF file.
        model: Ollama model name, or "auto".
        host: Ollama base URL. Defaults to OLLAMA_HOST or localhost.
        max_pages: Number of pages to read text from.
        max_chars: Character budget for the text sent to the model.
        dry_run: If True, only show what would be done without renaming.
        prompter: Terminal interface. Defaults to a rich TerminalPrompter.

    Returns:
        The new path (the planned path on dry run), or None if the user cancelled.

    Raises:
        PaperRenamerError: Any unrecoverable failure.
    """
    prompter = prompter or TerminalPrompter()
    console = prompter.console

    pdf_path = check_source(pdf_path)
    original_filename = get_filename(pdf_path)

    console.print("Analyzing PDF...")
    try:
        text = extract_text_from_pdf(pdf_path, max_pages=max_pages, max_chars=max_chars)
    except PDFTextError as e:
        prompter.show_error(str(e))
        metadata = prompter.ask_manual_metadata()
        if metadata is None:
            display_cancelled(console)
            return None
    else:
        host = get_host(host)
        with prompter.status(f"Extracting metadata using LLM (model: {model})..."):
            metadata, used_model = extract_metadata_with_llm(text, model=model, host=host)
        log.info("Metadata extracted with %s", used_model)
        display_metadata(metadata, console)

    outcome = confirm_rename(prompter, original_filename, metadata)
    if not outcome.accepted:
        display_cancelled(console)
        return None

    if outcome.filename == original_filename:
        console.print("\nFile already has this name, nothing to do.")
        return pdf_path

    if dry_run:
        new_path = plan_rename(pdf_path, outcome.filename)
        console.print("\n[DRY RUN] Would rename:", markup=False)
        console.print(f"  From: {pdf_path}", markup=False, highlight=False)
        console.print(f"  To:   {new_path}", markup=False, highlight=False)
        return new_path

    new_path = rename_file(pdf_path, outcome.filename)
    display_success(original_filename, str(new_path), console)
    return new_path


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be an integer, got '{value}'")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paper-renamer",
        description="Automatically rename academic paper PDFs using LLM-extracted metadata",
    )
    parser.add_argument("file_path", metavar="FILE", help="Path to the PDF file to rename")
    parser.add_argument(
        "-m",
        "--model",
        help=f"Ollama model to use for metadata extraction, or 'auto' (default: {DEFAULT_MODEL})",
    )
    parser.add_argument("--host", help="Ollama base URL (default: $OLLAMA_HOST or localhost:11434)")
    parser.add_argument(
        "--max-pages",
        type=_positive_int,
        help=f"Number of pages to read (default: {DEFAULT_MAX_PAGES})",
    )
    parser.add_argument(
        "--max-chars",
        type=_positive_int,
        help=f"Characters of text sent to the model (default: {DEFAULT_MAX_CHARS})",
    )
    parser.add_argument(
        "-n", "--dry-run", action="store_true", help="Show the rename without performing it"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None, prompter: Optional[TerminalPrompter] = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    # CLI args override config file
    config = load_config()
    prompter = prompter or TerminalPrompter()

    try:
        rename_pdf(
            args.file_path,
            model=args.model or config.get("model", DEFAULT_MODEL),
            host=args.host or config.get("host"),
            max_pages=args.max_pages or config.get("max_pages", DEFAULT_MAX_PAGES),
            max_chars=args.max_chars or config.get("max_chars", DEFAULT_MAX_CHARS),
            dry_run=args.dry_run,
            prompter=prompter,
        )
    except PaperRenamerError as e:
        display_error(str(e), prompter.err_console)
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        display_error("Aborted by user", prompter.err_console)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
