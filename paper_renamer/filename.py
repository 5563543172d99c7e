"""
Filename generation for renamed papers.

Format: <first-author-last-name>-<year>-<paper-title>.pdf, each component
lowercased, dash-separated and stripped of special characters.
"""

import re

from .llm_extract import PaperMetadata

PDF_EXTENSION = ".pdf"


def sanitize(text: str) -> str:
    """
    Normalize one filename component.

    - Convert to lowercase
    - Replace whitespace and underscores with dashes
    - Remove everything except alphanumerics and dashes
    - Collapse consecutive dashes and trim them from both ends

    Sanitizing an already sanitized string returns it unchanged.

    Args:
        text: Raw component, e.g. a paper title

    Returns:
        Sanitized component (may be empty)
    """
    text = re.sub(r"[\s_]", "-", text.lower())
    text = "".join(c for c in text if c.isalnum() or c == "-")
    text = re.sub(r"-+", "-", text)
    return text.strip("-")


def generate_filename(metadata: PaperMetadata) -> str:
    """Build the candidate filename for the given metadata."""
    author = sanitize(metadata.first_author)
    year = sanitize(metadata.year)
    title = sanitize(metadata.title)
    return f"{author}-{year}-{title}{PDF_EXTENSION}"


def validate_filename(filename: str) -> bool:
    """
    Check that a filename is safe to use inside the source directory.

    Rejects path traversal, path separators, empty names and names that do
    not end in .pdf.
    """
    return (
        bool(filename)
        and ".." not in filename
        and "/" not in filename
        and "\\" not in filename
        and filename.endswith(PDF_EXTENSION)
        and filename != PDF_EXTENSION
    )
