import pytest

from paper_renamer.filename import generate_filename, sanitize, validate_filename
from paper_renamer.llm_extract import PaperMetadata


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Hello World", "hello-world"),
        ("Test_File-Name", "test-file-name"),
        ("Special!@#$%Chars", "specialchars"),
        ("Multiple   Spaces", "multiple-spaces"),
        ("Vaswani", "vaswani"),
        ("  --Leading and trailing--  ", "leading-and-trailing"),
        ("Tabs\tand\nnewlines", "tabs-and-newlines"),
        ("BERT: Pre-training of Deep Bidirectional Transformers", "bert-pre-training-of-deep-bidirectional-transformers"),
        ("Müller", "müller"),
        ("", ""),
        ("!!!", ""),
    ],
)
def test_sanitize(raw: str, expected: str) -> None:
    assert sanitize(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["Attention Is All You Need", "a _ b -- c", "Ünïcödé Tïtlé", "İstanbul", "x　y", "--", "2017"],
)
def test_sanitize_is_idempotent(raw: str) -> None:
    once = sanitize(raw)
    assert sanitize(once) == once


def test_generate_filename(vaswani: PaperMetadata) -> None:
    assert generate_filename(vaswani) == "vaswani-2017-attention-is-all-you-need.pdf"


def test_generate_filename_strips_path_characters() -> None:
    metadata = PaperMetadata(first_author="../Smith", year="2020", title="A/B Testing \\ at Scale")
    filename = generate_filename(metadata)
    assert filename == "smith-2020-ab-testing-at-scale.pdf"
    assert validate_filename(filename)


def test_validate_filename_accepts_sanitized_name() -> None:
    assert validate_filename("valid-filename.pdf")
    assert validate_filename("vaswani-2017-attention-is-all-you-need.pdf")


@pytest.mark.parametrize(
    "name",
    ["../etc/passwd.pdf", "path/to/file.pdf", "back\\slash.pdf", "a..b.pdf", "", "no-extension", "paper.PDF", ".pdf"],
)
def test_validate_filename_rejects(name: str) -> None:
    assert validate_filename(name) is False
