import io
from contextlib import nullcontext

import pytest
from rich.console import Console

from paper_renamer.llm_extract import PaperMetadata


class ScriptedPrompter:
    """Stands in for ui.TerminalPrompter, replaying pre-recorded answers."""

    def __init__(self, actions=(), edits=(), manual=None):
        self.actions = list(actions)
        self.edits = list(edits)
        self.manual = manual
        self.proposals = []
        self.edit_requests = []
        self.errors = []
        self.manual_requested = False
        self.console = Console(file=io.StringIO(), width=200)
        self.err_console = Console(file=io.StringIO(), width=200)

    def choose_action(self, original, proposed):
        self.proposals.append(proposed)
        return self.actions.pop(0)

    def edit_text(self, label, default):
        self.edit_requests.append((label, default))
        return self.edits.pop(0)

    def show_error(self, message):
        self.errors.append(message)

    def status(self, message):
        return nullcontext()

    def ask_manual_metadata(self):
        self.manual_requested = True
        return self.manual

    @property
    def output(self):
        return self.console.file.getvalue()

    @property
    def error_output(self):
        return self.err_console.file.getvalue()


@pytest.fixture
def make_prompter():
    return ScriptedPrompter


@pytest.fixture
def vaswani():
    return PaperMetadata(first_author="Vaswani", year="2017", title="Attention Is All You Need")


@pytest.fixture
def pdf_file(tmp_path):
    path = tmp_path / "1706.03762v7.pdf"
    path.write_bytes(b"%PDF-1.4 placeholder")
    return path


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.paper-renamer/config.json and OLLAMA_HOST."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("OLLAMA_HOST", raising=False)
    return home
