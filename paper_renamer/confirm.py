"""
Interactive confirmation of the proposed filename.

The loop only talks to a prompter object, so it can be driven by the rich
terminal UI (see ui.TerminalPrompter) or by a scripted fake in tests.
A prompter provides:

    choose_action(original: str, proposed: str) -> Action
    edit_text(label: str, default: str) -> str
    show_error(message: str) -> None
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .filename import generate_filename, validate_filename
from .llm_extract import PaperMetadata


class Action(Enum):
    ACCEPT = "accept"
    CANCEL = "cancel"
    EDIT_FILENAME = "edit_filename"
    EDIT_AUTHOR = "edit_author"
    EDIT_YEAR = "edit_year"
    EDIT_TITLE = "edit_title"


# Metadata field and prompt label edited by each field action
FIELD_EDITS = {
    Action.EDIT_AUTHOR: ("first_author", "First author"),
    Action.EDIT_YEAR: ("year", "Year"),
    Action.EDIT_TITLE: ("title", "Title"),
}


@dataclass(frozen=True)
class LoopOutcome:
    accepted: bool
    filename: Optional[str]
    metadata: PaperMetadata


def confirm_rename(prompter, original: str, metadata: PaperMetadata) -> LoopOutcome:
    """
    Ask the user what to do with the proposed filename until they accept or cancel.

    Args:
        prompter: Object providing choose_action, edit_text and show_error
        original: Current filename, shown for comparison
        metadata: Extracted metadata the proposal is built from

    Returns:
        LoopOutcome. When accepted, filename has passed validate_filename.
    """
    proposed = generate_filename(metadata)

    while True:
        action = prompter.choose_action(original, proposed)

        if action is Action.ACCEPT:
            if not validate_filename(proposed):
                prompter.show_error(f"Invalid filename '{proposed}'. Please try again.")
                continue
            return LoopOutcome(True, proposed, metadata)

        if action is Action.CANCEL:
            return LoopOutcome(False, None, metadata)

        if action is Action.EDIT_FILENAME:
            proposed = prompter.edit_text("Filename", proposed).strip()
            if proposed.lower().endswith(".pdf"):
                proposed = proposed[:-4] + ".pdf"
            else:
                proposed += ".pdf"
            continue

        field, label = FIELD_EDITS[action]
        value = prompter.edit_text(label, getattr(metadata, field)).strip()
        metadata = replace(metadata, **{field: value})
        proposed = generate_filename(metadata)
