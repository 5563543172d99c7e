"""Terminal prompts and messages, built on rich."""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from .confirm import Action
from .llm_extract import PaperMetadata

MENU = [
    (Action.ACCEPT, "Yes - rename the file"),
    (Action.CANCEL, "No - cancel"),
    (Action.EDIT_FILENAME, "Edit - modify filename"),
    (Action.EDIT_AUTHOR, "Edit author"),
    (Action.EDIT_YEAR, "Edit year"),
    (Action.EDIT_TITLE, "Edit title"),
]


class TerminalPrompter:
    """Interactive prompter used by confirm.confirm_rename."""

    def __init__(self, console: Optional[Console] = None, err_console: Optional[Console] = None):
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)

    def choose_action(self, original: str, proposed: str) -> Action:
        self.console.print(f"\nProposed filename: [bold]{escape(proposed)}[/bold]\n", highlight=False)
        for number, (_, label) in enumerate(MENU, start=1):
            self.console.print(f"  {number}. {label}")
        choice = Prompt.ask(
            f"Would you like to rename '{escape(original)}' to '{escape(proposed)}'?",
            choices=[str(n) for n in range(1, len(MENU) + 1)],
            default="1",
            console=self.console,
        )
        return MENU[int(choice) - 1][0]

    def edit_text(self, label: str, default: str) -> str:
        """Single-line input pre-filled with default. Empty answers are refused."""
        if default:
            self.console.print(
                f"\nEdit the {label.lower()} below (press Enter to keep the current value):"
            )
        while True:
            if default:
                value = Prompt.ask(escape(label), default=default, console=self.console)
            else:
                value = Prompt.ask(escape(label), console=self.console)
            if value.strip():
                return value
            self.console.print("[red]Value cannot be empty[/red]")

    def confirm(self, question: str, default: bool = False) -> bool:
        return Confirm.ask(question, default=default, console=self.console)

    def status(self, message: str):
        """Spinner shown while a blocking call runs. Use as a context manager."""
        return self.console.status(message)

    def show_error(self, message: str) -> None:
        display_error(message, self.err_console)

    def ask_manual_metadata(self) -> Optional[PaperMetadata]:
        """Offer manual entry of the metadata. Returns None if the user declines."""
        if not self.confirm("Would you like to enter metadata manually?"):
            return None
        return PaperMetadata(
            first_author=self.edit_text("First author (last name)", "").strip(),
            year=self.edit_text("Year", "").strip(),
            title=self.edit_text("Title", "").strip(),
        )


def display_metadata(metadata: PaperMetadata, console: Console) -> None:
    console.print("\nExtracted metadata:")
    console.print(f"  - First Author: {escape(metadata.first_author)}", highlight=False)
    console.print(f"  - Year: {escape(metadata.year)}", highlight=False)
    console.print(f"  - Title: {escape(metadata.title)}", highlight=False)


def display_success(old_name: str, new_name: str, console: Console) -> None:
    console.print("\n[green]✓ File renamed successfully![/green]")
    console.print(f"  {escape(old_name)} -> {escape(new_name)}", highlight=False)


def display_cancelled(console: Console) -> None:
    console.print("\nOperation cancelled.")


def display_error(message: str, console: Console) -> None:
    console.print(f"\n[red]⚠ Error:[/red] {escape(message)}", highlight=False)
