"""Console renderer using Rich library for formatted CLI output."""

from typing import Optional

from rich import box
from rich.console import Console
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from direct_upload.models import UploadForm
from direct_upload.renderers.base import Renderer

# Long values are folded, the policy would otherwise stretch the table
POLICY_PREVIEW_LENGTH = 48


class ConsoleRenderer(Renderer):
    """Rich-based renderer showing the form URL and a table of fields.

    Args:
        full: If True, show long values (policy) in full instead of a preview
    """

    def __init__(self, full: bool = False, console: Optional[Console] = None):
        # Use legacy_windows=True for ASCII-safe output on Windows consoles
        self.console = console or Console(legacy_windows=True, record=True)
        self.full = full

    def _display_value(self, value: str) -> str:
        if self.full or len(value) <= POLICY_PREVIEW_LENGTH:
            return value
        return value[:POLICY_PREVIEW_LENGTH] + "..."

    def render(self, form: UploadForm) -> str:
        self.console.print()
        self.console.print(
            Rule("[bold cyan]Direct Upload Form[/bold cyan]", style="cyan", characters="-")
        )
        self.console.print(Text.assemble(("POST ", "bold"), form.url))
        self.console.print()

        table = Table(
            title="",
            show_header=True,
            header_style="bold magenta",
            border_style="dim",
            box=box.ASCII,
        )
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Value", overflow="fold")

        for name, value in form.inputs.items():
            # Values are user data, keep Rich from reading them as markup
            table.add_row(Text(name), Text(self._display_value(value)))

        self.console.print(table)
        self.console.print()

        if self.console.record:
            return self.console.export_text()
        return ""
