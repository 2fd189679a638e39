"""HTML renderer producing hidden inputs or a complete upload form."""

import html
import sys
from pathlib import Path
from typing import Mapping, Optional, TextIO

from direct_upload.models import UploadForm
from direct_upload.renderers.base import Renderer


def form_inputs_as_html(inputs: Mapping[str, str]) -> str:
    """Build one hidden ``<input>`` per form field, one per line."""
    lines = []
    for name, value in inputs.items():
        lines.append(
            f'<input type="hidden" name="{html.escape(name)}" '
            f'value="{html.escape(str(value))}" />'
        )
    return "\n".join(lines) + "\n" if lines else ""


def form_as_html(form: UploadForm, file_field: str = "file") -> str:
    """Build a complete multipart form that POSTs a file to S3.

    S3 ignores every field after the file, so the file input comes last.
    """
    return (
        f'<form action="{html.escape(form.url)}" method="post" '
        f'enctype="multipart/form-data">\n'
        f"{form_inputs_as_html(form.inputs)}"
        f'<input type="file" name="{html.escape(file_field)}" />\n'
        f'<input type="submit" value="Upload" />\n'
        f"</form>\n"
    )


class HtmlRenderer(Renderer):
    """Writes the form as HTML.

    Args:
        inputs_only: Emit only the hidden inputs, not the surrounding form
        output_path: File to write to; stdout when not given
    """

    def __init__(
        self,
        inputs_only: bool = False,
        output_path: Optional[str] = None,
        stream: Optional[TextIO] = None,
    ):
        self.inputs_only = inputs_only
        self.output_path = output_path
        self.stream = stream

    def render(self, form: UploadForm) -> str:
        if self.inputs_only:
            text = form_inputs_as_html(form.inputs)
        else:
            text = form_as_html(form)

        if self.output_path:
            path = Path(self.output_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        else:
            (self.stream or sys.stdout).write(text)

        return text
