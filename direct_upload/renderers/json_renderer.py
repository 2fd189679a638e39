"""JSON renderer for handing the form to scripts and front-end code."""

import json
import sys
from pathlib import Path
from typing import Optional, TextIO

from direct_upload.models import UploadForm
from direct_upload.renderers.base import Renderer


class JsonRenderer(Renderer):
    """Writes ``{"url": ..., "fields": {...}}`` as JSON.

    Args:
        output_path: File to write to; stdout when not given
        indent: JSON indentation, None for compact output
    """

    def __init__(
        self,
        output_path: Optional[str] = None,
        indent: Optional[int] = 2,
        stream: Optional[TextIO] = None,
    ):
        self.output_path = output_path
        self.indent = indent
        self.stream = stream

    def render(self, form: UploadForm) -> str:
        text = json.dumps(form.to_dict(), indent=self.indent)

        if self.output_path:
            self._write_to_file(text)
        else:
            stream = self.stream or sys.stdout
            stream.write(text + "\n")

        return text

    def _write_to_file(self, text: str) -> None:
        path = Path(self.output_path)

        # Create parent directories if needed
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(text + "\n")
