"""Base renderer interface."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from direct_upload.models import UploadForm


class Renderer(ABC):
    """Abstract base class for upload form renderers."""

    @abstractmethod
    def render(self, form: "UploadForm") -> str:
        """Output the form and return the rendered text."""
        pass
