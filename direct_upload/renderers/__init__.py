"""Renderers that output a signed upload form."""

from .base import Renderer
from .console import ConsoleRenderer
from .html_renderer import HtmlRenderer, form_as_html, form_inputs_as_html
from .json_renderer import JsonRenderer

__all__ = [
    "Renderer",
    "ConsoleRenderer",
    "HtmlRenderer",
    "JsonRenderer",
    "form_as_html",
    "form_inputs_as_html",
]
