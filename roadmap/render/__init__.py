"""HTML rendering of roadmap sections."""

from .formatter import markdown_to_html, process_content, strip_html
from .placeholders import create_mock_response, error_banner

__all__ = [
    "markdown_to_html",
    "process_content",
    "strip_html",
    "create_mock_response",
    "error_banner",
]
