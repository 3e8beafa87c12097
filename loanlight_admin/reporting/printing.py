"""Hand rendered reports to a display surface for printing"""

import logging
import tempfile
import webbrowser
from typing import List, Protocol

from loanlight_admin.domain.exceptions import PrintSurfaceUnavailableError
from loanlight_admin.reporting.html import generate_report_html


class PrintSurface(Protocol):
    """Somewhere a printable document can be displayed"""

    def open(self, document: str) -> None:
        """Display the document; raise PrintSurfaceUnavailableError if it cannot be shown"""
        ...


class CapturedSurface:
    """Keeps opened documents in memory; the HTTP API returns them as the response body"""

    def __init__(self) -> None:
        self.documents: List[str] = []

    def open(self, document: str) -> None:
        self.documents.append(document)

    @property
    def last(self) -> str:
        if not self.documents:
            raise PrintSurfaceUnavailableError("No document has been opened")
        return self.documents[-1]


class BrowserSurface:
    """Writes the document to a temporary file and opens it in the local browser"""

    def open(self, document: str) -> None:
        with tempfile.NamedTemporaryFile("w", suffix=".html", delete=False, encoding="utf-8") as handle:
            handle.write(document)
            path = handle.name

        if not webbrowser.open(f"file://{path}", new=2):
            logging.error(f"Failed to open print window for {path}")
            raise PrintSurfaceUnavailableError(
                "Failed to open print window. Please check if pop-ups are blocked."
            )


def print_report(surface: PrintSurface, title: str, data, **options) -> str:
    """Render a report and open it on `surface`; returns the rendered document"""
    document = generate_report_html(title, data, **options)
    surface.open(document)
    return document
