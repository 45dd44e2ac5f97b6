"""
chunkscribe.export.html - Jinja2-based HTML transcript document.

Produces a self-contained HTML page with one paragraph per fragment.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from chunkscribe.models import TranscriptFragment

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class HtmlRenderer:
    """Render transcripts with the packaged Jinja2 templates."""

    def __init__(self, template_dir: Path | None = None):
        self.env = Environment(
            loader=FileSystemLoader(template_dir or TEMPLATE_DIR),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def render(
        self,
        fragments: list[TranscriptFragment],
        title: str = "Transcript",
        metadata: dict[str, Any] | None = None,
        template_name: str = "transcript.html",
    ) -> str:
        template = self.env.get_template(template_name)
        return template.render(
            title=title,
            paragraphs=[fragment.text for fragment in fragments],
            metadata=metadata or {},
        )
