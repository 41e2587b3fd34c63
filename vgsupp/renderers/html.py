"""HTML page renderer.

Renders suppressions as a standalone HTML page: one collapsible card
per suppression showing its kind, extra info and calling context, plus
a filter box that hides cards by name.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from jinja2 import Environment, FileSystemLoader

from ..model import FrameWildcard, FunFrame, MemcheckKind, ObjFrame, Suppression
from .base import SuppressionRenderer, renderer_registry

# Template directory
TEMPLATES_DIR = Path(__file__).parent / "templates"

PAGE_TEMPLATE = "html_page.jinja2"


@renderer_registry.register("html")
class HtmlRenderer(SuppressionRenderer):
    """Render suppressions as an HTML page with embedded CSS and JavaScript.

    Text taken from the suppressions is escaped by Jinja2; only the
    stylesheet and script shipped next to the template are inserted
    verbatim.
    """

    def __init__(self, title: str = "Suppressions") -> None:
        """Initialize renderer with Jinja2 environment.

        Args:
            title: Page title and heading.
        """
        self.title = title
        self._env = Environment(
            loader=FileSystemLoader(TEMPLATES_DIR),
            autoescape=True,
        )
        self._css: Optional[str] = None
        self._js: Optional[str] = None

    @property
    def css(self) -> str:
        """Load and cache CSS from template file."""
        if self._css is None:
            self._css = (TEMPLATES_DIR / "html_styles.css").read_text()
        return self._css

    @property
    def js(self) -> str:
        """Load and cache JavaScript from template file."""
        if self._js is None:
            self._js = (TEMPLATES_DIR / "html_scripts.js").read_text()
        return self._js

    @staticmethod
    def _frame_class(frame) -> str:
        if isinstance(frame, FrameWildcard):
            return "frame-wildcard"
        if isinstance(frame, ObjFrame):
            return "frame-obj"
        if isinstance(frame, FunFrame):
            return "frame-fun"
        return "frame"

    def _context(self, supp: Suppression) -> Dict[str, Any]:
        return {
            "name": supp.name,
            "kind": str(supp.kind),
            "kind_class": "kind-memcheck" if isinstance(supp.kind, MemcheckKind) else "kind-other",
            "extra_info": list(supp.extra_info or ()),
            "frames": [
                {"text": str(frame), "css_class": self._frame_class(frame)}
                for frame in supp.frames
            ],
        }

    def render_suppressions(self, suppressions: Iterable[Suppression]) -> str:
        items = [self._context(supp) for supp in suppressions]
        template = self._env.get_template(PAGE_TEMPLATE)
        return template.render(
            title=self.title,
            css=self.css,
            js=self.js,
            suppressions=items,
        )
