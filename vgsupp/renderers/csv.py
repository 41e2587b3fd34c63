"""CSV table renderer.

Renders suppressions as CSV with the calling context spread over
continuation rows, one frame per row.
"""

from __future__ import annotations

import csv
import io
from typing import Iterable, List

from ..model import Suppression
from .base import SuppressionRenderer, renderer_registry

HEADERS = ["Name", "Tool", "Category", "Extra Info", "Frame"]


@renderer_registry.register("csv")
class CsvRenderer(SuppressionRenderer):
    """Render suppressions in CSV format.

    The first row of a suppression holds its name, kind, extra info and
    first frame.  Each further frame gets a row of its own with the
    other columns left empty, so the calling context reads top down::

        Name,Tool,Category,Extra Info,Frame
        libc-leak,Memcheck,Leak,,fun:malloc
        ,,,,...
        ,,,,obj:/lib/libc.so*

    Uninterpreted kinds are written with their raw tool and category
    text (no ``?`` marker).
    """

    def __init__(self, extra_info_separator: str = " | ") -> None:
        """Initialize the CSV renderer.

        Args:
            extra_info_separator: Joins multiple extra info lines in
                one cell.
        """
        self.extra_info_separator = extra_info_separator

    def _rows(self, supp: Suppression) -> List[List[str]]:
        frames = [str(frame) for frame in supp.frames] or [""]
        extra = self.extra_info_separator.join(supp.extra_info or ())
        rows = [[supp.name, supp.kind.tool_name, supp.kind.category, extra, frames[0]]]
        for frame in frames[1:]:
            rows.append(["", "", "", "", frame])
        return rows

    def render_suppressions(self, suppressions: Iterable[Suppression]) -> str:
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(HEADERS)
        for supp in suppressions:
            writer.writerows(self._rows(supp))
        return output.getvalue().rstrip("\r\n")
