"""Render deck sections as HTML reference tables."""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from html import escape

from kana_trainer.models import Section

log = logging.getLogger("kana_trainer.render")

REGION_ID = "deckTables"

_OPEN_RE = re.compile(r'<(?P<tag>div|section)\b[^>]*\bid="' + REGION_ID + r'"[^>]*>')


def _cell(item) -> str:
    if item is None:
        return "<td>&nbsp;</td>"
    return (
        f'<td><span class="kana">{escape(item.prompt)}</span><br>'
        f'<span class="romaji">{escape(item.raw_answers)}</span></td>'
    )


def render_section(section: Section, columns: int) -> str:
    items = section.items
    rows = []
    for i in range(0, len(items), columns):
        row = list(items[i:i + columns])
        row += [None] * (columns - len(row))
        rows.append("<tr>" + "".join(_cell(item) for item in row) + "</tr>")
    return (
        f"<h3>{escape(section.title)}</h3>\n"
        f'<table class="kana-table">\n' + "\n".join(rows) + "\n</table>\n"
        '<hr class="dotted">\n'
    )


def render_deck_tables(sections: Iterable[Section], columns: int = 12) -> str:
    if columns < 1:
        raise ValueError("columns must be positive")
    return "".join(render_section(s, columns) for s in sections)


def inject_deck_tables(page: str, sections: Iterable[Section], columns: int = 12) -> str:
    """Replace the contents of the deckTables region, fully discarding old output."""
    bounds = _region_body(page)
    if bounds is None:
        log.warning('No element with id="%s" found; skipping deck tables', REGION_ID)
        return page
    start, end = bounds
    tables = render_deck_tables(sections, columns)
    return page[:start] + "\n" + tables + page[end:]


def _region_body(page: str) -> tuple[int, int] | None:
    """Span of the region's inner HTML, matching nested tags of the same kind."""
    m = _OPEN_RE.search(page)
    if m is None:
        return None
    tag = m.group("tag")
    tag_re = re.compile(rf"<(/?){tag}\b[^>]*>")
    depth = 1
    for t in tag_re.finditer(page, m.end()):
        depth += -1 if t.group(1) else 1
        if depth == 0:
            return m.end(), t.start()
    return None
