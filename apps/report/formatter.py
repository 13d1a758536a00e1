"""Convert lesson text returned by the model into an HTML fragment.

Only the handful of patterns the model is asked to produce are recognised:
``**bold**`` spans become headings, ``* `` and ``1. `` lines become list
items, and everything else is laid out as paragraphs.  This is not a
markdown parser.

Each input line is run through an ordered list of classifiers.  Bold spans
are claimed first, so their asterisks can never be mistaken for a bullet;
star bullets are tried before digit bullets.  The classified lines are then
fed to :class:`_BlockBuilder`, a small state machine that groups list items
into a single list and text into paragraphs.  Because blocks are only ever
appended one after the other, headings and lists are never nested inside a
paragraph and no empty paragraph is emitted.

The :func:`format_ai_text` entry point accepts the ``formatter`` section of
``report.yaml`` as an optional mapping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import html
import re
from typing import Any, Callable, Dict, List, Optional, Tuple


HEADING_RE = re.compile(r"\*\*(.*?)\*\*")
STAR_ITEM_RE = re.compile(r"^\s*\*\s(.*)$")
DIGIT_ITEM_RE = re.compile(r"^\s*[0-9]\.\s(.*)$")

TEXT = "text"
HEADING = "heading"
BLANK = "blank"
STAR_ITEM = "star_item"
DIGIT_ITEM = "digit_item"
ITEM_KINDS = (STAR_ITEM, DIGIT_ITEM)

Segment = Tuple[str, str]


# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------

@dataclass
class Line:
    """One input line after classification.

    ``segments`` is a list of ``(kind, value)`` pairs where ``kind`` is either
    ``"text"`` or ``"heading"``.  For list items the bullet marker has already
    been removed from the first segment.
    """

    kind: str
    segments: List[Segment] = field(default_factory=list)


def _claim_headings(raw: str) -> List[Segment]:
    """Split ``raw`` around every ``**...**`` span."""

    segments: List[Segment] = []
    pos = 0
    for m in HEADING_RE.finditer(raw):
        if m.start() > pos:
            segments.append((TEXT, raw[pos:m.start()]))
        if m.group(1).strip():
            segments.append((HEADING, m.group(1)))
        pos = m.end()
    if pos < len(raw):
        segments.append((TEXT, raw[pos:]))
    return segments


def _strip_marker(segments: List[Segment], pattern: re.Pattern) -> Optional[List[Segment]]:
    # Markers only count at the start of the line, i.e. in a leading text segment.
    if not segments or segments[0][0] != TEXT:
        return None
    m = pattern.match(segments[0][1])
    if not m:
        return None
    return [(TEXT, m.group(1))] + segments[1:]


def _star_item(segments: List[Segment]) -> Optional[List[Segment]]:
    return _strip_marker(segments, STAR_ITEM_RE)


def _digit_item(segments: List[Segment]) -> Optional[List[Segment]]:
    return _strip_marker(segments, DIGIT_ITEM_RE)


# Tried in order after headings are claimed; the first match wins.
LINE_CLASSIFIERS: Tuple[Tuple[str, Callable[[List[Segment]], Optional[List[Segment]]]], ...] = (
    (STAR_ITEM, _star_item),
    (DIGIT_ITEM, _digit_item),
)


def classify_line(raw: str) -> Line:
    """Return the :class:`Line` for a single line of model output."""

    if not raw.strip():
        return Line(BLANK)
    segments = _claim_headings(raw)
    for kind, classifier in LINE_CLASSIFIERS:
        claimed = classifier(segments)
        if claimed is not None:
            return Line(kind, claimed)
    return Line(TEXT, segments)


# ---------------------------------------------------------------------------
# Block assembly
# ---------------------------------------------------------------------------

class _BlockBuilder:
    """Group classified lines into heading, list and paragraph blocks.

    At most one of ``paragraph`` and ``items`` is non-empty at any time: a
    list item closes the open paragraph and text closes the open list.
    Blank lines end a paragraph but not a list, so items separated only by
    blank lines still share one list.
    """

    def __init__(self, cfg: Dict[str, Any]):
        self.heading_tag = cfg.get("heading_tag", "h3")
        self.list_tag = cfg.get("list_tag", "ul")
        self.escape_html = cfg.get("escape_html", True)
        self.blocks: List[str] = []
        self.paragraph: List[str] = []
        self.items: List[str] = []

    def _text(self, value: str) -> str:
        return html.escape(value, quote=False) if self.escape_html else value

    def _heading(self, value: str) -> str:
        return f"<{self.heading_tag}>{self._text(value.strip())}</{self.heading_tag}>"

    def _inline(self, segments: List[Segment]) -> str:
        parts = [self._heading(v) if k == HEADING else self._text(v) for k, v in segments]
        return "".join(parts).strip()

    def _flush_paragraph(self) -> None:
        text = " ".join(self.paragraph)
        self.paragraph = []
        if text:
            self.blocks.append(f"<p>{text}</p>")

    def _close_list(self) -> None:
        if not self.items:
            return
        body = "".join(f"<li>{item}</li>" for item in self.items)
        self.blocks.append(f"<{self.list_tag}>{body}</{self.list_tag}>")
        self.items = []

    def feed(self, line: Line) -> None:
        if line.kind == BLANK:
            self._flush_paragraph()
            return
        if line.kind in ITEM_KINDS:
            self._flush_paragraph()
            self.items.append(self._inline(line.segments))
            return
        self._close_list()
        for kind, value in line.segments:
            if kind == HEADING:
                self._flush_paragraph()
                self.blocks.append(self._heading(value))
                continue
            piece = value.strip()
            if piece:
                self.paragraph.append(self._text(piece))

    def finish(self) -> str:
        self._flush_paragraph()
        self._close_list()
        return "".join(self.blocks)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def format_ai_text(text: str, cfg: Optional[Dict[str, Any]] = None) -> str:
    """Render model output as HTML.

    Never raises for any string input; text without markers comes back as a
    single paragraph with line breaks turned into spaces, and an empty string
    comes back empty.
    """

    if not text:
        return ""
    builder = _BlockBuilder(cfg or {})
    for raw in text.replace("\r\n", "\n").split("\n"):
        builder.feed(classify_line(raw))
    return builder.finish()


__all__ = ["format_ai_text", "classify_line", "Line", "LINE_CLASSIFIERS"]
