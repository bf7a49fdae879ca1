import logging
import re

from notebuilder.models import Section, SourceFile, SourceKind

logger = logging.getLogger(__name__)

DEFAULT_SECTION_TITLE = "Notes"

_LINE_SPLIT_RE = re.compile(r"\n+")
_HEADING_MARKER_RE = re.compile(r"^#+\s*")

# Stand-in text for sources whose content is extracted elsewhere.
_PENDING_EXTRACTION = {
    SourceKind.SLIDES: "(Slides content and notes will be extracted on the server)",
    SourceKind.DOCUMENT: (
        "(Document headings, paragraphs, lists, and tables will be extracted "
        "on the server)"
    ),
}


def segment(raw: str) -> list[Section]:
    """Split raw text into titled sections of points.

    Lines starting with ``#`` open a new section; every other non-empty line
    is a point of the current one. Sections without points are dropped.
    """
    sections: list[Section] = []
    title = DEFAULT_SECTION_TITLE
    points: list[str] = []

    for line in _LINE_SPLIT_RE.split(raw):
        line = line.strip()
        if not line:
            continue
        if line.startswith("#"):
            if points:
                sections.append(Section(title=title, points=tuple(points)))
            title = _HEADING_MARKER_RE.sub("", line, count=1)
            points = []
        else:
            points.append(line)

    if points:
        sections.append(Section(title=title, points=tuple(points)))

    logger.debug("Segmented %d chars into %d sections", len(raw), len(sections))
    return sections


def combine_sources(sources: list[SourceFile]) -> str:
    """Concatenate sources into one segmentable text, one ``#`` heading each."""
    parts: list[str] = []
    for source in sources:
        parts.append(f"# {source.name}")
        if source.content:
            parts.append(source.content)
        elif source.kind in _PENDING_EXTRACTION:
            parts.append(_PENDING_EXTRACTION[source.kind])
    return "\n\n".join(parts)
