import logging
import re

from notebuilder.models import (
    Block,
    BulletList,
    Emphasis,
    EmphasisKind,
    Heading,
    ListItem,
    NoteStyle,
    Paragraph,
    PlainText,
    RichDocument,
    Section,
    SourceFile,
    StyleConfig,
)
from notebuilder.services.emphasis import apply_emphasis
from notebuilder.services.export import ExportChannel, ExportService
from notebuilder.services.segmenter import combine_sources, segment

logger = logging.getLogger(__name__)

ELLIPSIS = "…"
NO_INPUT_TEXT = "No input provided."

SIMPLIFIED_MAX_POINTS = 5
SIMPLIFIED_MAX_CHARS = 100
SUMMARY_MAX_CHARS = 120

_WHITESPACE_RE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Point shaping helpers
# ---------------------------------------------------------------------------


def _normalize(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def _truncate(text: str, limit: int) -> str:
    """Cut *text* longer than *limit* to ``limit - 3`` chars plus an ellipsis."""
    if len(text) <= limit:
        return text
    return text[: limit - 3] + ELLIPSIS


def simplify_point(point: str) -> str:
    return _truncate(_normalize(point), SIMPLIFIED_MAX_CHARS)


def expand_point(point: str) -> str:
    text = _normalize(point)
    if not text or text.endswith("."):
        return text
    return text + "."


def summarize_points(points: tuple[str, ...]) -> str:
    """First point, plus the last one when it differs and the first is short."""
    if not points:
        return ""
    first = _normalize(points[0])
    last = _normalize(points[-1])
    if not first:
        return ""
    if len(first) > SUMMARY_MAX_CHARS:
        return _truncate(first, SUMMARY_MAX_CHARS)
    if last and last != first:
        return f"{first} {last}"
    return first


def _label(text: str) -> Emphasis:
    return Emphasis(EmphasisKind.ITALIC, (PlainText(text),))


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class NotesService:
    """Build styled note documents from segmented source text.

    The generator is rule-based: points are shaped by the configured style
    and emphasized by pattern rules. Every call returns a fresh document.
    """

    def generate(self, sections: list[Section], config: StyleConfig) -> RichDocument:
        blocks: list[Block] = []

        custom = (config.custom_instructions or "").strip()
        if custom:
            blocks.append(Paragraph((
                _label("Applied instructions:"),
                PlainText(f" {custom}"),
            )))

        for section in sections:
            blocks.append(Heading(level=2, text=section.title))
            blocks.append(BulletList(ordered=False, items=self._list_items(section, config)))

        if not blocks:
            return RichDocument.placeholder()

        logger.debug(
            "Generated %d blocks from %d sections (style=%s)",
            len(blocks), len(sections), config.style.value,
        )
        return RichDocument(blocks=tuple(blocks))

    def _list_items(self, section: Section, config: StyleConfig) -> tuple[ListItem, ...]:
        if config.style == NoteStyle.SIMPLIFIED:
            texts = [simplify_point(p) for p in section.points[:SIMPLIFIED_MAX_POINTS]]
        else:
            texts = [expand_point(p) for p in section.points]

        items = [ListItem(apply_emphasis(text, config.highlights)) for text in texts]

        if config.style == NoteStyle.DETAILED:
            summary = summarize_points(section.points)
            if summary:
                items.append(ListItem((
                    _label("Summary:"),
                    PlainText(" "),
                    *apply_emphasis(summary, config.highlights),
                )))
        return tuple(items)

    def generate_from_sources(
        self, sources: list[SourceFile], config: StyleConfig
    ) -> RichDocument:
        """Generate notes from the uploaded sources alone."""
        raw = combine_sources(sources) or NO_INPUT_TEXT
        return self.generate(segment(raw), config)

    def regenerate(
        self, sources: list[SourceFile], markup: str, config: StyleConfig
    ) -> RichDocument:
        """Rebuild notes from the sources plus the text of the current document.

        The edited markup is reduced to plain text and appended to the
        combined sources, then the whole text is segmented again.
        """
        kind = ExportService.kind_for_channel(ExportChannel.REFEED)
        current = ExportService.export(markup, kind).content
        raw = f"{combine_sources(sources)}\n\n{current}".strip()
        return self.generate(segment(raw), config)
