import re

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

from notebuilder.models import (
    BulletList,
    Emphasis,
    EmphasisKind,
    Heading,
    Inline,
    Paragraph,
    PlainText,
    RichDocument,
)

_ESCAPES = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#039;",
})

_EMPHASIS_TAGS = {EmphasisKind.STRONG: "strong", EmphasisKind.ITALIC: "em"}
_EMPHASIS_MARKERS = {"strong": "**", "em": "*"}

_HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
_LIST_TAGS = {"ul", "ol"}
_BOLD_TAGS = {"strong", "b"}
_ITALIC_TAGS = {"em", "i"}
_PARAGRAPH_TAGS = {"p", "div", "blockquote", "pre", "section", "article", "table", "tr"}
# Content of these never reaches any text projection.
_SKIPPED_TAGS = {"head", "title", "script", "style", "template"}

_WHITESPACE_RE = re.compile(r"\s+")
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def escape_text(text: str) -> str:
    """Escape the five markup-significant characters."""
    return text.translate(_ESCAPES)


# ---------------------------------------------------------------------------
# Event sources
#
# Both the document tree and parsed markup are flattened into the same
# start(tag) / text(data) / end(tag) calls, so every projection treats the
# two inputs identically.
# ---------------------------------------------------------------------------


def _walk_inlines(nodes: tuple[Inline, ...], writer: "_TextWriter") -> None:
    for node in nodes:
        if isinstance(node, PlainText):
            writer.text(node.text)
        elif isinstance(node, Emphasis):
            tag = _EMPHASIS_TAGS[node.kind]
            writer.start(tag)
            _walk_inlines(node.children, writer)
            writer.end(tag)


def _walk_document(doc: RichDocument, writer: "_TextWriter") -> None:
    if doc.is_empty:
        doc = RichDocument.placeholder()
    for block in doc.blocks:
        if isinstance(block, Heading):
            tag = f"h{_clamp_level(block.level)}"
            writer.start(tag)
            writer.text(block.text)
            writer.end(tag)
        elif isinstance(block, BulletList):
            tag = "ol" if block.ordered else "ul"
            writer.start(tag)
            for item in block.items:
                writer.start("li")
                _walk_inlines(item.children, writer)
                writer.end("li")
            writer.end(tag)
        elif isinstance(block, Paragraph):
            writer.start("p")
            _walk_inlines(block.children, writer)
            writer.end("p")


def _walk_markup(markup: str, writer: "_TextWriter") -> None:
    soup = BeautifulSoup(markup, "html.parser")
    # Explicit work stack of ("node", element) / ("end", tag name) entries.
    pending: list[tuple[str, object]] = [
        ("node", child) for child in reversed(soup.contents)
    ]
    while pending:
        action, item = pending.pop()
        if action == "end":
            writer.end(item)
        elif isinstance(item, Tag):
            name = item.name.lower()
            if name in _SKIPPED_TAGS:
                continue
            writer.start(name)
            pending.append(("end", name))
            pending.extend(("node", child) for child in reversed(item.contents))
        elif isinstance(item, PreformattedString):
            continue  # comments, doctype, CDATA
        elif isinstance(item, NavigableString):
            writer.text(str(item))


def _clamp_level(level: int) -> int:
    return min(max(level, 1), 6)


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------


class _TextWriter:
    """Accumulates output and tracks trailing newlines for block spacing."""

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._trailing_newlines = 0
        self._at_space = True

    def _write(self, chunk: str) -> None:
        if not chunk:
            return
        self._parts.append(chunk)
        stripped = chunk.rstrip("\n")
        if stripped:
            self._trailing_newlines = len(chunk) - len(stripped)
        else:
            self._trailing_newlines += len(chunk)
        self._at_space = chunk[-1].isspace()

    def _ensure_newlines(self, count: int) -> None:
        if not self._parts:
            return
        if self._trailing_newlines < count:
            self._write("\n" * (count - self._trailing_newlines))

    def text(self, data: str) -> None:
        data = _WHITESPACE_RE.sub(" ", data)
        if self._at_space:
            data = data.lstrip(" ")
        self._write(data)

    def start(self, tag: str) -> None:
        raise NotImplementedError

    def end(self, tag: str) -> None:
        raise NotImplementedError

    def finish(self) -> str:
        lines = "".join(self._parts).split("\n")
        result = "\n".join(line.rstrip() for line in lines)
        return _BLANK_RUN_RE.sub("\n\n", result).strip()


class _PlainTextWriter(_TextWriter):
    def start(self, tag: str) -> None:
        if tag in _HEADING_TAGS or tag in _PARAGRAPH_TAGS or tag in _LIST_TAGS:
            self._ensure_newlines(2)
        elif tag == "li":
            self._ensure_newlines(1)
        elif tag == "br":
            self._write("\n")

    def end(self, tag: str) -> None:
        if tag in _HEADING_TAGS or tag in _PARAGRAPH_TAGS or tag in _LIST_TAGS:
            self._ensure_newlines(2)
        elif tag == "li":
            self._ensure_newlines(1)


class _MarkdownWriter(_TextWriter):
    """Markdown projection with an explicit stack of open lists and emphasis.

    Emphasis openers are held back until the span's first non-space text, and
    trailing spaces are moved past the closer, so markers always hug the
    emphasized words. A span with no text emits no markers at all.
    """

    def __init__(self) -> None:
        super().__init__()
        self._stack: list[str] = []
        self._pending: list[str] = []

    def _list_depth(self) -> int:
        return sum(1 for entry in self._stack if entry in _LIST_TAGS)

    def _list_prefix(self) -> str:
        for entry in reversed(self._stack):
            if entry == "ul":
                return "- "
            if entry == "ol":
                return "1. "
        return ""

    def _pop(self, entry: str) -> bool:
        for i in range(len(self._stack) - 1, -1, -1):
            if self._stack[i] == entry:
                del self._stack[i]
                return True
        return False

    def _take_trailing_spaces(self) -> str:
        spaces = ""
        while self._parts:
            last = self._parts[-1]
            stripped = last.rstrip(" ")
            spaces += last[len(stripped):]
            if stripped:
                self._parts[-1] = stripped
                break
            self._parts.pop()
        return spaces

    def _close(self, entry: str) -> None:
        marker = _EMPHASIS_MARKERS[entry]
        if self._pending and self._pending[-1] == marker:
            self._pending.pop()
            return
        spaces = self._take_trailing_spaces()
        self._write(marker)
        self._write(spaces)

    def text(self, data: str) -> None:
        if not self._pending:
            super().text(data)
            return
        data = _WHITESPACE_RE.sub(" ", data)
        if self._at_space:
            data = data.lstrip(" ")
        words = data.lstrip(" ")
        self._write(data[: len(data) - len(words)])
        if words:
            self._write("".join(self._pending))
            self._pending.clear()
            self._write(words)

    def start(self, tag: str) -> None:
        if tag in _HEADING_TAGS:
            self._ensure_newlines(2)
            self._write("#" * min(int(tag[1]), 3) + " ")
        elif tag in _PARAGRAPH_TAGS:
            self._ensure_newlines(2)
        elif tag in _LIST_TAGS:
            self._ensure_newlines(1 if self._list_depth() else 2)
            self._stack.append(tag)
        elif tag == "li":
            self._ensure_newlines(1)
            indent = "  " * max(self._list_depth() - 1, 0)
            self._write(indent + self._list_prefix())
        elif tag in _BOLD_TAGS:
            self._pending.append(_EMPHASIS_MARKERS["strong"])
            self._stack.append("strong")
        elif tag in _ITALIC_TAGS:
            self._pending.append(_EMPHASIS_MARKERS["em"])
            self._stack.append("em")
        elif tag == "br":
            self._write("\n")

    def end(self, tag: str) -> None:
        if tag in _HEADING_TAGS or tag in _PARAGRAPH_TAGS:
            self._ensure_newlines(2)
        elif tag in _LIST_TAGS:
            if self._pop(tag) and not self._list_depth():
                self._ensure_newlines(2)
        elif tag in _BOLD_TAGS:
            if self._pop("strong"):
                self._close("strong")
        elif tag in _ITALIC_TAGS:
            if self._pop("em"):
                self._close("em")

    def finish(self) -> str:
        while self._stack:
            entry = self._stack.pop()
            if entry in _EMPHASIS_MARKERS:
                self._close(entry)
        return super().finish()


def _render(source: RichDocument | str, writer: _TextWriter) -> str:
    if isinstance(source, RichDocument):
        _walk_document(source, writer)
    else:
        _walk_markup(source, writer)
    return writer.finish()


class DocumentSerializer:
    """Projections of a RichDocument (or of edited markup) into text formats."""

    @staticmethod
    def to_markup(doc: RichDocument) -> str:
        if doc.is_empty:
            doc = RichDocument.placeholder()
        parts: list[str] = []
        for block in doc.blocks:
            if isinstance(block, Heading):
                level = _clamp_level(block.level)
                parts.append(f"<h{level}>{escape_text(block.text)}</h{level}>")
            elif isinstance(block, BulletList):
                tag = "ol" if block.ordered else "ul"
                items = "".join(
                    f"<li>{DocumentSerializer.inlines_to_markup(item.children)}</li>"
                    for item in block.items
                )
                parts.append(f"<{tag}>{items}</{tag}>")
            elif isinstance(block, Paragraph):
                parts.append(
                    f"<p>{DocumentSerializer.inlines_to_markup(block.children)}</p>"
                )
        return "".join(parts)

    @staticmethod
    def inlines_to_markup(nodes: tuple[Inline, ...]) -> str:
        out: list[str] = []
        for node in nodes:
            if isinstance(node, PlainText):
                out.append(escape_text(node.text))
            elif isinstance(node, Emphasis):
                tag = _EMPHASIS_TAGS[node.kind]
                inner = DocumentSerializer.inlines_to_markup(node.children)
                out.append(f"<{tag}>{inner}</{tag}>")
        return "".join(out)

    @staticmethod
    def to_plain_text(source: RichDocument | str) -> str:
        """Strip all markup, keeping text and block-boundary line breaks."""
        return _render(source, _PlainTextWriter())

    @staticmethod
    def to_markdown(source: RichDocument | str) -> str:
        """Render headings, lists and emphasis as Markdown.

        Unbalanced markup is handled best-effort: closers without a matching
        opener are ignored, openers left on the stack are closed at the end.
        """
        return _render(source, _MarkdownWriter())
