from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Union


PLACEHOLDER_MESSAGE = "Provide input or upload files to generate notes."


class SourceKind(str, Enum):
    SLIDES = "slides"
    DOCUMENT = "document"
    TEXT = "text"

    @classmethod
    def from_filename(cls, name: str) -> "SourceKind":
        """Map an uploaded file name to its source kind by extension."""
        ext = os.path.splitext(name)[1].lower()
        try:
            return _KIND_BY_EXT[ext]
        except KeyError:
            raise ValueError(
                f"Unsupported file type: {name}. Allowed: .pptx, .docx, .txt"
            ) from None


_KIND_BY_EXT = {
    ".pptx": SourceKind.SLIDES,
    ".docx": SourceKind.DOCUMENT,
    ".txt": SourceKind.TEXT,
}


class NoteStyle(str, Enum):
    SIMPLIFIED = "simplified"
    DETAILED = "detailed"


class Highlight(str, Enum):
    KEY_POINTS = "keyPoints"
    NAMES = "names"
    DATES = "dates"
    DEFINITIONS = "definitions"


class EmphasisKind(str, Enum):
    STRONG = "strong"
    ITALIC = "italic"


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SourceFile:
    """One uploaded source. ``content`` is None until text has been extracted."""

    name: str
    kind: SourceKind
    content: str | None = None


@dataclass(frozen=True)
class Section:
    title: str
    points: tuple[str, ...] = ()


@dataclass(frozen=True)
class StyleConfig:
    style: NoteStyle = NoteStyle.SIMPLIFIED
    highlights: frozenset[Highlight] = frozenset(
        {Highlight.KEY_POINTS, Highlight.DATES}
    )
    custom_instructions: str | None = None


# ---------------------------------------------------------------------------
# Rich document tree
#
# Every node is frozen and holds its children in tuples, so a node can never
# end up containing itself.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlainText:
    text: str


@dataclass(frozen=True)
class Emphasis:
    kind: EmphasisKind
    children: tuple[Inline, ...] = ()


Inline = Union[PlainText, Emphasis]


@dataclass(frozen=True)
class ListItem:
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class BulletList:
    ordered: bool = False
    items: tuple[ListItem, ...] = ()


@dataclass(frozen=True)
class Paragraph:
    children: tuple[Inline, ...] = ()


Block = Union[Heading, BulletList, Paragraph]


@dataclass(frozen=True)
class RichDocument:
    blocks: tuple[Block, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.blocks

    @classmethod
    def placeholder(cls) -> "RichDocument":
        """The document shown when there is nothing to render."""
        return cls(blocks=(Paragraph((PlainText(PLACEHOLDER_MESSAGE),)),))


