import re
from dataclasses import dataclass
from typing import Iterable

from notebuilder.models import (
    Emphasis,
    EmphasisKind,
    Highlight,
    Inline,
    PlainText,
)


@dataclass(frozen=True)
class EmphasisRule:
    highlight: Highlight
    pattern: re.Pattern
    kind: EmphasisKind


# Declared order is also the overlap priority: an earlier rule keeps a span
# that a later rule would also match.
RULES: tuple[EmphasisRule, ...] = (
    EmphasisRule(
        Highlight.DATES,
        re.compile(
            r"\b\d{1,2}[:/.]\d{1,2}(?:[:/.]\d{1,2})?\b|\b\d{4}\b", re.ASCII
        ),
        EmphasisKind.STRONG,
    ),
    EmphasisRule(
        Highlight.NAMES,
        re.compile(r"\b[A-Z][a-z]+\s[A-Z][a-z]+\b", re.ASCII),
        EmphasisKind.STRONG,
    ),
    EmphasisRule(
        Highlight.DEFINITIONS,
        re.compile(r"\b(?:definition|means|is defined as)\b", re.IGNORECASE),
        EmphasisKind.ITALIC,
    ),
    EmphasisRule(
        Highlight.KEY_POINTS,
        re.compile(r"\b(?:key|important|note)\b", re.IGNORECASE),
        EmphasisKind.STRONG,
    ),
)


def find_spans(
    text: str, highlights: Iterable[Highlight]
) -> list[tuple[int, int, EmphasisKind]]:
    """Return the non-overlapping ``(start, end, kind)`` spans to emphasize.

    Each enabled rule scans the original text. A match that overlaps a span
    already claimed by an earlier rule is discarded.
    """
    enabled = set(highlights)
    claimed: list[tuple[int, int, EmphasisKind]] = []
    # One byte per character, set once an earlier rule claims it.
    covered = bytearray(len(text))
    for rule in RULES:
        if rule.highlight not in enabled:
            continue
        for match in rule.pattern.finditer(text):
            start, end = match.span()
            if start == end or any(covered[start:end]):
                continue
            covered[start:end] = b"\x01" * (end - start)
            claimed.append((start, end, rule.kind))
    return sorted(claimed, key=lambda span: span[0])


def apply_emphasis(text: str, highlights: Iterable[Highlight]) -> tuple[Inline, ...]:
    """Split *text* into plain and emphasized inline nodes."""
    nodes: list[Inline] = []
    cursor = 0
    for start, end, kind in find_spans(text, highlights):
        if start > cursor:
            nodes.append(PlainText(text[cursor:start]))
        nodes.append(Emphasis(kind, (PlainText(text[start:end]),)))
        cursor = end
    if cursor < len(text):
        nodes.append(PlainText(text[cursor:]))
    return tuple(nodes)
