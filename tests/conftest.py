"""Shared pytest fixtures."""

import pytest

from notebuilder.models import (
    BulletList,
    Emphasis,
    EmphasisKind,
    Heading,
    ListItem,
    Paragraph,
    PlainText,
    RichDocument,
)


@pytest.fixture
def sample_document():
    """Heading, one bullet list with emphasis, and a closing paragraph."""
    return RichDocument(blocks=(
        Heading(level=2, text="Title"),
        BulletList(ordered=False, items=(
            ListItem((PlainText("one"),)),
            ListItem((Emphasis(EmphasisKind.STRONG, (PlainText("two"),)),)),
        )),
        Paragraph((Emphasis(EmphasisKind.ITALIC, (PlainText("end"),)),)),
    ))
