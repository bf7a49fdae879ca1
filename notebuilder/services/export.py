from dataclasses import dataclass
from enum import Enum

from notebuilder.models import RichDocument
from notebuilder.services.serializer import DocumentSerializer

HTML_ENVELOPE = (
    '<!doctype html><html><head><meta charset="utf-8"><title>Notes</title>'
    "</head><body>{body}</body></html>"
)


class ExportKind(str, Enum):
    PLAIN = "plain"
    MARKDOWN = "markdown"
    MARKUP = "markup-with-wrapper"


class ExportChannel(str, Enum):
    DOWNLOAD = "download"
    PRINT = "print"
    REFEED = "refeed"


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    media_type: str
    content: str


class ExportService:
    """Pick the projection for an output channel and package it as a file."""

    @staticmethod
    def kind_for_channel(channel: str, requested: str | None = None) -> ExportKind:
        """Resolve the export kind for *channel*.

        ``download`` honours *requested* (markdown when omitted); ``print``
        always renders wrapped markup and ``refeed`` always plain text.
        """
        channel = ExportChannel(channel)
        if channel == ExportChannel.PRINT:
            return ExportKind.MARKUP
        if channel == ExportChannel.REFEED:
            return ExportKind.PLAIN
        return ExportKind(requested or ExportKind.MARKDOWN)

    @staticmethod
    def export(source: RichDocument | str, kind: str) -> ExportArtifact:
        """Render *source* (a document or edited markup) as the given kind.

        Raises ``ValueError`` for an unknown kind.
        """
        kind = ExportKind(kind)
        if kind == ExportKind.PLAIN:
            return ExportArtifact(
                "notes.txt", "text/plain", DocumentSerializer.to_plain_text(source)
            )
        if kind == ExportKind.MARKDOWN:
            return ExportArtifact(
                "notes.md", "text/markdown", DocumentSerializer.to_markdown(source)
            )
        body = (
            DocumentSerializer.to_markup(source)
            if isinstance(source, RichDocument)
            else source
        )
        return ExportArtifact(
            "notes.html", "text/html", HTML_ENVELOPE.format(body=body)
        )
