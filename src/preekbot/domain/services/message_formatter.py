"""Message formatting utilities for outbound content."""

from typing import Any

UNKNOWN = "Onbekend"

CONTENT_MESSAGE_TEMPLATE = (
    "🎯 Nieuwe preek beschikbaar!\n\n"
    "📖 Titel: {title}\n"
    "👤 Spreker: {speaker}\n"
    "📅 Datum: {service_date}\n\n"
    "Hier is een samenvatting van de preek. "
    "Je kunt vragen stellen of reflecteren op de inhoud."
)


def format_content_message(metadata: dict[str, Any]) -> str:
    """Format the default announcement for a content item.

    Missing title, speaker or date are shown as "Onbekend".

    Args:
        metadata: Ticket metadata.

    Returns:
        Announcement text.
    """
    return CONTENT_MESSAGE_TEMPLATE.format(
        title=metadata.get("title") or UNKNOWN,
        speaker=metadata.get("speaker") or UNKNOWN,
        service_date=metadata.get("service_date") or UNKNOWN,
    )


def find_summary_audience(metadata: dict[str, Any]) -> str | None:
    """Return the audience of the first summary content type.

    Args:
        metadata: Ticket metadata.

    Returns:
        Audience ("general" when unspecified), or None if there is no summary.
    """
    for content in metadata.get("content_types") or []:
        if isinstance(content, dict) and content.get("type") == "summary":
            return str(content.get("audience") or "general")
    return None
