"""Tool registry: required arguments and JSON schemas per tool."""

from dataclasses import dataclass
from typing import Any

from preekbot.domain.entities import ToolKind


@dataclass(frozen=True)
class ToolSpec:
    """Static description of a tool.

    Attributes:
        kind: Tool kind.
        required: Arguments that must be present and non-empty.
        description: Description shown to the model.
        properties: JSON schema properties.
    """

    kind: ToolKind
    required: tuple[str, ...]
    description: str
    properties: dict[str, Any]

    def definition(self) -> dict[str, Any]:
        """Responses API function tool definition."""
        return {
            "type": "function",
            "name": self.kind.value,
            "description": self.description,
            "strict": False,
            "parameters": {
                "type": "object",
                "properties": self.properties,
                "required": list(self.required),
            },
        }

    def missing_arguments(self, arguments: dict[str, Any]) -> list[str]:
        """Return the required arguments that are absent or empty."""
        return [name for name in self.required if _is_empty(arguments.get(name))]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


TOOL_SPECS: dict[ToolKind, ToolSpec] = {
    ToolKind.HANDLE_SERMON: ToolSpec(
        kind=ToolKind.HANDLE_SERMON,
        required=("action",),
        description=(
            "GEBRUIK BIJ: ja/nee op samenvattingsvraag, aanwezigheid dienst, "
            "samenvatting verzoek, andere kerk bezocht"
        ),
        properties={
            "action": {
                "type": "string",
                "enum": ["get_summary", "register_attendance", "register_absence"],
                "description": "Welke actie uitvoeren",
            },
            "attended": {"type": "boolean", "description": "Was aanwezig bij dienst"},
            "wants_summary": {
                "type": "boolean",
                "description": "Wil samenvatting ontvangen",
            },
            "alternative_church": {
                "type": "string",
                "description": "Naam andere kerk indien bezocht",
            },
            "online_attended": {
                "type": "boolean",
                "description": "Online gekeken/geluisterd",
            },
        },
    ),
    ToolKind.MANAGE_USER: ToolSpec(
        kind=ToolKind.MANAGE_USER,
        required=(),
        description=(
            "GEBRUIK BIJ: naam genoemd, leeftijd, kerk wijzigen, doelgroep instellen. "
            "OOK BIJ TYPOS zoals 'maan naam'"
        ),
        properties={
            "name": {"type": "string", "description": "Naam van gebruiker"},
            "age": {"type": "integer", "description": "Leeftijd"},
            "church": {"type": "string", "description": "Huidige kerk"},
            "target_group": {
                "type": "string",
                "enum": ["jongeren", "volwassenen", "verdieping", "gezinnen"],
                "description": "Content doelgroep",
            },
            "additional_info": {
                "type": "object",
                "description": "Overige gebruikersinfo",
            },
        },
    ),
    ToolKind.MANAGE_SUBSCRIPTION: ToolSpec(
        kind=ToolKind.MANAGE_SUBSCRIPTION,
        required=("action",),
        description=(
            "GEBRUIK BIJ: notificaties aanpassen, pauzeren, afmelden, "
            "te veel/weinig berichten"
        ),
        properties={
            "action": {
                "type": "string",
                "enum": ["change_frequency", "pause", "unsubscribe", "resume"],
                "description": "Type actie",
            },
            "notification_type": {
                "type": "string",
                "enum": ["all", "summary", "reflection", "weekly"],
                "description": "Welke notificaties",
            },
            "frequency": {
                "type": "string",
                "enum": ["daily", "weekly", "biweekly", "never"],
                "description": "Nieuwe frequentie",
            },
            "pause_until": {
                "type": "string",
                "description": "Pauzeren tot datum (YYYY-MM-DD)",
            },
            "reason": {"type": "string", "description": "Reden voor wijziging"},
        },
    ),
    ToolKind.ANSWER_QUESTION: ToolSpec(
        kind=ToolKind.ANSWER_QUESTION,
        required=("question", "category"),
        description=(
            "GEBRUIK BIJ: vragen over geloof, God, Bijbel, preek betekenis, "
            "theologische onderwerpen"
        ),
        properties={
            "question": {"type": "string", "description": "De gestelde vraag"},
            "category": {
                "type": "string",
                "enum": ["theology", "bible", "sermon", "faith", "practical"],
                "description": "Type vraag",
            },
            "needs_search": {
                "type": "boolean",
                "description": "Vector store doorzoeken voor context",
            },
        },
    ),
    ToolKind.PROCESS_FEEDBACK: ToolSpec(
        kind=ToolKind.PROCESS_FEEDBACK,
        required=("type", "message"),
        description=(
            "GEBRUIK BIJ: feedback, klachten, suggesties, vragen over de app, "
            "technische problemen"
        ),
        properties={
            "type": {
                "type": "string",
                "enum": ["feedback", "complaint", "suggestion", "question", "technical"],
                "description": "Type feedback",
            },
            "message": {"type": "string", "description": "De feedback/vraag"},
            "severity": {
                "type": "string",
                "enum": ["low", "medium", "high"],
                "description": "Prioriteit",
            },
        },
    ),
}


def tool_definitions() -> list[dict[str, Any]]:
    """All function tool definitions, in registry order."""
    return [spec.definition() for spec in TOOL_SPECS.values()]


def available_tools() -> list[str]:
    return [kind.value for kind in ToolKind]
