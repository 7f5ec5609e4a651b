"""Tool executor."""

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Any
from uuid import uuid4

from preekbot.application.tools.registry import TOOL_SPECS, available_tools
from preekbot.domain.entities import (
    Member,
    NotificationFrequency,
    TargetGroup,
    ToolKind,
    ToolResult,
)
from preekbot.domain.repositories import MemberRepository
from preekbot.domain.services import ContentDetailService

logger = logging.getLogger(__name__)

GENERIC_TOOL_ERROR = "Er is een technische fout opgetreden. Probeer het later opnieuw."

TARGET_GROUP_MAP: dict[str, TargetGroup] = {
    "jongeren": TargetGroup.YOUTH,
    "volwassenen": TargetGroup.ADULT,
    "verdieping": TargetGroup.DEEPENING,
    "gezinnen": TargetGroup.ADULT,
}

FEEDBACK_MESSAGES: dict[str, str] = {
    "feedback": "Bedankt voor je feedback! We hebben het doorgestuurd (ticket: {ticket_id}).",
    "complaint": (
        "Je klacht is geregistreerd met nummer {ticket_id}. "
        "We nemen zo snel mogelijk contact op."
    ),
    "suggestion": (
        "Bedankt voor je suggestie! We hebben het genoteerd (referentie: {ticket_id})."
    ),
    "question": "Je vraag is ontvangen met nummer {ticket_id}. We komen er op terug.",
    "technical": (
        "Het technische probleem is doorgegeven aan ons team (ticket: {ticket_id})."
    ),
}


@dataclass(frozen=True)
class ToolOutcome:
    """Result of one tool call together with the (possibly updated) member."""

    result: ToolResult
    member: Member


ToolHandler = Callable[[dict[str, Any], Member], Awaitable[ToolOutcome]]


class ToolExecutor:
    """Executes the tools the model may call on behalf of a member.

    Validation failures and unknown tool names produce a failure result.
    Unexpected exceptions are logged and reported with a generic message;
    this method never raises.
    """

    def __init__(
        self,
        member_repository: MemberRepository,
        content_service: ContentDetailService,
    ) -> None:
        """Initialize the executor.

        Args:
            member_repository: Repository used to persist member updates.
            content_service: Content service (church lookup, summaries, feedback).
        """
        self._member_repository = member_repository
        self._content_service = content_service
        self._handlers: dict[ToolKind, ToolHandler] = {
            ToolKind.MANAGE_USER: self._manage_user,
            ToolKind.HANDLE_SERMON: self._handle_sermon,
            ToolKind.MANAGE_SUBSCRIPTION: self._manage_subscription,
            ToolKind.ANSWER_QUESTION: self._answer_question,
            ToolKind.PROCESS_FEEDBACK: self._process_feedback,
        }

    async def execute(
        self, name: str | None, arguments: dict[str, Any], member: Member
    ) -> ToolOutcome:
        """Execute a tool call.

        Args:
            name: Tool name as sent by the model.
            arguments: Parsed arguments.
            member: Member the call is made for.

        Returns:
            ToolOutcome.
        """
        kind = ToolKind.parse(name)
        if kind is None:
            logger.warning("Unknown tool requested: %s (member=%s)", name, member.id)
            return ToolOutcome(
                ToolResult.fail(
                    error=f"Unknown tool: {name}", available_tools=available_tools()
                ),
                member,
            )

        missing = TOOL_SPECS[kind].missing_arguments(arguments)
        if missing:
            logger.warning(
                "Tool %s called without required arguments: %s", kind.value, missing
            )
            return ToolOutcome(
                ToolResult.fail(
                    error="Invalid arguments: Missing required arguments: "
                    + ", ".join(missing)
                ),
                member,
            )

        started = time.monotonic()
        logger.info(
            "Executing tool %s (arguments=%s, member=%s)",
            kind.value,
            sorted(arguments),
            member.id,
        )
        try:
            outcome = await self._handlers[kind](arguments, member)
        except Exception:
            logger.exception(
                "Tool execution failed: %s (member=%s)", kind.value, member.id
            )
            return ToolOutcome(
                ToolResult.fail(error=GENERIC_TOOL_ERROR, tool=kind.value), member
            )

        logger.info(
            "Tool %s completed: success=%s, %.2fms",
            kind.value,
            outcome.result.success,
            (time.monotonic() - started) * 1000,
        )
        return outcome

    async def _save(self, member: Member) -> Member:
        member = member.touch()
        await self._member_repository.save(member)
        return member

    async def _manage_user(
        self, arguments: dict[str, Any], member: Member
    ) -> ToolOutcome:
        changes: dict[str, Any] = {}
        updated: list[str] = []

        name = arguments.get("name")
        if name:
            changes["first_name"] = str(name).strip()
            updated.append(f"naam: {name}")

        age = arguments.get("age")
        if age is not None:
            try:
                age_value = int(age)
            except (TypeError, ValueError):
                age_value = None
            if age_value is not None and 1 <= age_value <= 120:
                changes["age"] = age_value
                updated.append(f"leeftijd: {age_value}")
            else:
                logger.warning("Ignoring invalid age %r (member=%s)", age, member.id)

        target_group = TARGET_GROUP_MAP.get(str(arguments.get("target_group", "")))
        if target_group is not None:
            changes["target_group"] = target_group
            updated.append(f"doelgroep: {arguments['target_group']}")

        church_name = arguments.get("church")
        if church_name:
            church = await self._content_service.get_church_by_name(str(church_name))
            if church and church.get("id") is not None:
                changes["church_ids"] = (int(church["id"]),)
                updated.append(f"kerk: {church_name}")
            else:
                logger.warning("Church not found: %s", church_name)

        member = replace(member, **changes)
        if not member.intake_completed and member.first_name and member.age:
            member = replace(member, intake_completed=True)
            updated.append("intake voltooid")

        member = await self._save(member)
        logger.info("Member %s updated: %s", member.id, updated)
        return ToolOutcome(
            ToolResult.ok("Gebruikersinformatie bijgewerkt", updated=updated), member
        )

    async def _handle_sermon(
        self, arguments: dict[str, Any], member: Member
    ) -> ToolOutcome:
        action = arguments["action"]

        if action == "get_summary":
            if not member.active_content_id:
                return ToolOutcome(
                    ToolResult.fail(message="Geen actieve preek gevonden"), member
                )
            audience = (
                member.target_group.value
                if member.target_group
                else TargetGroup.ADULT.value
            )
            summary = await self._content_service.get_sermon_summary(
                member.active_content_id, audience
            )
            if not summary:
                return ToolOutcome(
                    ToolResult.fail(message="Samenvatting nog niet beschikbaar"), member
                )
            return ToolOutcome(
                ToolResult.ok("Hier is een samenvatting van de preek", summary=summary),
                member,
            )

        if action == "register_attendance":
            attended = _as_bool(arguments.get("attended"), default=True)
            online = _as_bool(arguments.get("online_attended"), default=False)
            if attended:
                member = replace(
                    member,
                    last_attendance_date=datetime.now(timezone.utc),
                    last_attendance_online=online,
                )
                message = (
                    "Online aanwezigheid geregistreerd"
                    if online
                    else "Aanwezigheid geregistreerd"
                )
            else:
                message = "Afwezigheid geregistreerd"
            member = await self._save(member)
            return ToolOutcome(ToolResult.ok(message), member)

        if action == "register_absence":
            alternative = arguments.get("alternative_church") or None
            member = await self._save(replace(member, last_alternative_church=alternative))
            message = (
                f"Geregistreerd dat je bij {alternative} was"
                if alternative
                else "Afwezigheid geregistreerd"
            )
            return ToolOutcome(ToolResult.ok(message), member)

        return ToolOutcome(ToolResult.fail(message=f"Onbekende actie: {action}"), member)

    async def _manage_subscription(
        self, arguments: dict[str, Any], member: Member
    ) -> ToolOutcome:
        action = arguments["action"]

        if action == "pause":
            pause_until = arguments.get("pause_until")
            member = await self._save(
                replace(
                    member,
                    notifications_new_service=False,
                    notifications_reflection=False,
                    notifications_paused_until=_parse_date(pause_until),
                )
            )
            message = (
                f"Notificaties gepauzeerd tot {pause_until}"
                if pause_until
                else "Notificaties gepauzeerd"
            )
            return ToolOutcome(ToolResult.ok(message), member)

        if action == "resume":
            member = await self._save(
                replace(
                    member,
                    notifications_new_service=True,
                    notifications_reflection=True,
                    notifications_paused_until=None,
                )
            )
            return ToolOutcome(ToolResult.ok("Notificaties hervat"), member)

        if action == "change_frequency":
            notification_type = arguments.get("notification_type") or "all"
            frequency_value = arguments.get("frequency") or "weekly"
            try:
                frequency = NotificationFrequency(frequency_value)
            except ValueError:
                return ToolOutcome(
                    ToolResult.fail(message=f"Onbekende frequentie: {frequency_value}"),
                    member,
                )
            changes: dict[str, Any] = {"notification_frequency": frequency}
            if frequency == NotificationFrequency.NEVER:
                if notification_type in ("all", "summary"):
                    changes["notifications_new_service"] = False
                if notification_type in ("all", "reflection"):
                    changes["notifications_reflection"] = False
            member = await self._save(replace(member, **changes))
            return ToolOutcome(
                ToolResult.ok(
                    f"Notificatie frequentie aangepast naar {frequency.value}"
                ),
                member,
            )

        if action == "unsubscribe":
            reason = arguments.get("reason") or "Geen reden opgegeven"
            member = await self._save(
                replace(
                    member,
                    notifications_new_service=False,
                    notifications_reflection=False,
                    unsubscribe_reason=reason,
                    unsubscribe_date=date.today(),
                )
            )
            logger.info("Member %s unsubscribed: %s", member.id, reason)
            return ToolOutcome(
                ToolResult.ok("Je bent afgemeld voor alle notificaties"), member
            )

        return ToolOutcome(ToolResult.fail(message=f"Onbekende actie: {action}"), member)

    async def _answer_question(
        self, arguments: dict[str, Any], member: Member
    ) -> ToolOutcome:
        question = str(arguments["question"])
        category = str(arguments["category"])
        needs_search = _as_bool(arguments.get("needs_search"), default=False)

        logger.info(
            "Question logged (category=%s, needs_search=%s, member=%s)",
            category,
            needs_search,
            member.id,
        )
        member = await self._save(
            replace(member, last_question=question, last_question_category=category)
        )
        return ToolOutcome(
            ToolResult.ok(
                "Vraag geregistreerd voor beantwoording",
                question=question,
                category=category,
                needs_vector_search=needs_search,
            ),
            member,
        )

    async def _process_feedback(
        self, arguments: dict[str, Any], member: Member
    ) -> ToolOutcome:
        feedback_type = str(arguments["type"])
        message = str(arguments["message"])
        severity = arguments.get("severity") or "medium"
        now = datetime.now(timezone.utc)
        ticket_id = f"TICKET-{uuid4().hex[:13]}-{now:%Y%m%d}"

        payload = {
            "id": ticket_id,
            "type": feedback_type,
            "message": message,
            "severity": severity,
            "member_id": member.id,
            "member_name": member.first_name or "Onbekend",
            "phone": member.phone_number,
            "church_ids": list(member.church_ids),
            "timestamp": now.strftime("%Y-%m-%d %H:%M:%S"),
            "status": "open",
        }
        submitted = await self._content_service.submit_feedback(payload)
        if not submitted:
            logger.warning("Feedback %s was not accepted by the content service", ticket_id)

        member = await self._save(replace(member, last_feedback_ticket_id=ticket_id))

        if severity == "high":
            logger.critical(
                "High priority feedback received: %s (%s) from member %s: %s",
                ticket_id,
                feedback_type,
                member.id,
                message,
            )

        template = FEEDBACK_MESSAGES.get(
            feedback_type, "Feedback ontvangen (ticket: {ticket_id})"
        )
        return ToolOutcome(
            ToolResult.ok(
                template.format(ticket_id=ticket_id),
                ticket_id=ticket_id,
                routed_to_admins=submitted,
            ),
            member,
        )


def _parse_date(value: Any) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        logger.warning("Ignoring invalid date: %r", value)
        return None


_TRUE_STRINGS = frozenset({"true", "1", "yes", "ja"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "nee"})


def _as_bool(value: Any, *, default: bool) -> bool:
    """モデルが返した真偽値を解釈する（文字列の "false" も偽として扱う）"""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    logger.warning("Ignoring invalid boolean: %r", value)
    return default
