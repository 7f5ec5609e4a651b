"""Member service."""

import logging

from preekbot.domain.entities import Member
from preekbot.domain.exceptions import MemberNotFoundError
from preekbot.domain.repositories import MemberRepository
from preekbot.domain.services import normalize_phone_number

logger = logging.getLogger(__name__)


class MemberService:
    """Member registration and conversation reset."""

    def __init__(self, member_repository: MemberRepository) -> None:
        self._member_repository = member_repository

    async def find_or_create_by_phone(
        self, phone_number: str, church_ids: tuple[int, ...] = ()
    ) -> Member:
        """Return the member for a phone number, registering it if unknown.

        Args:
            phone_number: Phone number in any common notation.
            church_ids: Churches for a newly registered member.

        Returns:
            Existing or newly created member.
        """
        phone = normalize_phone_number(phone_number)
        member = await self._member_repository.find_by_phone(phone)
        if member is not None:
            return member

        member = Member(phone_number=phone, church_ids=church_ids)
        await self._member_repository.save(member)
        logger.info("Created member %s for %s", member.id, phone)
        return member

    async def reset_conversation(self, phone_number: str) -> Member:
        """Clear the conversation handle and active content of a member.

        Raises:
            MemberNotFoundError: No member with this phone number.
        """
        phone = normalize_phone_number(phone_number)
        member = await self._member_repository.find_by_phone(phone)
        if member is None:
            raise MemberNotFoundError(phone)

        previous = member.conversation_id
        member = member.reset_conversation()
        await self._member_repository.save(member)
        logger.info(
            "Reset conversation of member %s (was %s)", member.id, previous
        )
        return member
