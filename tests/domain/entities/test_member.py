"""Tests for Member entity."""

from datetime import datetime, timezone

import pytest

from preekbot.domain.entities import Member


class TestMemberValidation:
    """Member バリデーションのテスト"""

    def test_valid_member(self) -> None:
        member = Member(phone_number="+31612345678", first_name="Anna", age=34)
        assert member.phone_number == "+31612345678"
        assert member.church_ids == ()

    @pytest.mark.parametrize("phone", ["0612345678", "+0612345678", "+31abc", ""])
    def test_invalid_phone(self, phone: str) -> None:
        with pytest.raises(ValueError):
            Member(phone_number=phone)

    @pytest.mark.parametrize("age", [0, 121])
    def test_invalid_age(self, age: int) -> None:
        with pytest.raises(ValueError):
            Member(phone_number="+31612345678", age=age)


class TestChurches:
    """教会所属のテスト"""

    def test_single_church(self) -> None:
        member = Member(phone_number="+31612345678", church_ids=(3,))
        assert not member.has_multiple_churches
        assert member.primary_church_id == 3
        assert member.is_member_of(3)
        assert not member.is_member_of(4)

    def test_multiple_churches(self) -> None:
        member = Member(phone_number="+31612345678", church_ids=(3, 4))
        assert member.has_multiple_churches

    def test_no_church(self) -> None:
        assert Member(phone_number="+31612345678").primary_church_id == 0


class TestConversation:
    """会話ハンドルのテスト"""

    def test_with_conversation_sets_both_fields(self) -> None:
        member = Member(phone_number="+31612345678")

        updated = member.with_conversation("conv_1", "sermon-1")

        assert updated.conversation_id == "conv_1"
        assert updated.active_content_id == "sermon-1"
        assert member.conversation_id is None

    def test_reset_conversation_clears_both_fields(self) -> None:
        member = Member(phone_number="+31612345678").with_conversation(
            "conv_1", "sermon-1"
        )

        reset = member.reset_conversation()

        assert reset.conversation_id is None
        assert reset.active_content_id is None

    def test_touch(self) -> None:
        now = datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert Member(phone_number="+31612345678").touch(now).last_activity == now
