"""Persistence-related exceptions."""


class PersistenceError(Exception):
    """永続化層の基底例外"""


class DatabaseError(PersistenceError):
    """コミットに失敗した（ロールバック済み）"""


class DuplicatePhoneNumberError(PersistenceError):
    """別のメンバーが同じ電話番号で登録済み"""

    def __init__(self, phone_number: str) -> None:
        super().__init__(f"Phone number already registered: {phone_number}")
        self.phone_number = phone_number
