"""Phone number normalization."""

import re

DEFAULT_COUNTRY_PREFIX = "+31"

_NON_DIGITS = re.compile(r"[^\d+]")


def normalize_phone_number(raw: str) -> str:
    """電話番号を E.164 形式に正規化する

    数字と + 以外を取り除き、先頭の 0 は +31 に置き換える。
    + で始まらない場合は + を付ける。

    Args:
        raw: 入力された電話番号

    Returns:
        正規化した電話番号
    """
    phone = _NON_DIGITS.sub("", raw)
    if phone.startswith("0"):
        return DEFAULT_COUNTRY_PREFIX + phone[1:]
    if not phone.startswith("+"):
        return "+" + phone
    return phone
