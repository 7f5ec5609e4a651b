"""Multi-church hold rule."""

from preekbot.domain.entities import Member


def has_multiple_churches(member: Member) -> bool:
    """配信を保留すべきかどうか

    複数の教会に所属するメンバーにはどの教会のコンテンツを届けるか決められないため、
    チケットを WAITING にする。判定は常に呼び出し時点の所属で行う。

    Args:
        member: 判定するメンバー

    Returns:
        所属教会が2つ以上の場合 True
    """
    return member.has_multiple_churches
