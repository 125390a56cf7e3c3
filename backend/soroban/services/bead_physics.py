"""Bead physics for a single soroban rod (register value 0-9).

A rod holds one upper bead worth 5 and four lower beads worth 1 each.
A *direct* move is one gesture that only engages beads (addition) or only
releases beads (subtraction). Anything else needs a composite formula.

These predicates are the single source of truth for "can this change be
made with one direct gesture".
"""


def upper(v: int) -> int:
    return 1 if v >= 5 else 0


def lower(v: int) -> int:
    return v - 5 * upper(v)


def can_move_up(v: int, n: int) -> bool:
    """True when +n on a rod at v is a single add-only gesture."""
    if not (0 <= v <= 9) or not (1 <= n <= 9):
        return False
    target = v + n
    if target > 9:
        return False
    du = upper(target) - upper(v)
    dl = lower(target) - lower(v)
    if du < 0 or dl < 0:
        return False
    return du != 0 or dl != 0


def can_move_down(v: int, n: int) -> bool:
    """True when -n on a rod at v is a single release-only gesture."""
    if not (0 <= v <= 9) or not (1 <= n <= 9):
        return False
    target = v - n
    if target < 0:
        return False
    du = upper(target) - upper(v)
    dl = lower(target) - lower(v)
    if du > 0 or dl > 0:
        return False
    return du != 0 or dl != 0


def can_move(v: int, delta: int) -> bool:
    """Signed form of can_move_up / can_move_down. A zero delta is never a move."""
    if delta > 0:
        return can_move_up(v, delta)
    if delta < 0:
        return can_move_down(v, -delta)
    return False


def legal_deltas(v: int, sign: int | None = None, include_five: bool = True) -> list[int]:
    """All signed direct moves available from v.

    sign restricts to +1 / -1 when given. With include_five False the upper
    bead is never touched, so only moves that keep the rod in the lower
    half (and leave upper unchanged) are returned.
    """
    out = []
    for n in range(1, 10):
        if sign in (None, 1) and can_move_up(v, n):
            if include_five or upper(v + n) == upper(v):
                out.append(n)
        if sign in (None, -1) and can_move_down(v, n):
            if include_five or upper(v - n) == upper(v):
                out.append(-n)
    return out
