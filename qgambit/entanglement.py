"""
Entanglement resolution: team-wide type-count limits propagated to a fixpoint.

A team may never hold more confirmed pieces of a type than PIECE_LIMITS
allows. Once a type's quota is filled, every still-superposed teammate loses
that possibility. Losing a possibility can confirm another piece, which can
fill another quota, and so on; resolution repeats until a pass removes
nothing.

Captured pieces count towards the quota with the type they were confirmed
as (their slot stays taken), but they are never narrowed themselves.

Two conditions indicate a bookkeeping defect rather than a normal game
situation. Both are logged and reported instead of raised:

* a piece filtered down to zero possibilities is pinned to Pawn;
* the pass cap is reached before the fixpoint.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

from qgambit.constants import MAX_ENTANGLEMENT_PASSES, PIECE_LIMITS, PieceType, Team
from qgambit.models import Piece

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """
    Result of resolving one team.

    Attributes:
        pieces:       Updated piece tuple (all teams; only `team` changed).
        passes:       Passes run, including the final pass that changed
                      nothing.
        converged:    False if the pass cap stopped propagation early.
        fallback_ids: Pieces that ran out of possibilities and were pinned
                      to Pawn. Empty in every legitimate game.
    """

    pieces: tuple[Piece, ...]
    passes: int
    converged: bool
    fallback_ids: tuple[int, ...] = ()


def count_confirmed(pieces: Iterable[Piece], team: Team) -> dict[PieceType, int]:
    """Confirmed pieces of each type for `team`, captured ones included."""
    counts = {t: 0 for t in PieceType}
    for piece in pieces:
        if piece.team == team and piece.is_confirmed:
            counts[piece.possibilities[0]] += 1
    return counts


def count_captured(pieces: Iterable[Piece], team: Team) -> dict[PieceType, int]:
    """Captured pieces of each confirmed type for `team`."""
    counts = {t: 0 for t in PieceType}
    for piece in pieces:
        if piece.team == team and piece.captured and piece.is_confirmed:
            counts[piece.possibilities[0]] += 1
    return counts


def resolve_entanglement(
    pieces: Iterable[Piece],
    team: Team,
    max_passes: int = MAX_ENTANGLEMENT_PASSES,
) -> Resolution:
    """
    Propagate `team`'s type-count limits until nothing changes.

    Each pass takes a fresh snapshot of the confirmed counts, then walks the
    team's non-captured superposed pieces in list order and drops every type
    whose quota is full. A piece confirmed during the pass is added to the
    running counts straight away, so later pieces in the same pass already
    see the new quota.

    Args:
        pieces:     All pieces. Not modified.
        team:       Team to resolve.
        max_passes: Safety cap on the number of passes.

    Returns:
        Resolution with the new pieces and diagnostics.
    """
    result = list(pieces)
    fallback_ids: list[int] = []
    passes = 0
    changed = True

    while changed and passes < max_passes:
        changed = False
        passes += 1
        counts = count_confirmed(result, team)

        for i, piece in enumerate(result):
            if piece.team != team or piece.captured or not piece.is_superposed:
                continue

            remaining = tuple(
                t for t in piece.possibilities if counts[t] < PIECE_LIMITS[t]
            )
            if len(remaining) == len(piece.possibilities):
                continue

            changed = True
            if not remaining:
                _log.error(
                    "entanglement: piece %d (%s) has no possibilities left; pinning to pawn",
                    piece.id,
                    piece.label(),
                )
                fallback_ids.append(piece.id)
                remaining = (PieceType.PAWN,)

            if len(remaining) == 1:
                counts[remaining[0]] += 1
            result[i] = piece.with_possibilities(remaining)

    converged = not changed
    if not converged:
        _log.warning(
            "entanglement: team %s did not converge within %d passes",
            Team(team).name,
            max_passes,
        )

    return Resolution(tuple(result), passes, converged, tuple(fallback_ids))


def resolve_all(
    pieces: Iterable[Piece],
    max_passes: int = MAX_ENTANGLEMENT_PASSES,
) -> tuple[tuple[Piece, ...], tuple[int, ...]]:
    """Resolve white then black. Returns (pieces, fallback ids)."""
    white = resolve_entanglement(pieces, Team.WHITE, max_passes)
    black = resolve_entanglement(white.pieces, Team.BLACK, max_passes)
    return black.pieces, white.fallback_ids + black.fallback_ids
