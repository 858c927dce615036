"""
Game-over and check detection.

The game ends only when a team can no longer have a king: no non-captured
piece of that team still carries K among its possibilities. That happens
when the confirmed king is captured, when the last king candidate is
captured, or when observation / entanglement filters K out of every
remaining candidate.

Check is only defined for a confirmed king. While the king is still
superposed its square is ambiguous and the team is never reported in check.
"""

from typing import Iterable

from qgambit.constants import PieceType, Team, Winner
from qgambit.models import Board, Piece
from qgambit.rules import filter_possibilities


def is_king_captured(pieces: Iterable[Piece], team: Team) -> bool:
    """True iff no non-captured piece of `team` may still be the king."""
    return not any(
        p.team == team and not p.captured and p.could_be(PieceType.KING)
        for p in pieces
    )


def check_game_over(pieces: Iterable[Piece]) -> Winner | None:
    """
    Winner if either king is gone, else None.

    White is checked first, so a position where both kings are gone
    reports BLACK. DRAW is never produced here.
    """
    pieces = tuple(pieces)
    if is_king_captured(pieces, Team.WHITE):
        return Winner.BLACK
    if is_king_captured(pieces, Team.BLACK):
        return Winner.WHITE
    return None


def winner_team(winner: Winner | None) -> Team | None:
    if winner is Winner.WHITE:
        return Team.WHITE
    if winner is Winner.BLACK:
        return Team.BLACK
    return None


def confirmed_king(pieces: Iterable[Piece], team: Team) -> Piece | None:
    for piece in pieces:
        if (
            piece.team == team
            and not piece.captured
            and piece.possibilities == (PieceType.KING,)
        ):
            return piece
    return None


def is_king_in_check(board: Board, pieces: Iterable[Piece], team: Team) -> bool:
    """
    Whether `team`'s confirmed king is attacked.

    Args:
        board:  Current occupancy.
        pieces: All pieces.
        team:   Team whose king is examined.

    Returns:
        False if the king is not confirmed. Otherwise True iff some
        non-captured opposing piece has at least one possibility that could
        capture on the king's square.
    """
    pieces = tuple(pieces)
    king = confirmed_king(pieces, team)
    if king is None:
        return False

    for piece in pieces:
        if piece.team == team or piece.captured:
            continue
        if filter_possibilities(piece, king.position, board, True):
            return True
    return False
