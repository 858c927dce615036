"""
Static evaluation of a quantum position.

A piece whose type is still open is worth the average value of the types it
may be. This keeps the evaluation honest about uncertainty: a back-rank
piece that might be the king is far more valuable than one already
confirmed as a pawn, and losing possibilities through entanglement shows up
as a material swing even though nothing was captured.

On top of material two small positional terms apply:

- Centre control: pieces in the inner four squares earn 2 * CENTER_BONUS,
  pieces in the surrounding ring (c3-f6) earn CENTER_BONUS.
- Pawn advancement: any piece that may still be a pawn earns ADVANCE_BONUS
  per rank of progress towards the far side.

Scores are from white's perspective (team 0 positive), the minimax
convention used by qgambit.search. A position where a king can no longer
exist is terminal and scores +inf / -inf.
"""

import math
from typing import Iterable

from qgambit.constants import (
    ADVANCE_BONUS,
    CENTER_BONUS,
    INNER_CENTER,
    OUTER_CENTER,
    PIECE_VALUES,
    PieceType,
    Team,
    Winner,
)
from qgambit.models import Board, Piece
from qgambit.status import check_game_over


def piece_value(piece: Piece) -> float:
    """Mean centipawn value over the piece's possibilities."""
    return sum(PIECE_VALUES[t] for t in piece.possibilities) / len(piece.possibilities)


def _within(x: int, y: int, bounds: tuple[int, int]) -> bool:
    low, high = bounds
    return low <= x <= high and low <= y <= high


def positional_bonus(piece: Piece) -> int:
    """Centre and advancement bonus for one piece, before team sign."""
    bonus = 0
    if _within(piece.x, piece.y, INNER_CENTER):
        bonus += CENTER_BONUS * 2
    elif _within(piece.x, piece.y, OUTER_CENTER):
        bonus += CENTER_BONUS

    if piece.could_be(PieceType.PAWN):
        advancement = piece.y if piece.team == Team.WHITE else 7 - piece.y
        bonus += advancement * ADVANCE_BONUS
    return bonus


def evaluate(board: Board, pieces: Iterable[Piece]) -> float:
    """
    Score a position from white's perspective.

    Args:
        board:  Current occupancy. Unused by the current terms but part of
                the signature so board-dependent terms can be added.
        pieces: All pieces; captured ones are ignored.

    Returns:
        math.inf if black's king is gone, -math.inf if white's king is gone,
        otherwise material plus positional bonuses (white minus black).

    Example:
        >>> from qgambit.models import create_initial_board
        >>> board, pieces = create_initial_board()
        >>> abs(evaluate(board, pieces)) < 1
        True
    """
    pieces = tuple(pieces)
    winner = check_game_over(pieces)
    if winner is Winner.WHITE:
        return math.inf
    if winner is Winner.BLACK:
        return -math.inf

    score = 0.0
    for piece in pieces:
        if piece.captured:
            continue
        sign = 1 if piece.team == Team.WHITE else -1
        score += sign * (piece_value(piece) + positional_bonus(piece))
    return score
