"""
Move legality oracle for pieces whose type is not yet known.

Two questions are answered here:

1. Could a piece of type T, standing on `from`, legally move to `to`?
   (is_legal_for_type). Standard chess geometry without castling, en passant
   or promotion. The check knows nothing about which team occupies `to`;
   callers reject own-team destinations before asking.

2. Where can a superposed piece go? (legal_destinations). The answer is the
   union over every type the piece may still be. Candidate squares come from
   python-chess's precomputed attack tables (knight/king steps, pawn
   attacks and sliding attacks masked by the current occupancy, which stop
   at and include the first blocker). Every candidate is then re-checked
   with filter_possibilities, so the list is sound by construction.
"""

from typing import Iterable

import chess

from qgambit.constants import PAWN_DIRECTION, PAWN_HOME_ROW, PieceType, Team
from qgambit.models import (
    Board,
    Coord,
    Destination,
    Piece,
    check_board,
    coord_to_index,
    in_bounds,
    index_to_coord,
)


def occupancy(board: Board) -> chess.Bitboard:
    """Bitboard of every occupied cell."""
    occupied = chess.BB_EMPTY
    for index, piece_id in enumerate(board):
        if piece_id is not None:
            occupied |= chess.BB_SQUARES[index]
    return occupied


def is_path_clear(board: Board, from_index: int, to_index: int) -> bool:
    """True if every square strictly between the two squares is empty.

    The squares must share a rank, file or diagonal; chess.between() is
    empty otherwise.
    """
    for square in chess.SquareSet(chess.between(from_index, to_index)):
        if board[square] is not None:
            return False
    return True


def is_legal_for_type(
    piece_type: PieceType,
    from_xy: Coord,
    to_xy: Coord,
    team: Team,
    board: Board,
    is_capture: bool,
) -> bool:
    """
    Whether a piece of `piece_type` could make the move from_xy -> to_xy.

    Args:
        piece_type: Candidate type to test.
        from_xy:    Origin square (x, y).
        to_xy:      Destination square (x, y).
        team:       Moving team; decides pawn direction and home rank.
        board:      Current occupancy. Not modified.
        is_capture: Whether the destination holds an opposing piece.

    Returns:
        True if the geometry (and, for sliders and pawns, the clearance)
        allows the move.
    """
    fx, fy = from_xy
    tx, ty = to_xy
    dx = tx - fx
    dy = ty - fy
    if dx == 0 and dy == 0:
        return False

    from_index = coord_to_index(fx, fy)
    to_index = coord_to_index(tx, ty)

    if piece_type == PieceType.PAWN:
        team = Team(team)
        forward = PAWN_DIRECTION[team]
        if is_capture:
            return dy == forward and abs(dx) == 1
        if dx != 0 or board[to_index] is not None:
            return False
        if dy == forward:
            return True
        if dy == 2 * forward and fy == PAWN_HOME_ROW[team]:
            return board[coord_to_index(fx, fy + forward)] is None
        return False

    if piece_type == PieceType.KNIGHT:
        return bool(chess.BB_KNIGHT_ATTACKS[from_index] & chess.BB_SQUARES[to_index])

    if piece_type == PieceType.KING:
        return bool(chess.BB_KING_ATTACKS[from_index] & chess.BB_SQUARES[to_index])

    diagonal = abs(dx) == abs(dy)
    straight = dx == 0 or dy == 0
    if piece_type == PieceType.BISHOP:
        aligned = diagonal
    elif piece_type == PieceType.ROOK:
        aligned = straight
    elif piece_type == PieceType.QUEEN:
        aligned = diagonal or straight
    else:
        return False

    return aligned and is_path_clear(board, from_index, to_index)


def filter_possibilities(
    piece: Piece,
    to_xy: Coord,
    board: Board,
    is_capture: bool,
) -> tuple[PieceType, ...]:
    """
    Observation: the piece's possibilities that explain a move to `to_xy`.

    Order is preserved. An empty result means no type the piece may be
    could make this move.
    """
    return tuple(
        t for t in piece.possibilities
        if is_legal_for_type(t, piece.position, to_xy, piece.team, board, is_capture)
    )


def _candidate_squares(piece: Piece, board: Board) -> chess.Bitboard:
    """Superset of the squares any remaining possibility might reach."""
    origin = piece.index
    types = set(piece.possibilities)
    occupied = occupancy(board)
    targets = chess.BB_EMPTY

    if PieceType.KNIGHT in types:
        targets |= chess.BB_KNIGHT_ATTACKS[origin]
    if PieceType.KING in types:
        targets |= chess.BB_KING_ATTACKS[origin]
    if PieceType.BISHOP in types or PieceType.QUEEN in types:
        targets |= chess.BB_DIAG_ATTACKS[origin][chess.BB_DIAG_MASKS[origin] & occupied]
    if PieceType.ROOK in types or PieceType.QUEEN in types:
        targets |= chess.BB_RANK_ATTACKS[origin][chess.BB_RANK_MASKS[origin] & occupied]
        targets |= chess.BB_FILE_ATTACKS[origin][chess.BB_FILE_MASKS[origin] & occupied]
    if PieceType.PAWN in types:
        forward = PAWN_DIRECTION[piece.team]
        for step in (1, 2):
            y = piece.y + forward * step
            if in_bounds(piece.x, y):
                targets |= chess.BB_SQUARES[coord_to_index(piece.x, y)]
        targets |= chess.BB_PAWN_ATTACKS[piece.team.color][origin]

    return targets


def legal_destinations(piece: Piece, board: Board, pieces: Iterable[Piece]) -> list[Destination]:
    """
    Every square the piece could move to under at least one possibility.

    Own-team squares are never included. Each square appears once, in
    ascending board index order, tagged with whether the move captures.
    Captured pieces have no destinations.

    Args:
        piece:  The piece to move.
        board:  Current occupancy. Not modified.
        pieces: All pieces, used to look up the team of occupants.

    Returns:
        List of Destination(x, y, is_capture).

    Raises:
        ValueError: The board does not have 64 cells.
    """
    check_board(board)
    if piece.captured:
        return []

    team_of = {p.id: p.team for p in pieces}
    destinations: list[Destination] = []

    for square in chess.SquareSet(_candidate_squares(piece, board)):
        occupant = board[square]
        is_capture = occupant is not None
        if is_capture and team_of.get(occupant, piece.team) == piece.team:
            # Own piece, or an id the piece list does not know about.
            continue
        x, y = index_to_coord(square)
        if filter_possibilities(piece, (x, y), board, is_capture):
            destinations.append(Destination(x, y, is_capture))

    return destinations


# Name used by UI-facing callers.
get_valid_moves = legal_destinations
