"""
Observation: applying a move to a quantum piece.

Attempting a move is a measurement. Only the types that could have made the
move survive, the piece relocates, any opposing occupant is captured, and
the team-wide limits are re-propagated for both teams. The result also
carries a declarative list of events (move, capture, collapses, checks) so
that presentation layers can react without the core knowing about them.

Illegal attempts are ordinary results (success=False) and never raise.
"""

from typing import Iterable

from qgambit.constants import MAX_ENTANGLEMENT_PASSES, Team
from qgambit.entanglement import resolve_all
from qgambit.models import (
    Board,
    EventKind,
    MoveEvent,
    MoveResult,
    Piece,
    check_board,
    coord_to_index,
    find_piece,
    in_bounds,
)
from qgambit.rules import filter_possibilities
from qgambit.status import is_king_in_check


def _reject(pieces: tuple[Piece, ...], board: Board, message: str) -> MoveResult:
    return MoveResult(success=False, pieces=pieces, board=board, message=message)


def _collapse_events(
    before: tuple[Piece, ...],
    after: tuple[Piece, ...],
    mover_id: int,
) -> list[MoveEvent]:
    """COLLAPSE events for pieces that went from superposed to confirmed."""
    was_superposed = {p.id for p in before if p.is_superposed}
    collapsed = [p for p in after if p.id in was_superposed and p.is_confirmed]
    collapsed.sort(key=lambda p: (p.id != mover_id, p.id))
    return [
        MoveEvent(EventKind.COLLAPSE, p.id, p.x, p.y, piece_type=p.confirmed_type)
        for p in collapsed
    ]


def attempt_move(
    pieces: Iterable[Piece],
    board: Board,
    piece_id: int,
    to_x: int,
    to_y: int,
    *,
    max_passes: int = MAX_ENTANGLEMENT_PASSES,
    with_events: bool = True,
) -> MoveResult:
    """
    Try to move piece `piece_id` to (to_x, to_y).

    Args:
        pieces:     All pieces. Not modified.
        board:      Current occupancy. Not modified.
        piece_id:   Id of the piece to move.
        to_x, to_y: Destination square.
        max_passes: Entanglement pass cap per team.
        with_events: Build the event list. The search turns this off;
                     the resulting state is identical either way.

    Returns:
        MoveResult. On success it holds the new pieces and board, the
        captured piece (as it was before capture, if any), a message and
        the events. On failure the inputs are returned unchanged.

    Raises:
        ValueError: The board does not have 64 cells.
    """
    pieces = tuple(pieces)
    board = tuple(board)
    check_board(board)

    piece = find_piece(pieces, piece_id)
    if piece is None:
        return _reject(pieces, board, "Piece not found")
    if piece.captured:
        return _reject(pieces, board, "Piece has been captured")
    if not in_bounds(to_x, to_y):
        return _reject(pieces, board, "Destination is off the board")
    if (to_x, to_y) == piece.position:
        return _reject(pieces, board, "Piece is already on that square")

    dest_index = coord_to_index(to_x, to_y)
    occupant_id = board[dest_index]
    is_capture = occupant_id is not None
    captured_piece = None
    if is_capture:
        captured_piece = find_piece(pieces, occupant_id)
        if captured_piece is None:
            return _reject(pieces, board, "Destination holds an unknown piece")
        if captured_piece.team == piece.team:
            return _reject(pieces, board, "Cannot capture your own piece")

    observed = filter_possibilities(piece, (to_x, to_y), board, is_capture)
    if not observed:
        return _reject(pieces, board, "No legal type explains this move")

    moved = piece.with_possibilities(observed).moved_to(to_x, to_y)
    updated = []
    for p in pieces:
        if p.id == piece.id:
            updated.append(moved)
        elif captured_piece is not None and p.id == captured_piece.id:
            updated.append(p.mark_captured())
        else:
            updated.append(p)

    cells = list(board)
    cells[piece.index] = None
    cells[dest_index] = piece.id
    new_board = tuple(cells)

    new_pieces, fallback_ids = resolve_all(updated, max_passes)

    events: list[MoveEvent] = []
    if with_events:
        events.append(MoveEvent(EventKind.MOVE, piece.id, to_x, to_y))
        if captured_piece is not None:
            events.append(MoveEvent(EventKind.CAPTURE, captured_piece.id, to_x, to_y))
        events.extend(_collapse_events(pieces, new_pieces, piece.id))
        for team in Team:
            if is_king_in_check(new_board, new_pieces, team):
                events.append(MoveEvent(EventKind.CHECK, team=team))

    if len(observed) == 1:
        message = f"Piece collapsed to {observed[0].tag}!"
    else:
        message = f"Piece now has {len(observed)} possibilities"

    return MoveResult(
        success=True,
        pieces=new_pieces,
        board=new_board,
        captured_piece=captured_piece,
        message=message,
        events=tuple(events),
        invariant_violations=fallback_ids,
    )
