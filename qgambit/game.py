"""
Turn-level game driver over immutable GameState snapshots.

attempt_move() knows nothing about whose turn it is or whether the game has
ended. This module adds exactly that layer: turn order, the move history,
the winner and how it was decided (king capture, resignation, timeout).
Every function returns a new GameState; the previous one stays valid, so
callers may keep them for undo or replay.
"""

from dataclasses import dataclass, replace

from qgambit.constants import MAX_ENTANGLEMENT_PASSES, Team, WinReason, Winner
from qgambit.models import (
    EventKind,
    GameState,
    HistoryEntry,
    MoveEvent,
    create_initial_board,
)
from qgambit.observation import attempt_move
from qgambit.search import SearchMove, generate_moves
from qgambit.status import check_game_over, winner_team


@dataclass(frozen=True)
class PlayResult:
    """
    Outcome of play_move(). On failure `state` is the unchanged input.

    invariant_violations lists pieces that entanglement had to pin to Pawn
    after running out of possibilities (see qgambit.entanglement).
    """

    success: bool
    state: GameState
    captured_piece_id: int | None = None
    message: str = ""
    events: tuple[MoveEvent, ...] = ()
    invariant_violations: tuple[int, ...] = ()


def new_game() -> GameState:
    board, pieces = create_initial_board()
    return GameState(board=board, pieces=pieces, turn=Team.WHITE)


def play_move(
    state: GameState,
    piece_id: int,
    to_x: int,
    to_y: int,
    *,
    max_passes: int = MAX_ENTANGLEMENT_PASSES,
) -> PlayResult:
    """
    Play one move for the side to move.

    Rejects moves once the game is over and moves of the other team's
    pieces; everything else is decided by attempt_move(). On success the
    turn passes, the move is appended to the history and the winner is
    recomputed.
    """
    if state.is_over:
        return PlayResult(False, state, message="Game is already over")

    piece = state.piece(piece_id)
    if piece is not None and piece.team != state.turn:
        return PlayResult(False, state, message="Not this team's turn")

    result = attempt_move(
        state.pieces, state.board, piece_id, to_x, to_y, max_passes=max_passes
    )
    if not result.success:
        return PlayResult(False, state, message=result.message)

    captured_id = result.captured_piece.id if result.captured_piece else None
    entry = HistoryEntry(piece_id, piece.position, (to_x, to_y), captured_id)
    winner = check_game_over(result.pieces)

    events = result.events
    if winner is not None:
        events += (MoveEvent(EventKind.GAME_OVER, team=winner_team(winner)),)

    new_state = replace(
        state,
        board=result.board,
        pieces=result.pieces,
        turn=state.turn.opponent,
        history=state.history + (entry,),
        winner=winner,
        win_reason=WinReason.KING_CAPTURE if winner is not None else None,
    )
    return PlayResult(
        True,
        new_state,
        captured_id,
        result.message,
        events,
        result.invariant_violations,
    )


def _forfeit(state: GameState, team: Team, reason: WinReason) -> GameState:
    if state.is_over:
        return state
    winner = Winner.WHITE if Team(team) == Team.BLACK else Winner.BLACK
    return replace(state, winner=winner, win_reason=reason)


def resign(state: GameState, team: Team) -> GameState:
    """`team` gives up; the opponent wins. No-op if the game is over."""
    return _forfeit(state, team, WinReason.RESIGN)


def timeout(state: GameState, team: Team) -> GameState:
    """
    `team` ran out of time; the opponent wins. No-op if the game is over.

    The core keeps no clock. Callers that run timed games measure elapsed
    time themselves and call this when a side's allowance is spent.
    """
    return _forfeit(state, team, WinReason.TIMEOUT)


def legal_moves_for_turn(state: GameState) -> list[SearchMove]:
    """Moves available to the side to move; empty once the game is over."""
    if state.is_over:
        return []
    return generate_moves(state.board, state.pieces, state.turn)
