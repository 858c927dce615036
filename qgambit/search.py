"""
Search entry point: minimax with alpha-beta pruning over quantum positions.

Every simulated move goes through the same attempt_move pipeline the game
uses, entanglement resolution included. Propagation can confirm or demote
pieces far from the moved one, changing material in ways a move-only
simulation would miss, so the evaluation always sees the post-propagation
state.

Conventions:
    - Team 0 (white) maximises, team 1 (black) minimises. Scores come from
      qgambit.evaluate and are always from white's perspective.
    - alpha and beta are threaded through the recursion as plain
      parameters; nothing is shared between calls except SearchState (node
      counter and entanglement pass cap).
    - Move ordering puts captures first (stable otherwise). This only
      affects how much is pruned, never the chosen score.
    - At the root, a move that ends the game in the mover's favour is
      played immediately. Otherwise the first move with the strictly best
      score wins, which makes the choice deterministic for a given input.

The search has no clock and no cancellation. Callers bound its cost by
choosing the depth; the console runs it on a background thread.
"""

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Iterable, NamedTuple

from qgambit.constants import (
    CAPTURE_ORDER_SCORE,
    DEFAULT_SEARCH_DEPTH,
    MAX_ENTANGLEMENT_PASSES,
    Team,
    Winner,
)
from qgambit.evaluate import evaluate
from qgambit.models import (
    Board,
    Coord,
    Destination,
    MoveResult,
    Piece,
    check_board,
    square_name,
)
from qgambit.observation import attempt_move
from qgambit.rules import legal_destinations
from qgambit.status import check_game_over

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchMove:
    """A candidate move: the piece as it stood, its origin and destination."""

    piece: Piece
    from_xy: Coord
    to: Destination

    @property
    def is_capture(self) -> bool:
        return self.to.is_capture

    def notation(self) -> str:
        """Origin and destination square names, e.g. 'b2c4'."""
        return square_name(*self.from_xy) + square_name(self.to.x, self.to.y)


@dataclass
class SearchState:
    """
    Mutable bookkeeping for one search call.

    Attributes:
        node_count: Positions reached by a simulated move.
        start_time: Monotonic timestamp when the search began.
        max_passes: Entanglement pass cap used for every simulated move.
    """

    node_count: int = 0
    start_time: float = field(default_factory=time.monotonic)
    max_passes: int = MAX_ENTANGLEMENT_PASSES

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.start_time) * 1000)


class SearchResult(NamedTuple):
    move: SearchMove | None
    score: float
    depth: int
    nodes: int
    elapsed_ms: int


def _order_moves(moves: Iterable[SearchMove]) -> list[SearchMove]:
    """Captures first; the sort is stable so enumeration order breaks ties."""
    return sorted(
        moves,
        key=lambda m: CAPTURE_ORDER_SCORE if m.is_capture else 0,
        reverse=True,
    )


def generate_moves(board: Board, pieces: Iterable[Piece], team: Team) -> list[SearchMove]:
    """
    All legal moves for `team`, ordered for alpha-beta.

    Pieces are enumerated in list order and destinations by board index
    before the capture-first ordering is applied.
    """
    pieces = tuple(pieces)
    moves: list[SearchMove] = []
    for piece in pieces:
        if piece.captured or piece.team != team:
            continue
        for dest in legal_destinations(piece, board, pieces):
            moves.append(SearchMove(piece, piece.position, dest))
    return _order_moves(moves)


def _simulate(
    board: Board, pieces: tuple[Piece, ...], move: SearchMove, state: SearchState
) -> MoveResult:
    """Play `move` on a copy; every successful simulation is one node."""
    result = attempt_move(
        pieces,
        board,
        move.piece.id,
        move.to.x,
        move.to.y,
        max_passes=state.max_passes,
        with_events=False,
    )
    if result.success:
        state.node_count += 1
    return result


def minimax(
    board: Board,
    pieces: tuple[Piece, ...],
    depth: int,
    maximizing: bool,
    alpha: float,
    beta: float,
    state: SearchState,
) -> float:
    """
    Minimax value of a position with alpha-beta pruning.

    Args:
        board:      Current occupancy.
        pieces:     All pieces.
        depth:      Remaining plies. At 0 the static evaluation is returned.
        maximizing: True when white is to move.
        alpha:      Best score white can already guarantee.
        beta:       Best score black can already guarantee.
        state:      Node counter and pass cap.

    Returns:
        Score from white's perspective. Terminal positions (a king gone)
        and positions where the side to move has no legal move return the
        static evaluation.
    """
    if depth <= 0 or check_game_over(pieces) is not None:
        return evaluate(board, pieces)

    team = Team.WHITE if maximizing else Team.BLACK
    moves = generate_moves(board, pieces, team)
    if not moves:
        return evaluate(board, pieces)

    best = -math.inf if maximizing else math.inf
    searched = False

    for move in moves:
        result = _simulate(board, pieces, move, state)
        if not result.success:
            continue
        searched = True
        score = minimax(
            result.board, result.pieces, depth - 1, not maximizing, alpha, beta, state
        )

        if maximizing:
            best = max(best, score)
            alpha = max(alpha, score)
        else:
            best = min(best, score)
            beta = min(beta, score)

        # Cutoff: the opponent already has a better alternative elsewhere.
        if beta <= alpha:
            break

    if not searched:
        return evaluate(board, pieces)
    return best


def search(
    board: Board,
    pieces: Iterable[Piece],
    ai_team: Team,
    depth: int = DEFAULT_SEARCH_DEPTH,
    *,
    max_passes: int = MAX_ENTANGLEMENT_PASSES,
) -> SearchResult:
    """
    Full root search for `ai_team`.

    Args:
        board:   Current occupancy. Not modified.
        pieces:  All pieces. Not modified.
        ai_team: Team to move.
        depth:   Plies to search; values below 1 are treated as 1.
        max_passes: Entanglement pass cap for simulated moves.

    Returns:
        SearchResult(move, score, depth, nodes, elapsed_ms). move is None
        when the team has no legal move, in which case score is the static
        evaluation and nodes is 0.

    Raises:
        ValueError: The board does not have 64 cells.
    """
    board = tuple(board)
    check_board(board)
    pieces = tuple(pieces)
    ai_team = Team(ai_team)
    depth = max(1, depth)
    state = SearchState(max_passes=max_passes)

    moves = generate_moves(board, pieces, ai_team)
    if not moves:
        return SearchResult(None, evaluate(board, pieces), 0, 0, state.elapsed_ms())

    maximizing = ai_team == Team.WHITE
    winning = Winner.WHITE if maximizing else Winner.BLACK
    alpha, beta = -math.inf, math.inf
    best_value = -math.inf if maximizing else math.inf
    best_move: SearchMove | None = None
    first_playable: SearchMove | None = None

    for move in moves:
        result = _simulate(board, pieces, move, state)
        if not result.success:
            continue
        if first_playable is None:
            first_playable = move

        if check_game_over(result.pieces) is winning:
            best_move = move
            best_value = math.inf if maximizing else -math.inf
            break

        value = minimax(
            result.board, result.pieces, depth - 1, not maximizing, alpha, beta, state
        )

        if maximizing:
            if value > best_value:
                best_value, best_move = value, move
            alpha = max(alpha, best_value)
        else:
            if value < best_value:
                best_value, best_move = value, move
            beta = min(beta, best_value)

    if best_move is None:
        # Every line loses outright; play the first legal move anyway.
        best_move = first_playable

    _log.debug(
        "search team=%s depth=%d nodes=%d move=%s score=%s",
        ai_team.name,
        depth,
        state.node_count,
        best_move.notation() if best_move else None,
        best_value,
    )
    return SearchResult(best_move, best_value, depth, state.node_count, state.elapsed_ms())


def find_best_move(
    board: Board,
    pieces: Iterable[Piece],
    ai_team: Team,
    depth: int = DEFAULT_SEARCH_DEPTH,
    *,
    max_passes: int = MAX_ENTANGLEMENT_PASSES,
) -> SearchMove | None:
    """Best move for `ai_team`, or None if it has no legal move."""
    return search(board, pieces, ai_team, depth, max_passes=max_passes).move
