"""
Q-Gambit quantum chess engine package.

Every piece starts in a superposition of all six chess types. Moving a piece
observes it: only the types that could have made the move survive. Team-wide
type-count limits (one king, one queen, two rooks, ...) are propagated
after every move, so confirming one piece can collapse others. The package
implements those rules plus a minimax opponent with alpha-beta pruning.

Modules:
    constants    — Piece types, teams, type-count limits, values, search parameters
    models       — Immutable Piece / board / GameState records and move results
    rules        — Move legality oracle over superposed pieces
    entanglement — Team-wide limit propagation to a fixpoint
    observation  — attempt_move(): observation, capture, board update, events
    status       — King capture (game over) and check detection
    game         — Turn order, history, winner, resignation and timeout
    evaluate     — Static evaluation (expected material + positional bonuses)
    search       — Minimax with alpha-beta pruning, find_best_move()
    config       — Validated engine settings with environment overrides
"""

from qgambit.config import EngineConfig
from qgambit.constants import PIECE_LIMITS, PieceType, Team, WinReason, Winner
from qgambit.entanglement import Resolution, resolve_entanglement
from qgambit.evaluate import evaluate
from qgambit.game import PlayResult, new_game, play_move, resign, timeout
from qgambit.models import (
    Destination,
    EventKind,
    GameState,
    HistoryEntry,
    MoveEvent,
    MoveResult,
    Piece,
    create_initial_board,
)
from qgambit.observation import attempt_move
from qgambit.rules import filter_possibilities, get_valid_moves, is_legal_for_type
from qgambit.search import SearchMove, find_best_move, search
from qgambit.status import check_game_over, is_king_captured, is_king_in_check

__all__ = [
    "PIECE_LIMITS",
    "Destination",
    "EngineConfig",
    "EventKind",
    "GameState",
    "HistoryEntry",
    "MoveEvent",
    "MoveResult",
    "Piece",
    "PieceType",
    "PlayResult",
    "Resolution",
    "SearchMove",
    "Team",
    "WinReason",
    "Winner",
    "attempt_move",
    "check_game_over",
    "create_initial_board",
    "evaluate",
    "filter_possibilities",
    "find_best_move",
    "get_valid_moves",
    "is_king_captured",
    "is_king_in_check",
    "is_legal_for_type",
    "new_game",
    "play_move",
    "resign",
    "resolve_entanglement",
    "search",
    "timeout",
]
