"""
Shared pytest fixtures for the quantum chess engine tests.

Positions are built from explicit Piece records so each test states
exactly which pieces exist, which team they belong to and what they may be.
Possibilities are written as tag strings ("RQ") for readability.
"""

from typing import Callable

import pytest

from qgambit.constants import Team
from qgambit.models import Board, BoardSetup, GameState, Piece, board_from_pieces, create_initial_board

W = Team.WHITE
B = Team.BLACK


def make_piece(piece_id: int, team: Team, tags: str, x: int, y: int, captured: bool = False) -> Piece:
    return Piece(piece_id, team, tuple(tags), x, y, captured)


def make_position(*pieces: Piece) -> BoardSetup:
    pieces = tuple(pieces)
    return BoardSetup(board_from_pieces(pieces), pieces)


@pytest.fixture
def initial() -> BoardSetup:
    """Fresh 32-piece position in full superposition."""
    return create_initial_board()


@pytest.fixture
def position() -> Callable[..., BoardSetup]:
    """Factory: position(piece, piece, ...) -> (board, pieces)."""
    return make_position


@pytest.fixture
def piece() -> Callable[..., Piece]:
    """Factory: piece(id, team, "RQ", x, y, captured=False) -> Piece."""
    return make_piece


@pytest.fixture
def rook_vs_queen() -> BoardSetup:
    """
    White rook a1 and king h8 against a black queen on a2 and king on c3.

    The queen is capturable by the rook; the black king is out of the
    rook's reach.
    """
    return make_position(
        make_piece(0, W, "R", 0, 0),
        make_piece(1, B, "Q", 0, 1),
        make_piece(2, W, "K", 7, 7),
        make_piece(3, B, "K", 2, 2),
    )


@pytest.fixture
def game_from() -> Callable[..., GameState]:
    """Factory: game_from(board, pieces, turn=WHITE) -> GameState."""

    def _build(board: Board, pieces: tuple[Piece, ...], turn: Team = W) -> GameState:
        return GameState(board=board, pieces=pieces, turn=turn)

    return _build
