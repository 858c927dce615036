"""Tests for move generation and minimax search."""

import logging
import math

import pytest

from qgambit.constants import Team
from qgambit.models import piece_at
from qgambit.observation import attempt_move
from qgambit.search import SearchMove, find_best_move, generate_moves, search

W = Team.WHITE
B = Team.BLACK


@pytest.fixture
def boxed_in(position, piece):
    """White king and pawns on the top edge with no legal move at all."""
    return position(
        piece(0, W, "K", 0, 7),
        piece(1, W, "P", 1, 7),
        piece(2, W, "P", 0, 6),
        piece(3, W, "P", 1, 6),
        piece(4, B, "K", 7, 0),
    )


class TestGenerateMoves:
    def test_captures_first(self, rook_vs_queen):
        board, pieces = rook_vs_queen
        moves = generate_moves(board, pieces, W)
        assert moves[0].is_capture
        assert (moves[0].to.x, moves[0].to.y) == (0, 1)
        assert not any(m.is_capture for m in moves[1:])

    def test_only_team_pieces(self, initial):
        board, pieces = initial
        assert {m.piece.team for m in generate_moves(board, pieces, B)} == {B}

    def test_notation(self, initial):
        board, pieces = initial
        knight_jumps = [
            m for m in generate_moves(board, pieces, W)
            if m.piece.id == 3 and (m.to.x, m.to.y) == (2, 3)
        ]
        assert len(knight_jumps) == 1
        assert isinstance(knight_jumps[0], SearchMove)
        assert knight_jumps[0].notation() == "b2c4"

    def test_no_moves(self, boxed_in):
        board, pieces = boxed_in
        assert generate_moves(board, pieces, W) == []


class TestSearch:
    @pytest.mark.parametrize("depth", [1, 2])
    def test_rook_takes_hanging_queen(self, rook_vs_queen, depth):
        board, pieces = rook_vs_queen
        move = find_best_move(board, pieces, W, depth)
        assert move is not None
        assert move.piece.id == 0
        assert (move.to.x, move.to.y) == (0, 1)

    def test_black_minimises(self, position, piece):
        board, pieces = position(
            piece(0, B, "R", 0, 7),
            piece(1, W, "Q", 0, 6),
            piece(2, B, "K", 7, 0),
            piece(3, W, "K", 2, 4),
        )
        move = find_best_move(board, pieces, B, 1)
        assert move is not None
        assert (move.piece.id, move.to.x, move.to.y) == (0, 0, 6)

    def test_immediate_king_capture(self, position, piece):
        board, pieces = position(
            piece(0, W, "R", 0, 0),
            piece(1, B, "K", 0, 5),
            piece(2, W, "K", 7, 7),
        )
        result = search(board, pieces, W, 3)
        assert (result.move.to.x, result.move.to.y) == (0, 5)
        assert result.score == math.inf
        assert result.nodes == 1

    def test_no_legal_move(self, boxed_in):
        board, pieces = boxed_in
        result = search(board, pieces, W, 2)
        assert result.move is None
        assert result.nodes == 0
        assert find_best_move(board, pieces, W, 2) is None

    def test_depth_floor(self, rook_vs_queen):
        board, pieces = rook_vs_queen
        assert search(board, pieces, W, 0).depth == 1

    def test_deterministic(self, initial):
        board, pieces = initial
        first = search(board, pieces, W, 1)
        second = search(board, pieces, W, 1)
        assert first.move.notation() == second.move.notation()
        assert first.score == second.score

    def test_best_move_is_playable(self, initial):
        board, pieces = initial
        move = find_best_move(board, pieces, W, 2)
        assert piece_at(board, pieces, *move.from_xy).id == move.piece.id
        assert attempt_move(pieces, board, move.piece.id, move.to.x, move.to.y).success

    def test_result_metrics(self, initial):
        board, pieces = initial
        result = search(board, pieces, B, 1)
        assert result.depth == 1
        assert result.nodes == len(generate_moves(board, pieces, B))
        assert result.elapsed_ms >= 0
        assert result.move.piece.team == B

    def test_each_position_counted_once(self, rook_vs_queen):
        board, pieces = rook_vs_queen
        root_moves = len(generate_moves(board, pieces, W))
        assert search(board, pieces, W, 1).nodes == root_moves
        assert search(board, pieces, W, 2).nodes > root_moves


class TestSearchSettings:
    @pytest.fixture
    def two_pass_cascade(self, position, piece):
        """Moving a1 diagonally confirms a queen; a king then a rook follow."""
        return position(
            piece(0, W, "RQ", 0, 0),
            piece(2, W, "KR", 5, 0),
            piece(1, W, "QK", 7, 0),
            piece(3, B, "K", 7, 7),
        )

    def test_pass_cap_reaches_simulated_moves(self, two_pass_cascade, caplog):
        board, pieces = two_pass_cascade
        with caplog.at_level(logging.WARNING, logger="qgambit.entanglement"):
            search(board, pieces, W, 1, max_passes=1)
        assert any("did not converge" in r.getMessage() for r in caplog.records)

    def test_default_pass_cap_converges(self, two_pass_cascade, caplog):
        board, pieces = two_pass_cascade
        with caplog.at_level(logging.WARNING, logger="qgambit.entanglement"):
            search(board, pieces, W, 1)
        assert not any("did not converge" in r.getMessage() for r in caplog.records)

    def test_short_board_rejected(self, initial):
        board, pieces = initial
        with pytest.raises(ValueError):
            search(board[:10], pieces, W, 1)
