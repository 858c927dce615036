"""
Whole-game invariants, checked after every move of a scripted opening and a
short depth-1 self-play game, plus seeded random playouts:

- possibilities only shrink, and confirmed pieces stay confirmed;
- board and piece records agree;
- no team exceeds its type limits;
- entanglement is already at its fixpoint;
- every listed destination is explained by some possibility.
"""

import random

import pytest

from qgambit.constants import PIECE_LIMITS, PieceType, Team
from qgambit.entanglement import count_confirmed, resolve_entanglement
from qgambit.game import legal_moves_for_turn, new_game, play_move
from qgambit.models import find_piece, occupancy_errors, parse_square, piece_at
from qgambit.rules import filter_possibilities, legal_destinations
from qgambit.search import find_best_move

OPENING = ["d2d4", "e7e5", "d4e5", "b7c5", "e2e3", "c5e4", "f2f4", "e4f2"]


def check_transition(before, after):
    for old in before.pieces:
        new = find_piece(after.pieces, old.id)
        assert set(new.possibilities) <= set(old.possibilities)
        assert new.possibilities
        if old.is_confirmed:
            assert new.possibilities == old.possibilities
        if old.captured:
            assert new.captured


def check_position(state):
    assert occupancy_errors(state.board, state.pieces) == []
    for team in Team:
        counts = count_confirmed(state.pieces, team)
        assert all(counts[t] <= PIECE_LIMITS[t] for t in PieceType)
        resolution = resolve_entanglement(state.pieces, team)
        assert resolution.pieces == state.pieces
        assert resolution.passes == 1
    for p in state.active_pieces():
        for dest in legal_destinations(p, state.board, state.pieces):
            assert filter_possibilities(p, (dest.x, dest.y), state.board, dest.is_capture)


def test_scripted_opening():
    state = new_game()
    check_position(state)
    for move in OPENING:
        mover = piece_at(state.board, state.pieces, *parse_square(move[:2]))
        result = play_move(state, mover.id, *parse_square(move[2:]))
        assert result.success, (move, result.message)
        check_transition(state, result.state)
        check_position(result.state)
        state = result.state


@pytest.mark.parametrize("plies", [6])
def test_self_play(plies):
    state = new_game()
    for _ in range(plies):
        if state.is_over:
            break
        move = find_best_move(state.board, state.pieces, state.turn, 1)
        assert move is not None
        result = play_move(state, move.piece.id, move.to.x, move.to.y)
        assert result.success, result.message
        check_transition(state, result.state)
        check_position(result.state)
        state = result.state
    assert len(state.history) > 0


def check_ply(before, after, pinned):
    """Per-ply checks for random play; pinned pieces may leave their old types."""
    assert occupancy_errors(after.board, after.pieces) == []
    for team in Team:
        counts = count_confirmed(after.pieces, team)
        assert all(counts[t] <= PIECE_LIMITS[t] for t in PieceType if t is not PieceType.PAWN)
        if not pinned:
            assert counts[PieceType.PAWN] <= PIECE_LIMITS[PieceType.PAWN]
        resolution = resolve_entanglement(after.pieces, team)
        assert resolution.pieces == after.pieces
        assert resolution.passes == 1

    for old in before.pieces:
        new = find_piece(after.pieces, old.id)
        if old.id in pinned:
            assert new.possibilities == (PieceType.PAWN,)
            continue
        assert new.possibilities
        assert set(new.possibilities) <= set(old.possibilities)
        if old.is_confirmed:
            assert new.possibilities == old.possibilities


@pytest.mark.parametrize("seed", range(12))
def test_random_playout(seed):
    rng = random.Random(seed)
    state = new_game()
    for _ in range(80):
        moves = legal_moves_for_turn(state)
        if state.is_over or not moves:
            break
        move = rng.choice(moves)
        result = play_move(state, move.piece.id, move.to.x, move.to.y)
        assert result.success, (move.notation(), result.message)
        check_ply(state, result.state, set(result.invariant_violations))
        state = result.state
    assert state.history
