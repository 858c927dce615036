"""Tests for the turn-level game driver."""

from qgambit.constants import Team, WinReason, Winner
from qgambit.game import legal_moves_for_turn, new_game, play_move, resign, timeout
from qgambit.models import EventKind, HistoryEntry, parse_square, piece_at

W = Team.WHITE
B = Team.BLACK

OPENING = ["b2c4", "g7f5", "d2d4", "e7e5", "d4e5", "f5e3", "c4e3", "a7a6"]


def play(state, move):
    """Play a move written as two square names, e.g. "b2c4"."""
    from_x, from_y = parse_square(move[:2])
    to_x, to_y = parse_square(move[2:])
    mover = piece_at(state.board, state.pieces, from_x, from_y)
    return play_move(state, mover.id, to_x, to_y)


def test_new_game():
    state = new_game()
    assert state.turn is W
    assert state.history == ()
    assert state.winner is None
    assert state.status == "active"
    assert len(state.active_pieces(W)) == 16


def test_turns_alternate_and_history_grows():
    state = new_game()
    result = play(state, "b2c4")

    assert result.success
    assert result.state.turn is B
    assert result.state.history == (HistoryEntry(3, (1, 1), (2, 3), None),)
    assert state.turn is W
    assert state.history == ()


def test_wrong_team_rejected():
    state = new_game()
    result = play_move(state, 16, 0, 5)
    assert not result.success
    assert result.message == "Not this team's turn"
    assert result.state is state


def test_illegal_move_keeps_state():
    state = new_game()
    result = play_move(state, 1, 2, 4)
    assert not result.success
    assert result.message == "No legal type explains this move"
    assert result.state is state


def test_opening_with_captures():
    state = new_game()
    for move in OPENING:
        result = play(state, move)
        assert result.success, (move, result.message)
        state = result.state

    assert len(state.history) == len(OPENING)
    assert state.turn is W
    captured = [h.captured_id for h in state.history if h.captured_id is not None]
    assert len(captured) == 2
    assert all(state.piece(pid).captured for pid in captured)
    assert "".join(t.tag for t in piece_at(state.board, state.pieces, 4, 4).possibilities) == "PQ"


def test_king_capture_ends_game(position, piece, game_from):
    board, pieces = position(
        piece(0, W, "R", 0, 0),
        piece(1, W, "K", 7, 7),
        piece(2, B, "K", 0, 3),
    )
    state = game_from(board, pieces)
    result = play_move(state, 0, 0, 3)

    assert result.success
    assert result.captured_piece_id == 2
    assert result.state.winner is Winner.WHITE
    assert result.state.win_reason is WinReason.KING_CAPTURE
    assert result.state.status == "finished"
    assert result.events[-1].kind is EventKind.GAME_OVER
    assert result.events[-1].team is W

    after = play_move(result.state, 2, 0, 4)
    assert not after.success
    assert after.message == "Game is already over"
    assert legal_moves_for_turn(result.state) == []


def test_resign():
    state = new_game()
    resigned = resign(state, W)
    assert resigned.winner is Winner.BLACK
    assert resigned.win_reason is WinReason.RESIGN
    assert state.winner is None
    assert resign(resigned, B) is resigned


def test_legal_moves_for_turn():
    state = new_game()
    moves = legal_moves_for_turn(state)
    assert moves
    assert {m.piece.team for m in moves} == {W}


def test_timeout():
    state = play(new_game(), "b2c4").state
    flagged = timeout(state, B)
    assert flagged.winner is Winner.WHITE
    assert flagged.win_reason is WinReason.TIMEOUT
    assert flagged.status == "finished"
    assert state.winner is None
    assert timeout(flagged, W) is flagged
    assert resign(flagged, W) is flagged


def test_exhausted_piece_reported(position, piece, game_from):
    board, pieces = position(
        piece(0, W, "RQ", 0, 0),
        piece(1, W, "QK", 7, 0),
        piece(2, W, "QK", 7, 1),
        piece(3, B, "K", 4, 7),
    )
    result = play_move(game_from(board, pieces), 0, 2, 2)

    assert result.success
    assert result.invariant_violations == (2,)
    assert [t.tag for t in result.state.piece(2).possibilities] == ["P"]
    assert play(new_game(), "b2c4").invariant_violations == ()
