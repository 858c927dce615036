"""
Console protocol handler for the quantum chess engine.

A small line-oriented protocol in the spirit of UCI, so the engine can be
driven from a terminal, a script or a test harness. The handler owns one
GameState and replaces it with each successful move; the engine core itself
stays purely functional.

Protocol overview:
    Client → Engine: newgame, isready, board, moves <sq>, move <from><to>,
                     go [depth N], wait, resign, timeout, quit
    Engine → Client: ok, readyok, illegal, event, gameover, info, bestmove,
                     board rows, moves, turn

Squares use algebraic names: a1 is (x=0, y=0), h8 is (x=7, y=7). White
(team 0) starts on ranks 1-2 and moves up the board.

Threading model:
    The command loop runs on the main thread and never blocks on the search.
    "go" snapshots the current GameState and runs the search in a daemon
    thread, which replies with "info" and "bestmove" when done. The engine
    search has no cancellation, so "wait" (or the next "go"/"newgame")
    simply joins the running thread. The search never changes the game:
    the client plays the suggested move with "move" like any other.

Critical rule: stdout carries protocol replies only. Diagnostics go to
stderr through logging.
"""

import logging
import sys
import threading
from typing import TextIO

from qgambit.config import EngineConfig
from qgambit.constants import Team
from qgambit.game import new_game, play_move, resign, timeout
from qgambit.models import (
    EventKind,
    GameState,
    MoveEvent,
    parse_square,
    piece_at,
    square_name,
)
from qgambit.rules import legal_destinations
from qgambit.search import search

_log = logging.getLogger(__name__)


def render_board(state: GameState) -> list[str]:
    """
    Text rows for the board, rank 8 first.

    Each cell is two characters: team ('w'/'b') and either the confirmed
    type tag or the number of remaining possibilities. Empty cells are ' .'.
    """
    rows = []
    for y in range(7, -1, -1):
        cells = []
        for x in range(8):
            piece = piece_at(state.board, state.pieces, x, y)
            if piece is None:
                cells.append(" .")
                continue
            team = "w" if piece.team == Team.WHITE else "b"
            kind = piece.confirmed_type.tag if piece.is_confirmed else str(len(piece.possibilities))
            cells.append(team + kind)
        rows.append(f"{y + 1} " + " ".join(cells))
    rows.append("   " + "  ".join("abcdefgh"))
    return rows


def format_event(event: MoveEvent) -> str:
    """One "event ..." protocol line."""
    if event.kind is EventKind.CHECK:
        return f"event check {Team(event.team).name.lower()}"
    if event.kind is EventKind.GAME_OVER:
        return f"event game_over {Team(event.team).name.lower()}"
    line = f"event {event.kind.value} {square_name(event.x, event.y)}"
    if event.kind is EventKind.COLLAPSE:
        line += f" {event.piece_type.tag}"
    return line


class ConsoleHandler:
    """
    Stateful handler for the console protocol.

    Attributes:
        config:        Engine settings (search depth, pass cap).
        state:         The current game, replaced on every successful move.
        search_thread: The active search thread, or None.
    """

    def __init__(self, config: EngineConfig | None = None, out: TextIO | None = None) -> None:
        self.config: EngineConfig = config or EngineConfig()
        self.state: GameState = new_game()
        self.search_thread: threading.Thread | None = None
        self._out: TextIO = out if out is not None else sys.stdout
        self._out_lock = threading.Lock()

    # -----------------------------------------------------------------------
    # Output
    # -----------------------------------------------------------------------

    def send(self, line: str) -> None:
        """Write one reply line and flush. Safe to call from the search thread."""
        with self._out_lock:
            self._out.write(line + "\n")
            self._out.flush()

    def send_gameover(self) -> None:
        """"gameover <winner> <reason>", e.g. "gameover BLACK resign"."""
        reason = self.state.win_reason.value.lower()
        self.send(f"gameover {self.state.winner.value} {reason}")

    # -----------------------------------------------------------------------
    # Command handlers
    # -----------------------------------------------------------------------

    def handle_newgame(self) -> None:
        self.wait_for_search()
        self.state = new_game()
        self.send("ok")

    def handle_isready(self) -> None:
        self.send("readyok")

    def handle_board(self) -> None:
        for row in render_board(self.state):
            self.send(row)
        self.send(f"turn {self.state.turn.name.lower()}")

    def handle_moves(self, tokens: list[str]) -> None:
        """
        List destinations for the piece on a square: "moves b2".

        Capturing destinations carry an "x" suffix. An empty square yields
        just "moves <sq>".
        """
        if not tokens:
            self.send("illegal missing square")
            return
        x, y = parse_square(tokens[0])
        piece = piece_at(self.state.board, self.state.pieces, x, y)
        names = [tokens[0]]
        if piece is not None:
            for dest in legal_destinations(piece, self.state.board, self.state.pieces):
                names.append(square_name(dest.x, dest.y) + ("x" if dest.is_capture else ""))
        self.send("moves " + " ".join(names))

    def handle_move(self, tokens: list[str]) -> None:
        """
        Play a move given as origin and destination names: "move b2c4".

        Replies "ok <message>" followed by one "event" line per event and a
        "gameover" line when the move ends the game, or "illegal <message>".
        A piece that entanglement had to pin to Pawn is reported as
        "event fallback <sq> <id>".
        """
        if not tokens or len(tokens[0]) != 4:
            self.send("illegal expected a move like b2c4")
            return
        from_x, from_y = parse_square(tokens[0][:2])
        to_x, to_y = parse_square(tokens[0][2:])

        piece = piece_at(self.state.board, self.state.pieces, from_x, from_y)
        if piece is None:
            self.send("illegal no piece on " + tokens[0][:2])
            return

        result = play_move(
            self.state,
            piece.id,
            to_x,
            to_y,
            max_passes=self.config.max_entanglement_passes,
        )
        if not result.success:
            self.send("illegal " + result.message)
            return

        self.state = result.state
        self.send("ok " + result.message)
        for event in result.events:
            self.send(format_event(event))
        for piece_id in result.invariant_violations:
            pinned = self.state.piece(piece_id)
            self.send(f"event fallback {square_name(pinned.x, pinned.y)} {piece_id}")
        if self.state.winner is not None:
            self.send_gameover()

    def handle_go(self, tokens: list[str]) -> None:
        """
        Start a search for the side to move in a background thread.

        "go" uses the configured depth; "go depth N" overrides it (clamped
        the same way as the configuration).
        """
        self.wait_for_search()

        depth = self.config.search_depth
        if len(tokens) >= 2 and tokens[0] == "depth":
            depth = EngineConfig(search_depth=int(tokens[1])).search_depth

        snapshot = self.state
        if snapshot.is_over:
            self.send("bestmove (none)")
            return

        def search_and_reply() -> None:
            try:
                move, score, reached, nodes, elapsed_ms = search(
                    snapshot.board,
                    snapshot.pieces,
                    snapshot.turn,
                    depth,
                    max_passes=self.config.max_entanglement_passes,
                )
                if move is None:
                    self.send("bestmove (none)")
                    return
                self.send(
                    f"info depth {reached} score {score:.0f} "
                    f"nodes {nodes} time {elapsed_ms}"
                )
                self.send(f"bestmove {move.notation()}")
            except Exception:
                _log.exception("search failed")
                self.send("bestmove (none)")

        self.search_thread = threading.Thread(target=search_and_reply, daemon=True)
        self.search_thread.start()

    def handle_resign(self) -> None:
        self.state = resign(self.state, self.state.turn)
        self.send_gameover()

    def handle_timeout(self) -> None:
        """The side to move has run out of time on the client's clock."""
        self.state = timeout(self.state, self.state.turn)
        self.send_gameover()

    def handle_quit(self) -> None:
        """Wait for any running search so its reply is not lost, then exit."""
        self.wait_for_search()
        sys.exit(0)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def wait_for_search(self) -> None:
        if self.search_thread is not None and self.search_thread.is_alive():
            self.search_thread.join()
        self.search_thread = None

    def dispatch(self, line: str) -> None:
        """
        Handle one input line.

        Errors inside a handler are logged to stderr and answered with an
        "illegal" line; the loop keeps running.
        """
        tokens = line.strip().split()
        if not tokens:
            return
        command, args = tokens[0], tokens[1:]

        try:
            if command == "newgame":
                self.handle_newgame()
            elif command == "isready":
                self.handle_isready()
            elif command == "board":
                self.handle_board()
            elif command == "moves":
                self.handle_moves(args)
            elif command == "move":
                self.handle_move(args)
            elif command == "go":
                self.handle_go(args)
            elif command == "wait":
                self.wait_for_search()
            elif command == "resign":
                self.handle_resign()
            elif command == "timeout":
                self.handle_timeout()
            elif command == "quit":
                self.handle_quit()
            else:
                _log.info("console: ignoring unknown command: %r", command)
        except ValueError as exc:
            _log.warning("console: bad arguments for %r: %s", command, exc)
            self.send(f"illegal {exc}")
        except Exception:
            _log.exception("console: unhandled error for command %r", command)


def run_console_loop(config: EngineConfig | None = None) -> None:
    """
    Main loop: read commands from stdin until "quit" or end of input.
    """
    config = config or EngineConfig.from_env()
    logging.basicConfig(level=config.log_level, stream=sys.stderr)
    handler = ConsoleHandler(config)

    for raw_line in sys.stdin:
        handler.dispatch(raw_line)

    handler.wait_for_search()


if __name__ == "__main__":
    run_console_loop()
