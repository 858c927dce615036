"""
Board and piece model: immutable records for pieces, the 64-cell board,
game state snapshots and the declarative results of a move.

Coordinates are (x, y) with x the file (0 = a) and y the rank (0 = rank 1).
The board index y * 8 + x is exactly the python-chess square index, so
chess.square / chess.square_file / chess.square_rank and chess.square_name
convert between the representations.

Nothing in this module is ever mutated in place. Functions that "change" a
piece or a board return a new tuple/record; callers keep the old snapshot
untouched.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, NamedTuple

import chess

from qgambit.constants import (
    ALL_PIECE_TYPES,
    BOARD_SIZE,
    NUM_SQUARES,
    START_ROWS,
    PieceType,
    Team,
    WinReason,
    Winner,
)

# A board is 64 cells of optional piece ids, indexed by coord_to_index().
Board = tuple[int | None, ...]
Coord = tuple[int, int]


# ---------------------------------------------------------------------------
# Coordinate helpers
# ---------------------------------------------------------------------------


def in_bounds(x: int, y: int) -> bool:
    return 0 <= x < BOARD_SIZE and 0 <= y < BOARD_SIZE


def coord_to_index(x: int, y: int) -> int:
    """Board index of (x, y). Same value as chess.square(x, y)."""
    return chess.square(x, y)


def index_to_coord(index: int) -> Coord:
    return chess.square_file(index), chess.square_rank(index)


def square_name(x: int, y: int) -> str:
    """Algebraic name of (x, y), e.g. (0, 1) -> 'a2'."""
    return chess.square_name(coord_to_index(x, y))


def parse_square(name: str) -> Coord:
    """Inverse of square_name(). Raises ValueError on malformed names."""
    return index_to_coord(chess.parse_square(name))


# ---------------------------------------------------------------------------
# Piece
# ---------------------------------------------------------------------------


def _coerce_type(value: PieceType | str | int) -> PieceType:
    if isinstance(value, str):
        return PieceType.from_tag(value)
    return PieceType(value)


@dataclass(frozen=True)
class Piece:
    """
    A quantum piece.

    Attributes:
        id:            Unique identity, never reused within a game.
        team:          Owning team, fixed for life.
        possibilities: Types the piece may still be, in canonical order
                       as observed. Never empty; shrinks monotonically.
        x, y:          Current (or, once captured, last) square.
        captured:      True once an opposing piece has moved onto it.
                       Captured pieces keep their possibilities frozen.

    Possibilities may be given as PieceType members or one-letter tags;
    both are normalised to PieceType. Invalid records raise ValueError.
    """

    id: int
    team: Team
    possibilities: tuple[PieceType, ...]
    x: int
    y: int
    captured: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "team", Team(self.team))
        possibilities = tuple(_coerce_type(p) for p in self.possibilities)
        if not possibilities:
            raise ValueError(f"piece {self.id}: possibilities must not be empty")
        if len(set(possibilities)) != len(possibilities):
            raise ValueError(f"piece {self.id}: duplicate possibilities {possibilities}")
        if not in_bounds(self.x, self.y):
            raise ValueError(f"piece {self.id}: position ({self.x}, {self.y}) is off the board")
        object.__setattr__(self, "possibilities", possibilities)

    @property
    def position(self) -> Coord:
        return self.x, self.y

    @property
    def index(self) -> int:
        return coord_to_index(self.x, self.y)

    @property
    def is_confirmed(self) -> bool:
        return len(self.possibilities) == 1

    @property
    def is_superposed(self) -> bool:
        return len(self.possibilities) > 1

    @property
    def confirmed_type(self) -> PieceType | None:
        return self.possibilities[0] if self.is_confirmed else None

    def could_be(self, piece_type: PieceType) -> bool:
        return piece_type in self.possibilities

    def with_possibilities(self, possibilities: Iterable[PieceType]) -> "Piece":
        return replace(self, possibilities=tuple(possibilities))

    def moved_to(self, x: int, y: int) -> "Piece":
        return replace(self, x=x, y=y)

    def mark_captured(self) -> "Piece":
        return replace(self, captured=True)

    def label(self) -> str:
        """Compact description such as 'a2[PRQK]'."""
        tags = "".join(t.tag for t in self.possibilities)
        return f"{square_name(self.x, self.y)}[{tags}]"


# ---------------------------------------------------------------------------
# Board construction
# ---------------------------------------------------------------------------


class BoardSetup(NamedTuple):
    board: Board
    pieces: tuple[Piece, ...]


def empty_board() -> Board:
    return (None,) * NUM_SQUARES


def check_board(board: Board) -> None:
    """Raise ValueError unless `board` has exactly NUM_SQUARES cells."""
    if len(board) != NUM_SQUARES:
        raise ValueError(f"board has {len(board)} cells, expected {NUM_SQUARES}")


def board_from_pieces(pieces: Iterable[Piece]) -> Board:
    """
    Build the occupancy board for the non-captured pieces.

    Raises:
        ValueError: Two non-captured pieces share a square.
    """
    cells: list[int | None] = [None] * NUM_SQUARES
    for piece in pieces:
        if piece.captured:
            continue
        if cells[piece.index] is not None:
            raise ValueError(
                f"pieces {cells[piece.index]} and {piece.id} both occupy "
                f"{square_name(piece.x, piece.y)}"
            )
        cells[piece.index] = piece.id
    return tuple(cells)


def occupancy_errors(board: Board, pieces: Iterable[Piece]) -> list[str]:
    """
    List every disagreement between the board and the piece records.

    Empty when: each non-captured piece's cell holds its id, no cell holds
    a captured or unknown id, and no id appears on two cells.
    """
    errors: list[str] = []
    if len(board) != NUM_SQUARES:
        return [f"board has {len(board)} cells, expected {NUM_SQUARES}"]

    by_id = {piece.id: piece for piece in pieces}
    for piece in by_id.values():
        if not piece.captured and board[piece.index] != piece.id:
            errors.append(f"piece {piece.id} missing from {square_name(piece.x, piece.y)}")

    seen: set[int] = set()
    for index, piece_id in enumerate(board):
        if piece_id is None:
            continue
        if piece_id in seen:
            errors.append(f"piece {piece_id} appears on more than one cell")
        seen.add(piece_id)
        piece = by_id.get(piece_id)
        if piece is None:
            errors.append(f"cell {chess.square_name(index)} references unknown piece {piece_id}")
        elif piece.captured:
            errors.append(f"cell {chess.square_name(index)} holds captured piece {piece_id}")
        elif piece.index != index:
            errors.append(f"cell {chess.square_name(index)} holds piece {piece_id} recorded elsewhere")
    return errors


def create_initial_board() -> BoardSetup:
    """
    Fresh game: 16 pieces per team in full superposition on the usual ranks.

    Ids are assigned file by file: for each file, white's back-rank piece
    then white's pawn-rank piece; then the same for black starting from the
    pawn rank. White therefore holds ids 0-15 and black 16-31.
    """
    pieces: list[Piece] = []
    next_id = 0
    for team in Team:
        first_row, second_row = START_ROWS[team]
        if team is Team.BLACK:
            first_row, second_row = second_row, first_row
        for x in range(BOARD_SIZE):
            for y in (first_row, second_row):
                pieces.append(Piece(next_id, team, ALL_PIECE_TYPES, x, y))
                next_id += 1
    pieces_tuple = tuple(pieces)
    return BoardSetup(board_from_pieces(pieces_tuple), pieces_tuple)


def find_piece(pieces: Iterable[Piece], piece_id: int | None) -> Piece | None:
    if piece_id is None:
        return None
    for piece in pieces:
        if piece.id == piece_id:
            return piece
    return None


def piece_at(board: Board, pieces: Iterable[Piece], x: int, y: int) -> Piece | None:
    return find_piece(pieces, board[coord_to_index(x, y)])


# ---------------------------------------------------------------------------
# Moves, events and results
# ---------------------------------------------------------------------------


class Destination(NamedTuple):
    """A reachable square and whether reaching it captures."""

    x: int
    y: int
    is_capture: bool


@dataclass(frozen=True)
class HistoryEntry:
    piece_id: int
    from_xy: Coord
    to_xy: Coord
    captured_id: int | None = None


class EventKind(str, Enum):
    MOVE = "move"
    CAPTURE = "capture"
    COLLAPSE = "collapse"
    CHECK = "check"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class MoveEvent:
    """
    Something that happened during a move, for the presentation layer.

    piece_type is set for COLLAPSE; team is set for CHECK (the team in
    check) and GAME_OVER (the winning team).
    """

    kind: EventKind
    piece_id: int | None = None
    x: int | None = None
    y: int | None = None
    piece_type: PieceType | None = None
    team: Team | None = None


@dataclass(frozen=True)
class MoveResult:
    """
    Outcome of attempt_move().

    On failure pieces and board are the caller's original objects, events
    is empty and message says why.
    """

    success: bool
    pieces: tuple[Piece, ...]
    board: Board
    captured_piece: Piece | None = None
    message: str = ""
    events: tuple[MoveEvent, ...] = ()
    invariant_violations: tuple[int, ...] = ()


# ---------------------------------------------------------------------------
# Game state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GameState:
    """
    Complete snapshot of a game, owned by the caller.

    Attributes:
        board:   Occupancy board.
        pieces:  All 32 pieces, captured ones included.
        turn:    Team to move.
        history: Moves played so far.
        winner:  None while the game is active.
        win_reason: How the game ended; None while it is active.

    Raises:
        ValueError: The board does not have 64 cells.
    """

    board: Board
    pieces: tuple[Piece, ...]
    turn: Team = Team.WHITE
    history: tuple[HistoryEntry, ...] = field(default_factory=tuple)
    winner: Winner | None = None
    win_reason: WinReason | None = None

    def __post_init__(self) -> None:
        check_board(self.board)

    @property
    def status(self) -> str:
        return "finished" if self.winner is not None else "active"

    @property
    def is_over(self) -> bool:
        return self.winner is not None

    def piece(self, piece_id: int) -> Piece | None:
        return find_piece(self.pieces, piece_id)

    def active_pieces(self, team: Team | None = None) -> list[Piece]:
        return [
            p for p in self.pieces
            if not p.captured and (team is None or p.team == team)
        ]
