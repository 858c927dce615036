"""
Engine constants: piece types, teams, type-count limits, values, search parameters.

All numeric constants used throughout the engine are defined here so that
the rules, the entanglement resolver and the search never introduce their
own magic numbers.

Piece types reuse the python-chess integer constants (chess.PAWN == 1 ...
chess.KING == 6). Sorting a collection of PieceType therefore yields the
canonical P, N, B, R, Q, K order, and the library's symbol helpers work on
our enum members directly.
"""

from enum import Enum, IntEnum

import chess


# ---------------------------------------------------------------------------
# Piece types and teams
# ---------------------------------------------------------------------------


class PieceType(IntEnum):
    """One of the six chess piece types a quantum piece may turn out to be."""

    PAWN = chess.PAWN
    KNIGHT = chess.KNIGHT
    BISHOP = chess.BISHOP
    ROOK = chess.ROOK
    QUEEN = chess.QUEEN
    KING = chess.KING

    @property
    def tag(self) -> str:
        """One-letter upper-case tag: 'P', 'N', 'B', 'R', 'Q' or 'K'."""
        return chess.piece_symbol(self).upper()

    @classmethod
    def from_tag(cls, tag: str) -> "PieceType":
        """Parse a one-letter tag (case-insensitive). Raises ValueError."""
        try:
            return cls(chess.PIECE_SYMBOLS.index(tag.lower()))
        except ValueError:
            raise ValueError(f"unknown piece tag: {tag!r}") from None

    def __str__(self) -> str:
        return self.tag


class Team(IntEnum):
    """Team 0 (white) moves up the board, team 1 (black) moves down."""

    WHITE = 0
    BLACK = 1

    @property
    def opponent(self) -> "Team":
        return Team.BLACK if self is Team.WHITE else Team.WHITE

    @property
    def color(self) -> chess.Color:
        """python-chess colour (True for white)."""
        return chess.WHITE if self is Team.WHITE else chess.BLACK


class Winner(str, Enum):
    """Terminal result of a game. The core itself never reports DRAW."""

    WHITE = "WHITE"
    BLACK = "BLACK"
    DRAW = "DRAW"


class WinReason(str, Enum):
    """How a finished game was decided."""

    KING_CAPTURE = "KING_CAPTURE"
    RESIGN = "RESIGN"
    TIMEOUT = "TIMEOUT"


# Full superposition, in canonical order.
ALL_PIECE_TYPES: tuple[PieceType, ...] = tuple(PieceType)

# ---------------------------------------------------------------------------
# Board geometry
# ---------------------------------------------------------------------------

BOARD_SIZE: int = 8
NUM_SQUARES: int = BOARD_SIZE * BOARD_SIZE

# Rows each team starts on (back rank first), and the pawn home rank used
# for the double step.
START_ROWS: dict[Team, tuple[int, int]] = {
    Team.WHITE: (0, 1),
    Team.BLACK: (7, 6),
}
PAWN_HOME_ROW: dict[Team, int] = {Team.WHITE: 1, Team.BLACK: 6}
PAWN_DIRECTION: dict[Team, int] = {Team.WHITE: 1, Team.BLACK: -1}

# ---------------------------------------------------------------------------
# Team type-count limits
# ---------------------------------------------------------------------------
# Maximum number of confirmed pieces of each type per team. Captured pieces
# of a confirmed type keep their slot. The limits sum to 16, the number of
# pieces each team starts with.

PIECE_LIMITS: dict[PieceType, int] = {
    PieceType.PAWN:   8,
    PieceType.KNIGHT: 2,
    PieceType.BISHOP: 2,
    PieceType.ROOK:   2,
    PieceType.QUEEN:  1,
    PieceType.KING:   1,
}

# Upper bound on entanglement passes per team. Every productive pass removes
# at least one possibility, so a correct resolver needs far fewer than this.
MAX_ENTANGLEMENT_PASSES: int = 100

# ---------------------------------------------------------------------------
# Piece values (centipawns)
# ---------------------------------------------------------------------------
# A superposed piece is worth the mean of the values of its possibilities,
# so a piece that might be the king carries a large share of KING_VALUE.

PAWN_VALUE: int = 100
KNIGHT_VALUE: int = 320
BISHOP_VALUE: int = 330
ROOK_VALUE: int = 500
QUEEN_VALUE: int = 900
KING_VALUE: int = 20_000

PIECE_VALUES: dict[PieceType, int] = {
    PieceType.PAWN:   PAWN_VALUE,
    PieceType.KNIGHT: KNIGHT_VALUE,
    PieceType.BISHOP: BISHOP_VALUE,
    PieceType.ROOK:   ROOK_VALUE,
    PieceType.QUEEN:  QUEEN_VALUE,
    PieceType.KING:   KING_VALUE,
}

# ---------------------------------------------------------------------------
# Positional bonuses
# ---------------------------------------------------------------------------
# Inner centre (d4, e4, d5, e5) earns twice CENTER_BONUS; the surrounding
# ring out to c3-f6 earns CENTER_BONUS once. Pawn candidates earn
# ADVANCE_BONUS per rank travelled.

CENTER_BONUS: int = 10
ADVANCE_BONUS: int = 5
INNER_CENTER: tuple[int, int] = (3, 4)
OUTER_CENTER: tuple[int, int] = (2, 5)

# ---------------------------------------------------------------------------
# Search parameters
# ---------------------------------------------------------------------------

DEFAULT_SEARCH_DEPTH: int = 2
MAX_SEARCH_DEPTH: int = 6

# Move-ordering key for captures; quiet moves score 0.
CAPTURE_ORDER_SCORE: int = 10
