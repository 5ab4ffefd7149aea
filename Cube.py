"""
Rubik's Cube state model and move engine.

A cube is described at the cubie level: which piece sits in each corner and
edge slot, and how each piece is twisted or flipped inside its slot.

Cubie numbering (position index == piece id when solved):

    corners:  0 URF   1 UFL   2 ULB   3 UBR   4 DFR   5 DLF   6 DBL   7 DRB
    edges:    0 UR    1 UF    2 UL    3 UB
              4 FR    5 FL    6 BL    7 BR      <- middle (slice) layer
              8 DR    9 DF   10 DL   11 DB

Corner twist is counted against the U/D sticker (mod 3) and only changes on
quarter turns of L, R, F and B. Edge flip (mod 2) only changes on quarter
turns of F and B.

Usage:
    state = CubeState.solved()
    state = apply_moves(state, "R U R' U'")
    state.apply(Move.R_PRIME)
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

NUM_CORNERS = 8
NUM_EDGES = 12


class InvalidMoveError(ValueError):
    """Raised when a move token is not one of the 18 face turns."""

    def __init__(self, token, position=None):
        self.token = token
        self.position = position
        if position is None:
            message = f"Unknown move {token!r}"
        else:
            message = f"Unknown move {token!r} at position {position}"
        super().__init__(message)


class InvalidCubeStateError(ValueError):
    """Raised when a cube state is malformed or cannot be reached by face turns."""


def permutation_parity(perm) -> int:
    """Return 0 for an even permutation, 1 for an odd one (inversion count mod 2)."""
    p = np.asarray(perm)
    inversions = np.triu(p[:, None] > p[None, :], k=1).sum()
    return int(inversions) % 2


@dataclass(frozen=True)
class CubeState:
    """
    Immutable cube state. Position i holds piece corner_perm[i] / edge_perm[i]
    with orientation corner_ori[i] / edge_ori[i].

    Equality and hashing are field-wise over the four tuples.
    """
    corner_perm: Tuple[int, ...] = tuple(range(NUM_CORNERS))
    edge_perm: Tuple[int, ...] = tuple(range(NUM_EDGES))
    corner_ori: Tuple[int, ...] = (0,) * NUM_CORNERS
    edge_ori: Tuple[int, ...] = (0,) * NUM_EDGES

    @classmethod
    def solved(cls) -> "CubeState":
        return SOLVED_STATE

    @classmethod
    def from_arrays(cls, corner_perm, edge_perm, corner_ori, edge_ori,
                    check_solvable: bool = True) -> "CubeState":
        """
        Build a validated state from lists, tuples or numpy arrays.

        Args:
            corner_perm: 8 distinct corner ids in [0, 8)
            edge_perm: 12 distinct edge ids in [0, 12)
            corner_ori: 8 twists in {0, 1, 2}
            edge_ori: 12 flips in {0, 1}
            check_solvable: Also require the group invariants (see is_solvable)

        Returns:
            CubeState

        Raises:
            InvalidCubeStateError: if any check fails
        """
        state = cls(
            tuple(int(x) for x in np.asarray(corner_perm).ravel()),
            tuple(int(x) for x in np.asarray(edge_perm).ravel()),
            tuple(int(x) for x in np.asarray(corner_ori).ravel()),
            tuple(int(x) for x in np.asarray(edge_ori).ravel()),
        )
        state.validate(check_solvable=check_solvable)
        return state

    def validate(self, check_solvable: bool = True):
        """Raise InvalidCubeStateError unless this is a well-formed (and solvable) state."""
        for name, perm, size in (("corner_perm", self.corner_perm, NUM_CORNERS),
                                 ("edge_perm", self.edge_perm, NUM_EDGES)):
            if len(perm) != size:
                raise InvalidCubeStateError(f"{name} must have {size} entries, got {len(perm)}")
            if not np.array_equal(np.sort(perm), np.arange(size)):
                raise InvalidCubeStateError(f"{name} is not a permutation of 0..{size - 1}: {perm}")

        for name, ori, size, modulus in (("corner_ori", self.corner_ori, NUM_CORNERS, 3),
                                         ("edge_ori", self.edge_ori, NUM_EDGES, 2)):
            if len(ori) != size:
                raise InvalidCubeStateError(f"{name} must have {size} entries, got {len(ori)}")
            values = np.asarray(ori)
            if np.any((values < 0) | (values >= modulus)):
                raise InvalidCubeStateError(f"{name} values must be in 0..{modulus - 1}: {ori}")

        if check_solvable and not self.is_solvable():
            raise InvalidCubeStateError(
                "State is not reachable by face turns "
                f"(corner parity {permutation_parity(self.corner_perm)}, "
                f"edge parity {permutation_parity(self.edge_perm)}, "
                f"twist sum {sum(self.corner_ori)}, flip sum {sum(self.edge_ori)})"
            )

    def is_solvable(self) -> bool:
        """
        Group invariants every reachable state satisfies: corner and edge
        permutations have equal parity, twists sum to 0 mod 3 and flips sum
        to 0 mod 2.
        """
        return (permutation_parity(self.corner_perm) == permutation_parity(self.edge_perm)
                and sum(self.corner_ori) % 3 == 0
                and sum(self.edge_ori) % 2 == 0)

    def is_solved(self) -> bool:
        return self == SOLVED_STATE

    def apply(self, move) -> "CubeState":
        return apply_move(self, move)

    def apply_all(self, moves) -> "CubeState":
        return apply_moves(self, moves)

    def log_cube(self):
        logger.debug("corners %s %s", self.corner_perm, self.corner_ori)
        logger.debug("edges   %s %s", self.edge_perm, self.edge_ori)


SOLVED_STATE = CubeState()


class Move(str, Enum):
    """The 18 single-layer face turns. Definition order is the search expansion order."""
    U = "U"
    U_PRIME = "U'"
    U2 = "U2"
    D = "D"
    D_PRIME = "D'"
    D2 = "D2"
    L = "L"
    L_PRIME = "L'"
    L2 = "L2"
    R = "R"
    R_PRIME = "R'"
    R2 = "R2"
    F = "F"
    F_PRIME = "F'"
    F2 = "F2"
    B = "B"
    B_PRIME = "B'"
    B2 = "B2"

    def __str__(self):
        return self.value

    @property
    def face(self) -> str:
        return self.value[0]

    @property
    def turns(self) -> int:
        """Number of clockwise quarter turns: 1, 2 or 3."""
        return _SUFFIX_TURNS[self.value[1:]]

    @property
    def is_quarter_turn(self) -> bool:
        return self.turns != 2

    @property
    def inverse(self) -> "Move":
        return MOVE_INVERSE[self]

    @classmethod
    def parse(cls, token, position: Optional[int] = None) -> "Move":
        if isinstance(token, cls):
            return token
        try:
            return cls(token)
        except ValueError:
            raise InvalidMoveError(token, position) from None


_SUFFIX_TURNS = {"": 1, "2": 2, "'": 3}
_TURNS_SUFFIX = {1: "", 2: "2", 3: "'"}

MOVE_INVERSE = {m: Move(m.face + _TURNS_SUFFIX[4 - m.turns]) for m in Move}

# Scrambles never put two turns of the same axis next to each other
FACE_AXIS = {"U": "y", "D": "y", "L": "x", "R": "x", "F": "z", "B": "z"}


# Clockwise quarter turns. Cycles read "the piece at cycle[k] moves to
# cycle[k+1]"; twists are added to the corner arriving at cycle[k].
FACE_TURNS = {
    "U": {"corners": (0, 1, 2, 3), "twist": (0, 0, 0, 0), "edges": (0, 1, 2, 3), "flip": False},
    "D": {"corners": (4, 7, 6, 5), "twist": (0, 0, 0, 0), "edges": (8, 11, 10, 9), "flip": False},
    "L": {"corners": (2, 1, 5, 6), "twist": (2, 1, 2, 1), "edges": (6, 2, 5, 10), "flip": False},
    "R": {"corners": (0, 3, 7, 4), "twist": (2, 1, 2, 1), "edges": (4, 0, 7, 8), "flip": False},
    "F": {"corners": (1, 0, 4, 5), "twist": (2, 1, 2, 1), "edges": (5, 1, 4, 9), "flip": True},
    "B": {"corners": (3, 2, 6, 7), "twist": (2, 1, 2, 1), "edges": (7, 3, 6, 11), "flip": True},
}


def _quarter_turn(face):
    """
    Expand a face definition to full-length arrays:
    (corner source, corner twist, edge source, edge flip), where the new
    state's slot i takes the piece from slot source[i].
    """
    turn = FACE_TURNS[face]
    corner_src = np.arange(NUM_CORNERS)
    corner_twist = np.zeros(NUM_CORNERS, dtype=int)
    for k, dest in enumerate(turn["corners"]):
        corner_src[dest] = turn["corners"][k - 1]
        corner_twist[dest] = turn["twist"][k]

    edge_src = np.arange(NUM_EDGES)
    edge_flip = np.zeros(NUM_EDGES, dtype=int)
    for k, dest in enumerate(turn["edges"]):
        edge_src[dest] = turn["edges"][k - 1]
        edge_flip[dest] = int(turn["flip"])

    return corner_src, corner_twist, edge_src, edge_flip


def _compose(first, second):
    """Table for applying `first` and then `second`."""
    c1, t1, e1, f1 = first
    c2, t2, e2, f2 = second
    return c1[c2], (t1[c2] + t2) % 3, e1[e2], (f1[e2] + f2) % 2


def _build_move_table():
    table = {}
    for face in FACE_TURNS:
        quarter = _quarter_turn(face)
        current = quarter
        for turns in (1, 2, 3):
            if turns > 1:
                current = _compose(current, quarter)
            move = Move(face + _TURNS_SUFFIX[turns])
            table[move] = tuple(tuple(arr.tolist()) for arr in current)
    return table


# Move -> (corner_src, corner_twist, edge_src, edge_flip), read-only for the process lifetime
MOVE_TABLE = _build_move_table()


def apply_move(state: CubeState, move) -> CubeState:
    """
    Return the state after one face turn. The input state is not modified.

    Args:
        state: CubeState
        move: Move or a move token such as "R'"

    Raises:
        InvalidMoveError: for unknown tokens
    """
    if not isinstance(move, Move):
        move = Move.parse(move)
    corner_src, corner_twist, edge_src, edge_flip = MOVE_TABLE[move]
    cp, ep, co, eo = state.corner_perm, state.edge_perm, state.corner_ori, state.edge_ori
    return CubeState(
        tuple([cp[i] for i in corner_src]),
        tuple([ep[i] for i in edge_src]),
        tuple([(co[i] + t) % 3 for i, t in zip(corner_src, corner_twist)]),
        tuple([eo[i] ^ f for i, f in zip(edge_src, edge_flip)]),
    )


def apply_moves(state: CubeState, moves: Union[str, Iterable]) -> CubeState:
    """Apply a move sequence (iterable of moves/tokens, or a scramble string) left to right."""
    if isinstance(moves, str):
        moves = parse_moves(moves)
    for move in moves:
        state = apply_move(state, move)
    return state


def parse_moves(text: str) -> List[Move]:
    """
    Split a scramble on whitespace and convert each token to a Move.

    Raises:
        InvalidMoveError: naming the first unknown token and its position
    """
    return [Move.parse(token, position) for position, token in enumerate(text.split())]


def invert_moves(moves: Iterable) -> List[Move]:
    """Reverse the order and the direction of every quarter turn; half turns stay as they are."""
    return [Move.parse(move).inverse for move in reversed(list(moves))]


def format_moves(moves: Iterable) -> str:
    return " ".join(str(m) for m in moves)


def generate_scramble(length: int = 25, rng: Optional[random.Random] = None) -> str:
    """
    Random 3x3 scramble where consecutive moves never turn the same axis.

    Args:
        length: Number of moves
        rng: Random source (a fresh unseeded one when None)

    Returns:
        Scramble string, e.g. "R U2 F' ..."
    """
    if length < 0:
        raise ValueError(f"Scramble length must be >= 0, got {length}")
    rng = rng or random.Random()
    moves = list(Move)
    scramble = []
    last_axis = None

    while len(scramble) < length:
        move = rng.choice(moves)
        axis = FACE_AXIS[move.face]
        if axis != last_axis:
            scramble.append(move)
            last_axis = axis

    return format_moves(scramble)
