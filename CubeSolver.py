"""
Two-phase Rubik's Cube solver with a randomized fallback search.

Phase 1 brings the cube into the subgroup where every piece is oriented and
the four middle-layer edges sit in the middle layer. Phase 2 solves the rest
using only moves that keep that property. When the pipeline fails, or would
only hand back the scramble undone move by move, the fallback search looks
for a different sequence with the full move set.

Usage:
    moves = solve("R U R' U'")                 # list of Move, or None
    moves = fallback_solve("R U", rng=random.Random(7))

    solver = CubeSolver(phase1_limits=SearchLimits(12, 50))
    result = solver.two_phase(state)          # TwoPhaseSolution, or None
"""

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import Cube
from Cube import (CubeState, InvalidCubeStateError, InvalidMoveError, Move, SOLVED_STATE,
                  format_moves, invert_moves, parse_moves)
from IDASolver import (IDASolver, SearchStats, is_phase1_goal, is_solved,
                       phase1_heuristic, phase2_heuristic)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchLimits:
    """Depth and iteration budget for one IDA* run."""
    max_depth: int
    max_iterations: int


PHASE1_LIMITS = SearchLimits(max_depth=10, max_iterations=50)
PHASE2_LIMITS = SearchLimits(max_depth=15, max_iterations=50)
FALLBACK_LIMITS = SearchLimits(max_depth=30, max_iterations=300)

PHASE1_MOVES: Tuple[Move, ...] = tuple(Move)
# Half turns of the side faces keep orientation and the middle-layer edges in place
PHASE2_MOVES: Tuple[Move, ...] = (
    Move.U, Move.U_PRIME, Move.U2,
    Move.D, Move.D_PRIME, Move.D2,
    Move.L2, Move.R2, Move.F2, Move.B2,
)
FALLBACK_MOVES = PHASE1_MOVES


@dataclass(frozen=True)
class TwoPhaseSolution:
    phase1: Tuple[Move, ...]
    phase2: Tuple[Move, ...]

    @property
    def moves(self) -> List[Move]:
        # No cancellation across the phase boundary ("R R2" stays as it is)
        return list(self.phase1) + list(self.phase2)

    def __len__(self):
        return len(self.phase1) + len(self.phase2)


def apply_scramble(scramble: str) -> CubeState:
    """
    State reached by applying a scramble to the solved cube.

    Raises:
        InvalidMoveError: for unknown move tokens
    """
    return Cube.apply_moves(SOLVED_STATE, scramble)


def apply_moves(state: CubeState, moves) -> CubeState:
    return Cube.apply_moves(state, moves)


def verify_solution(scramble: str, moves: Sequence) -> bool:
    """
    Re-apply the scramble and the candidate solution and check the result
    is solved.

    Raises:
        InvalidMoveError: if the scramble or the solution holds an unknown token
    """
    return is_solved(Cube.apply_moves(apply_scramble(scramble), moves))


class CubeSolver:
    """
    Holds the search budgets and the random source of the fallback search.

    The two-phase pipeline never touches `rng`, so it returns the same
    sequence for the same input on every call.
    """

    def __init__(self, phase1_limits: SearchLimits = PHASE1_LIMITS,
                 phase2_limits: SearchLimits = PHASE2_LIMITS,
                 fallback_limits: SearchLimits = FALLBACK_LIMITS,
                 rng: Optional[random.Random] = None):
        self.phase1_limits = phase1_limits
        self.phase2_limits = phase2_limits
        self.fallback_limits = fallback_limits
        self.rng = rng if rng is not None else random.Random()
        self.last_stats: Dict[str, SearchStats] = {}

    def _search(self, name, start, moves, is_goal, heuristic, limits, rng=None, avoid=None):
        solver = IDASolver(moves, is_goal, heuristic,
                           max_depth=limits.max_depth,
                           max_iterations=limits.max_iterations,
                           rng=rng, avoid=avoid)
        result = solver.solve(start)
        self.last_stats[name] = solver.stats
        return result

    def two_phase(self, state: CubeState) -> Optional[TwoPhaseSolution]:
        """
        Run phase 1 then phase 2 from `state`.

        Returns:
            TwoPhaseSolution, or None when either phase runs out of budget
        """
        self.last_stats.pop("phase1", None)
        self.last_stats.pop("phase2", None)

        logger.info("Phase 1: orienting pieces and placing the middle-layer edges")
        phase1 = self._search("phase1", state, PHASE1_MOVES, is_phase1_goal, phase1_heuristic,
                              self.phase1_limits)
        if phase1 is None:
            logger.info("Phase 1 found nothing within depth %d", self.phase1_limits.max_depth)
            return None
        logger.info("Phase 1 solution (%d moves): %s", len(phase1), format_moves(phase1))

        intermediate = Cube.apply_moves(state, phase1)
        logger.info("Phase 2: solving with U, D and half turns of the side faces")
        phase2 = self._search("phase2", intermediate, PHASE2_MOVES, is_solved, phase2_heuristic,
                              self.phase2_limits)
        if phase2 is None:
            logger.info("Phase 2 found nothing within depth %d", self.phase2_limits.max_depth)
            return None
        logger.info("Phase 2 solution (%d moves): %s", len(phase2), format_moves(phase2))

        return TwoPhaseSolution(tuple(phase1), tuple(phase2))

    def solve_state(self, state: CubeState) -> Optional[List[Move]]:
        """Two-phase solve of an arbitrary state. Returns None instead of raising."""
        try:
            state.validate()
            state.log_cube()
            result = self.two_phase(state)
            if result is None:
                return None
            return self._checked(state, result.moves, "two-phase")
        except InvalidCubeStateError as e:
            logger.error("Rejected cube state: %s", e)
            return None
        except Exception:
            logger.exception("Unexpected error while solving")
            return None

    def solve(self, scramble: str) -> Optional[List[Move]]:
        """
        Solve a scramble with the two-phase pipeline.

        Returns:
            List of moves (empty for an empty scramble), or None when the
            scramble is invalid or no solution was found within budget
        """
        try:
            state = apply_scramble(scramble)
        except InvalidMoveError as e:
            logger.error("Rejected scramble %r: %s", scramble, e)
            return None
        return self.solve_state(state)

    def fallback_solve(self, scramble: str) -> Optional[List[Move]]:
        """
        Single randomized IDA* pass over all 18 moves that never returns the
        scramble's own inverse.

        Returns:
            List of moves, or None when the scramble is invalid or nothing
            acceptable was found within budget
        """
        try:
            scramble_moves = parse_moves(scramble)
            state = Cube.apply_moves(SOLVED_STATE, scramble_moves)
            reverse = invert_moves(scramble_moves)

            logger.info("Fallback search for %r (avoiding %r)", scramble, format_moves(reverse))
            self.last_stats.pop("fallback", None)
            moves = self._search("fallback", state, FALLBACK_MOVES, is_solved, phase2_heuristic,
                                 self.fallback_limits, rng=self.rng, avoid=reverse)
            if moves is None:
                logger.info("Fallback search found nothing within depth %d",
                            self.fallback_limits.max_depth)
                return None
            return self._checked(state, moves, "fallback")
        except InvalidMoveError as e:
            logger.error("Rejected scramble %r: %s", scramble, e)
            return None
        except Exception:
            logger.exception("Unexpected error in fallback search")
            return None

    def solve_with_fallback(self, scramble: str) -> Optional[List[Move]]:
        """
        Two-phase first; fall back to the randomized search when it fails or
        only finds the scramble undone move by move. An already solved cube
        gets the empty solution.
        """
        moves = self.solve(scramble)
        if moves is not None:
            if not moves or moves != invert_moves(parse_moves(scramble)):
                return moves
            logger.info("Two-phase solution is the reverse of the scramble")
        return self.fallback_solve(scramble)

    def _checked(self, state, moves, label):
        if not is_solved(Cube.apply_moves(state, moves)):
            logger.error("%s solution %r does not solve the cube", label, format_moves(moves))
            return None
        logger.info("%s solution verified: %d moves", label, len(moves))
        return list(moves)


def solve(scramble: str) -> Optional[List[Move]]:
    """Deterministic two-phase solve with the default budgets."""
    return CubeSolver().solve(scramble)


def fallback_solve(scramble: str, rng: Optional[random.Random] = None) -> Optional[List[Move]]:
    return CubeSolver(rng=rng).fallback_solve(scramble)


def solve_with_fallback(scramble: str, rng: Optional[random.Random] = None) -> Optional[List[Move]]:
    return CubeSolver(rng=rng).solve_with_fallback(scramble)
