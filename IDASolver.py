"""
Goal tests, heuristics and a generic IDA* driver for the cube.

The heuristics are cheap piece counts, not pattern databases. They are used
only to prune branches against the current bound; the search stays exhaustive
within its depth and iteration budget, so a failure means "not found within
budget", never "unsolvable".
"""

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from Cube import CubeState, Move, MOVE_INVERSE, SOLVED_STATE, apply_move

logger = logging.getLogger(__name__)

# The four middle-layer edges and the slots they belong to
SLICE_EDGES = (4, 5, 6, 7)
SLICE_POSITIONS = frozenset(SLICE_EDGES)

# Returned by a subtree that hit the depth limit everywhere
EXHAUSTED = math.inf


def is_solved(state: CubeState) -> bool:
    return state == SOLVED_STATE


def misplaced_slice_edges(state: CubeState) -> int:
    return sum(1 for piece in SLICE_EDGES if state.edge_perm.index(piece) not in SLICE_POSITIONS)


def is_phase1_goal(state: CubeState) -> bool:
    """All pieces oriented and the four slice edges somewhere in the middle layer."""
    if any(state.corner_ori):
        return False
    if any(state.edge_ori):
        return False
    return misplaced_slice_edges(state) == 0


def phase1_heuristic(state: CubeState) -> int:
    # ceil(n / 2) written as -(-n // 2)
    twisted = sum(1 for o in state.corner_ori if o)
    flipped = sum(1 for o in state.edge_ori if o)
    slice_dist = misplaced_slice_edges(state)
    return max(-(-twisted // 2), -(-flipped // 2), -(-slice_dist // 2))


def phase2_heuristic(state: CubeState) -> int:
    corners = sum(1 for i, p in enumerate(state.corner_perm) if p != i)
    edges = sum(1 for i, p in enumerate(state.edge_perm) if p != i)
    return max(-(-corners // 4), -(-edges // 4))


@dataclass
class SearchStats:
    """Counters for the latest IDASolver.solve() call."""
    iterations: int = 0
    nodes: int = 0
    deepest: int = 0
    bounds: List[int] = field(default_factory=list)


class IDASolver:
    """
    Iterative-deepening A* over cube states.

    Usage:
        solver = IDASolver(PHASE2_MOVES, is_solved, phase2_heuristic,
                           max_depth=15, max_iterations=50)
        moves = solver.solve(state)    # list of Move, or None
    """

    def __init__(self, moves: Sequence[Move], is_goal: Callable[[CubeState], bool],
                 heuristic: Callable[[CubeState], int], max_depth: int, max_iterations: int,
                 rng: Optional[random.Random] = None,
                 avoid: Optional[Sequence[Move]] = None):
        """
        Args:
            moves: Move set to expand, in expansion order
            is_goal: Goal predicate
            heuristic: Estimated remaining moves, used for pruning only
            max_depth: No recursive call goes deeper than this
            max_iterations: Maximum number of bound increases
            rng: When given, the expansion order is shuffled at every node
            avoid: A move sequence never returned as the answer; paths that
                   repeat a prefix of it are pruned
        """
        self.MOVES = tuple(moves)
        self.is_goal = is_goal
        self.heuristic = heuristic
        self.max_depth = max_depth
        self.max_iterations = max_iterations
        self.rng = rng
        self.avoid = None if avoid is None else tuple(avoid)
        self.stats = SearchStats()

    def solve(self, start: CubeState) -> Optional[List[Move]]:
        """
        Return a list of moves reaching the goal from start, or None if
        nothing acceptable was found within the depth and iteration budget.
        """
        self.stats = SearchStats()
        bound = max(self.heuristic(start), 1)

        while self.stats.iterations < self.max_iterations and bound <= self.max_depth:
            self.stats.iterations += 1
            self.stats.bounds.append(bound)
            logger.debug("IDA* bound = %d (iteration %d)", bound, self.stats.iterations)

            t = self._search(start, (), bound, None)
            if isinstance(t, tuple):
                if self._accepts(t):
                    logger.debug("IDA* found %d moves after %d nodes", len(t), self.stats.nodes)
                    return list(t)
                # Only the avoided sequence was found at this bound
                bound += 1
                continue
            if t == EXHAUSTED:
                break
            bound = t

        logger.debug("IDA* gave up after %d iterations, %d nodes", self.stats.iterations,
                     self.stats.nodes)
        return None

    def _search(self, state, path, bound, last_move):
        """
        Depth-first search with pruning. `path` is an immutable tuple extended
        for each child.

        Returns:
          - tuple (solution path) if found
          - number (min f that exceeded bound, or EXHAUSTED) otherwise
        """
        g = len(path)
        self.stats.nodes += 1
        if g > self.stats.deepest:
            self.stats.deepest = g
        if g > self.max_depth:
            return EXHAUSTED

        f = g + self.heuristic(state)
        if f > bound:
            return f
        if self.is_goal(state):
            return path
        if g == self.max_depth:
            return EXHAUSTED

        min_excess = EXHAUSTED
        for m in self._expansion_order():
            # don't immediately undo or repeat the previous move
            if last_move is not None and (m is last_move or m is MOVE_INVERSE[last_move]):
                continue
            child_path = path + (m,)
            if self._follows_avoided(child_path):
                continue

            t = self._search(apply_move(state, m), child_path, bound, m)
            if isinstance(t, tuple):
                return t
            if t < min_excess:
                min_excess = t

        return min_excess

    def _expansion_order(self):
        if self.rng is None:
            return self.MOVES
        moves = list(self.MOVES)
        self.rng.shuffle(moves)
        return moves

    def _follows_avoided(self, path) -> bool:
        if self.avoid is None:
            return False
        n = len(path)
        return n <= len(self.avoid) and path == self.avoid[:n]

    def _accepts(self, path) -> bool:
        return self.avoid is None or tuple(path) != self.avoid
