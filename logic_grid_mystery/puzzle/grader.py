from typing import Optional
import logging

from .common import CellState, CATEGORY_PAIRS, COMPLETE_TRUE_COUNT
from .grid import GridState
from .puzzle_types import PuzzleData
from . import pair_key

logger = logging.getLogger(__name__)


class CheckResult:
    """Outcome of grading the player's TRUE cells against the solution."""
    def __init__(self, correct: bool, complete: bool, true_count: int, wrong_keys=None):
        self.correct = correct
        self.complete = complete
        self.true_count = true_count
        self.wrong_keys = list(wrong_keys or [])

    @property
    def is_win(self) -> bool:
        return self.correct and self.complete

    def __repr__(self) -> str:
        return f"CheckResult(correct={self.correct}, complete={self.complete}, true_count={self.true_count})"


def check_solution(puzzle: PuzzleData, grid: GridState) -> CheckResult:
    """Grades every TRUE cell of ``grid``.

    The first item of each pair is looked up in the solution index and the
    second must be among its matches. Names missing from the solution count
    as wrong. The grid is complete once it holds one TRUE per item per
    category pair.
    """
    index = puzzle.solution_index
    wrong_keys = []
    true_count = 0
    for key in grid.keys_with_state(CellState.TRUE):
        true_count += 1
        c1, i1, c2, i2 = pair_key.decode(key)
        item1 = puzzle.item_name(c1, i1)
        item2 = puzzle.item_name(c2, i2)
        if item1 not in index:
            logger.debug(f"No solution entry for '{item1}'; grading {key} as incorrect.")
        if not index.is_match(item1, item2):
            wrong_keys.append(key)

    result = CheckResult(correct=not wrong_keys, complete=true_count == COMPLETE_TRUE_COUNT,
                         true_count=true_count, wrong_keys=wrong_keys)
    logger.debug(f"Solution check: {result}")
    return result


def _resolve_match_index(puzzle: PuzzleData, item_name: str, target_category: int) -> Optional[int]:
    """Finds which item of ``target_category`` the solution pairs with ``item_name``."""
    category = puzzle.categories[target_category]
    for match in puzzle.solution_index.ordered_matches_for(item_name):
        index = category.index_of(match)
        if index is not None:
            return index
    return None


def build_solution_grid(puzzle: PuzzleData) -> GridState:
    """Ground-truth grid: one TRUE per item of the first category of each pair."""
    perfect = GridState()
    for cat_a, cat_b in CATEGORY_PAIRS:
        for item_a_index, item_a in enumerate(puzzle.categories[cat_a].items):
            item_b_index = _resolve_match_index(puzzle, item_a, cat_b)
            if item_b_index is None:
                logger.warning(f"Solution has no match for '{item_a}' in category '{puzzle.categories[cat_b].name}'.")
                continue
            perfect.set_cell(cat_a, item_a_index, cat_b, item_b_index, CellState.TRUE)
    return perfect


def reveal_solution(puzzle: PuzzleData, grid: GridState) -> GridState:
    """Builds the end-of-game comparison grid.

    Player TRUE cells become TRUE_CORRECT or TRUE_INCORRECT, ground-truth TRUE
    cells the player did not affirm become MISSED, and every other mark is
    carried over unchanged.
    """
    perfect = build_solution_grid(puzzle)
    comparison = grid.copy()

    for key in grid.keys_with_state(CellState.TRUE):
        comparison[key] = CellState.TRUE_CORRECT if perfect[key] == CellState.TRUE else CellState.TRUE_INCORRECT

    for key in perfect.keys_with_state(CellState.TRUE):
        if grid[key] != CellState.TRUE:
            comparison[key] = CellState.MISSED

    logger.info(f"Revealed solution: {comparison.count(CellState.TRUE_CORRECT)} correct, "
                f"{comparison.count(CellState.TRUE_INCORRECT)} incorrect, {comparison.count(CellState.MISSED)} missed.")
    return comparison
