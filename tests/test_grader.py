from logic_grid_mystery.puzzle.common import CellState
from logic_grid_mystery.puzzle.grid import GridState
from logic_grid_mystery.puzzle.grader import check_solution, reveal_solution, build_solution_grid
from logic_grid_mystery.puzzle.puzzle_types import Category, PuzzleData

from conftest import mark_true


def test_solution_grid_matches_known_answer(perfect_grid, true_cells):
    assert perfect_grid == mark_true(GridState(), true_cells)
    assert perfect_grid.count(CellState.TRUE) == 12


def test_perfect_grid_wins(puzzle, perfect_grid):
    result = check_solution(puzzle, perfect_grid)
    assert result.correct
    assert result.complete
    assert result.is_win
    assert result.wrong_keys == []


def test_empty_grid_is_correct_but_incomplete(puzzle):
    result = check_solution(puzzle, GridState())
    assert result.correct
    assert not result.complete
    assert result.true_count == 0


def test_single_wrong_true_is_incorrect(puzzle):
    grid = GridState()
    grid.set_cell(0, 0, 1, 1, CellState.TRUE) # Col. Mustard / Whisky
    result = check_solution(puzzle, grid)
    assert not result.correct
    assert result.wrong_keys == ["c0i0|c1i1"]


def test_non_true_marks_are_not_graded(puzzle, perfect_grid):
    grid = perfect_grid.copy()
    grid.set_cell(0, 0, 1, 1, CellState.FALSE)
    grid.set_cell(0, 1, 1, 0, CellState.FALSE_AUTO)
    assert check_solution(puzzle, grid).is_win


def _puzzle_with_solution(solution):
    categories = [
        Category("who", "Who", ["Ann", "Bob", "Cy", "Di"]),
        Category("pet", "Pet", ["Cat", "Dog", "Eel", "Fox"]),
        Category("town", "Town", ["Avon", "Bree", "Crag", "Dale"]),
    ]
    return PuzzleData("Test", "", categories, ["clue"], solution)


def test_lookup_ignores_case_and_whitespace():
    puzzle = _puzzle_with_solution({"  ann ": ["CAT", " avon"]})
    grid = GridState()
    grid.set_cell(0, 0, 1, 0, CellState.TRUE)
    grid.set_cell(0, 0, 2, 0, CellState.TRUE)
    assert check_solution(puzzle, grid).correct


def test_unresolvable_name_counts_as_incorrect():
    puzzle = _puzzle_with_solution({"Ann": ["Cat", "Avon"]})
    grid = GridState()
    grid.set_cell(0, 1, 1, 1, CellState.TRUE) # Bob has no solution entry
    result = check_solution(puzzle, grid)
    assert not result.correct
    assert result.wrong_keys == ["c0i1|c1i1"]


def test_reveal_marks_correct_incorrect_and_missed(puzzle):
    grid = GridState()
    grid.set_cell(0, 0, 1, 0, CellState.TRUE)   # correct
    grid.set_cell(0, 1, 1, 0, CellState.TRUE)   # incorrect
    grid.set_cell(0, 2, 2, 3, CellState.FALSE)  # carried over
    comparison = reveal_solution(puzzle, grid)

    assert comparison.get_cell(0, 0, 1, 0) == CellState.TRUE_CORRECT
    assert comparison.get_cell(0, 1, 1, 0) == CellState.TRUE_INCORRECT
    assert comparison.get_cell(0, 2, 2, 3) == CellState.FALSE
    assert comparison.count(CellState.TRUE_CORRECT) == 1
    assert comparison.count(CellState.TRUE_INCORRECT) == 1
    assert comparison.count(CellState.MISSED) == 11
    assert comparison.count(CellState.TRUE) == 0


def test_reveal_accounting_adds_up(puzzle, perfect_grid):
    grid = perfect_grid.copy()
    grid.set_cell(1, 0, 2, 0, CellState.EMPTY)
    grid.set_cell(1, 0, 2, 1, CellState.TRUE)
    comparison = reveal_solution(puzzle, grid)
    correct = comparison.count(CellState.TRUE_CORRECT)
    missed = comparison.count(CellState.MISSED)
    assert correct + missed == 12
    assert correct + comparison.count(CellState.TRUE_INCORRECT) == grid.count(CellState.TRUE)


def test_reveal_leaves_input_untouched(puzzle, perfect_grid):
    before = perfect_grid.copy()
    reveal_solution(puzzle, perfect_grid)
    assert perfect_grid == before


def test_solution_grid_skips_unmatched_items():
    puzzle = _puzzle_with_solution({"Ann": ["Dog", "Crag"]})
    grid = build_solution_grid(puzzle)
    assert grid.to_dict() == {"c0i0|c1i1": CellState.TRUE, "c0i0|c2i2": CellState.TRUE}
