# tests/conftest.py
import pytest

from logic_grid_mystery.puzzle.common import CellState
from logic_grid_mystery.puzzle.generator import load_fallback_puzzle
from logic_grid_mystery.puzzle.grader import build_solution_grid

# Ground truth of the bundled offline puzzle as (c1, i1, c2, i2) TRUE cells.
FALLBACK_TRUE_CELLS = [
    # Passengers x Drinks
    (0, 0, 1, 0), (0, 1, 1, 3), (0, 2, 1, 2), (0, 3, 1, 1),
    # Passengers x Cars
    (0, 0, 2, 0), (0, 1, 2, 1), (0, 2, 2, 2), (0, 3, 2, 3),
    # Drinks x Cars
    (1, 0, 2, 0), (1, 1, 2, 3), (1, 2, 2, 2), (1, 3, 2, 1),
]


@pytest.fixture
def puzzle():
    return load_fallback_puzzle()


@pytest.fixture
def perfect_grid(puzzle):
    return build_solution_grid(puzzle)


class FakeScheduler:
    """Captures deferred callbacks so tests decide when (and whether) they fire."""
    def __init__(self):
        self.calls = []

    def __call__(self, delay, callback):
        handle = FakeHandle(delay, callback)
        self.calls.append(handle)
        return handle

    def fire_all(self):
        for handle in list(self.calls):
            handle.fire()


class FakeHandle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        # Fires even when cancelled, like a timer that already elapsed.
        self.callback()


@pytest.fixture
def scheduler():
    return FakeScheduler()


class StubResponse:
    def __init__(self, output_text):
        self.output_text = output_text


class StubResponses:
    def __init__(self, output_text=None, error=None):
        self.output_text = output_text
        self.error = error
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        return StubResponse(self.output_text)


class StubClient:
    """Stands in for AsyncOpenAI: only ``responses.create`` is used."""
    def __init__(self, output_text=None, error=None):
        self.responses = StubResponses(output_text, error)


@pytest.fixture
def stub_client_factory():
    return StubClient


@pytest.fixture
def true_cells():
    return list(FALLBACK_TRUE_CELLS)


def mark_true(grid, cells):
    for c1, i1, c2, i2 in cells:
        grid.set_cell(c1, i1, c2, i2, CellState.TRUE)
    return grid
