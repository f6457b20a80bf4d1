import logging

from .common import CellState, ITEMS_PER_CATEGORY
from .grid import GridState
from . import pair_key

logger = logging.getLogger(__name__)


def recalculate(grid: GridState) -> GridState:
    """Rebuilds every FALSE_AUTO cell from the TRUE cells of ``grid``.

    If A matches B, A cannot match anything else in B's category and nothing
    else in A's category can match B. Existing FALSE_AUTO marks are dropped
    first so a retracted TRUE leaves nothing stale behind; new ones only go
    into empty slots. Returns a new grid, ``grid`` itself is left untouched.
    """
    next_grid = grid.copy()
    for key in next_grid.keys_with_state(CellState.FALSE_AUTO):
        del next_grid[key]

    added = 0
    for key in next_grid.keys_with_state(CellState.TRUE):
        c1, i1, c2, i2 = pair_key.decode(key)
        for x in range(ITEMS_PER_CATEGORY):
            if x != i2 and next_grid.get_cell(c1, i1, c2, x) == CellState.EMPTY:
                next_grid.set_cell(c1, i1, c2, x, CellState.FALSE_AUTO)
                added += 1
            if x != i1 and next_grid.get_cell(c1, x, c2, i2) == CellState.EMPTY:
                next_grid.set_cell(c1, x, c2, i2, CellState.FALSE_AUTO)
                added += 1

    logger.debug(f"Auto-deduction placed {added} exclusion(s).")
    return next_grid
