from typing import Dict, Iterator, List, Mapping, Optional, Tuple
import logging

from .common import CellState, COMPARISON_STATES, CATEGORY_PAIRS, ITEMS_PER_CATEGORY, NUM_CATEGORIES
from . import pair_key

logger = logging.getLogger(__name__)

_SLOTS_PER_PAIR = ITEMS_PER_CATEGORY * ITEMS_PER_CATEGORY
_PAIR_INDEX = {pair: index for index, pair in enumerate(CATEGORY_PAIRS)}

# (current state, is_secondary_action) -> next state
_MANUAL_TRANSITIONS: Dict[Tuple[CellState, bool], CellState] = {
    (CellState.EMPTY, False): CellState.TRUE,
    (CellState.EMPTY, True): CellState.FALSE,
    (CellState.FALSE_AUTO, False): CellState.TRUE,
    (CellState.FALSE_AUTO, True): CellState.EMPTY,
    (CellState.TRUE, False): CellState.FALSE,
    (CellState.TRUE, True): CellState.EMPTY,
    (CellState.FALSE, False): CellState.EMPTY,
    (CellState.FALSE, True): CellState.EMPTY,
}


def next_manual_state(current: CellState, secondary: bool = False) -> CellState:
    """Returns the state a cell moves to when the player clicks it.

    The primary click (affirm) cycles EMPTY -> TRUE -> FALSE -> EMPTY, the
    secondary click (exclude) marks an empty cell FALSE and clears anything else.
    Comparison states are terminal and map onto themselves.
    """
    current = CellState(current)
    if current in COMPARISON_STATES:
        return current
    return _MANUAL_TRANSITIONS[(current, bool(secondary))]


def _slot_index(c1: int, i1: int, c2: int, i2: int) -> int:
    for value, limit in ((c1, NUM_CATEGORIES), (c2, NUM_CATEGORIES), (i1, ITEMS_PER_CATEGORY), (i2, ITEMS_PER_CATEGORY)):
        if not 0 <= value < limit:
            raise ValueError(f"Coordinate out of range: ({c1},{i1})-({c2},{i2})")
    if c1 == c2:
        raise ValueError(f"A category cannot be paired with itself: ({c1},{i1})-({c2},{i2})")
    if c1 > c2:
        c1, i1, c2, i2 = c2, i2, c1, i1
    return _PAIR_INDEX[(c1, c2)] * _SLOTS_PER_PAIR + i1 * ITEMS_PER_CATEGORY + i2


def _slot_coordinates(slot: int) -> Tuple[int, int, int, int]:
    pair_index, offset = divmod(slot, _SLOTS_PER_PAIR)
    c1, c2 = CATEGORY_PAIRS[pair_index]
    i1, i2 = divmod(offset, ITEMS_PER_CATEGORY)
    return c1, i1, c2, i2


class GridState:
    """The player's grid: a fixed triangular array addressed by PairKey.

    One slot exists per (category pair, item, item) combination. A slot holding
    EMPTY is indistinguishable from a missing key, so ``len()``, ``items()`` and
    ``to_dict()`` only report marked cells.
    """
    SIZE = len(CATEGORY_PAIRS) * _SLOTS_PER_PAIR

    def __init__(self, cells: Optional[Mapping[str, CellState]] = None):
        self._slots: List[CellState] = [CellState.EMPTY] * self.SIZE
        if cells:
            for key, state in cells.items():
                self[key] = state

    # --- PairKey access ---

    def __getitem__(self, key: str) -> CellState:
        return self._slots[_slot_index(*pair_key.decode(key))]

    def __setitem__(self, key: str, state: CellState) -> None:
        self._slots[_slot_index(*pair_key.decode(key))] = CellState(state)

    def __delitem__(self, key: str) -> None:
        self[key] = CellState.EMPTY

    def __contains__(self, key: str) -> bool:
        return self[key] != CellState.EMPTY

    # --- Coordinate access ---

    def get_cell(self, c1: int, i1: int, c2: int, i2: int) -> CellState:
        return self._slots[_slot_index(c1, i1, c2, i2)]

    def set_cell(self, c1: int, i1: int, c2: int, i2: int, state: CellState) -> None:
        self._slots[_slot_index(c1, i1, c2, i2)] = CellState(state)

    # --- Iteration and comparison ---

    def items(self) -> Iterator[Tuple[str, CellState]]:
        """Yields (key, state) for every non-empty cell in slot order."""
        for slot, state in enumerate(self._slots):
            if state != CellState.EMPTY:
                yield pair_key.encode(*_slot_coordinates(slot)), state

    def keys_with_state(self, state: CellState) -> List[str]:
        return [key for key, cell_state in self.items() if cell_state == state]

    def count(self, state: CellState) -> int:
        return sum(1 for cell_state in self._slots if cell_state == state)

    def copy(self) -> "GridState":
        clone = GridState()
        clone._slots = list(self._slots)
        return clone

    def to_dict(self) -> Dict[str, CellState]:
        return dict(self.items())

    def __len__(self) -> int:
        return self.SIZE - self.count(CellState.EMPTY)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, GridState):
            return self._slots == other._slots
        if isinstance(other, Mapping):
            return self == GridState(other)
        return NotImplemented

    def __repr__(self) -> str:
        marked = ", ".join(f"{key}={state.name}" for key, state in self.items())
        return f"GridState({marked})"


def apply_manual_transition(grid: GridState, c1: int, i1: int, c2: int, i2: int, secondary: bool = False) -> GridState:
    """Returns a copy of ``grid`` with the clicked cell moved to its next state.

    The copy is not yet deduced; callers run ``deduction.recalculate`` on it.
    """
    updated = grid.copy()
    current = updated.get_cell(c1, i1, c2, i2)
    next_state = next_manual_state(current, secondary)
    updated.set_cell(c1, i1, c2, i2, next_state)
    logger.debug(f"Cell {pair_key.encode(c1, i1, c2, i2)}: {current.name} -> {next_state.name} (secondary={secondary})")
    return updated
