from enum import Enum, IntEnum


class CellState(IntEnum):
    EMPTY = 0
    FALSE = 1           # Excluded by the player
    TRUE = 2            # Affirmed by the player
    FALSE_AUTO = 3      # Excluded by deduction

    # Comparison grid only (after a loss)
    TRUE_CORRECT = 4
    TRUE_INCORRECT = 5
    MISSED = 6


COMPARISON_STATES = frozenset({CellState.TRUE_CORRECT, CellState.TRUE_INCORRECT, CellState.MISSED})


class FeedbackKind(Enum):
    ERROR = "error"
    SUCCESS = "success"
    INFO = "info"


# --- Grid Geometry ---
NUM_CATEGORIES = 3
ITEMS_PER_CATEGORY = 4
CATEGORY_PAIRS = ((0, 1), (0, 2), (1, 2))
COMPLETE_TRUE_COUNT = len(CATEGORY_PAIRS) * ITEMS_PER_CATEGORY # 4 + 4 + 4

# --- Session Rules ---
STARTING_TOKENS = 3
INITIAL_REVEALED_CLUES = 4
EXPECTED_CLUE_COUNT = 6
HINT_REVEAL_DELAY_SECONDS = 1.5

DEFAULT_THEME_PROMPT = "Classic Mystery"
