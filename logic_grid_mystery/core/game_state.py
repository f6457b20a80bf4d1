from typing import Any, Callable, List, Optional
from functools import wraps
from enum import Enum, auto
import logging
import threading

from ..puzzle.common import (FeedbackKind, STARTING_TOKENS, INITIAL_REVEALED_CLUES,
                             HINT_REVEAL_DELAY_SECONDS, DEFAULT_THEME_PROMPT)
from ..puzzle.grid import GridState, apply_manual_transition
from ..puzzle.puzzle_types import PuzzleData
from ..puzzle.deduction import recalculate
from ..puzzle.grader import CheckResult, check_solution, reveal_solution
from ..puzzle.generator import PuzzleGenerator, load_fallback_puzzle

logger = logging.getLogger(__name__)

# Callable(delay_seconds, callback) -> handle; the handle may expose cancel().
Scheduler = Callable[[float, Callable[[], None]], Any]


def threading_scheduler(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Default scheduler for headless use. The UI passes a QTimer-based one instead."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


def _synchronized(method):
    """Runs a GameSession method under the session lock."""
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


class Phase(Enum):
    LOADING = auto()
    PLAYING = auto()
    REVEALING = auto()  # Tokens spent on a hint; waiting for the delayed reveal
    WON = auto()
    LOST = auto()


class Feedback:
    """Last message shown to the player."""
    def __init__(self, kind: FeedbackKind, message: str):
        self.kind = kind
        self.message = message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Feedback):
            return NotImplemented
        return self.kind == other.kind and self.message == other.message

    def __repr__(self) -> str:
        return f"Feedback({self.kind.value}: {self.message!r})"


class _PendingReveal:
    def __init__(self, generation: int, snapshot: GridState):
        self.generation = generation
        self.snapshot = snapshot
        self.handle: Any = None


class GameSession:
    """Run state of one puzzle: tokens, revealed clues, grid and phase.

    Every command either applies completely or returns a rejection without
    touching the state. Listeners are called after each change, including the
    deferred reveal that follows a token-exhausting hint.
    """
    MSG_NO_TOKENS = "No tokens left!"
    MSG_ALL_CLUES = "All clues are already revealed!"
    MSG_NEW_CLUE = "New clue revealed!"
    MSG_WIN = "Perfect! You solved the puzzle!"
    MSG_WRONG = "Incorrect. Some checks are wrong."
    MSG_INCOMPLETE = "Correct so far, but incomplete."
    MSG_OUT_OF_TOKENS = "Out of tokens! Solution revealed."
    MSG_FALLBACK = "Failed to generate a new case. Playing the offline case instead."

    def __init__(self, generator: Optional[PuzzleGenerator] = None,
                 scheduler: Optional[Scheduler] = None,
                 reveal_delay: float = HINT_REVEAL_DELAY_SECONDS,
                 on_win: Optional[Callable[["GameSession"], None]] = None):
        self.generator = generator
        self.scheduler: Scheduler = scheduler or threading_scheduler
        self.reveal_delay = reveal_delay
        self.on_win = on_win

        self.puzzle: Optional[PuzzleData] = None
        self.grid = GridState()
        self.tokens = STARTING_TOKENS
        self.revealed_clues = INITIAL_REVEALED_CLUES
        self.phase = Phase.LOADING
        self.feedback: Optional[Feedback] = None
        self.generation = 0
        self._pending_reveal: Optional[_PendingReveal] = None
        self._listeners: List[Callable[["GameSession"], None]] = []
        # Guards every state change. The default scheduler fires reveals on a timer thread.
        self._lock = threading.RLock()

    # --- Query Surface ---

    @property
    def total_clues(self) -> int:
        return len(self.puzzle.clues) if self.puzzle else 0

    @property
    def visible_clues(self) -> List[str]:
        return self.puzzle.clues[:self.revealed_clues] if self.puzzle else []

    @property
    def hidden_clue_count(self) -> int:
        return max(0, self.total_clues - self.revealed_clues)

    @property
    def is_playing(self) -> bool:
        return self.phase == Phase.PLAYING

    @property
    def is_won(self) -> bool:
        return self.phase == Phase.WON

    @property
    def is_lost(self) -> bool:
        return self.phase == Phase.LOST

    @property
    def is_over(self) -> bool:
        return self.phase in (Phase.REVEALING, Phase.WON, Phase.LOST)

    @property
    def can_check(self) -> bool:
        return self.is_playing and self.tokens > 0

    @property
    def can_hint(self) -> bool:
        return self.is_playing and self.tokens > 0 and self.revealed_clues < self.total_clues

    # --- Listeners ---

    def add_listener(self, callback: Callable[["GameSession"], None]) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[["GameSession"], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            try:
                callback(self)
            except Exception:
                logger.exception(f"Session listener {callback!r} failed.")

    def _set_feedback(self, kind: FeedbackKind, message: str) -> None:
        self.feedback = Feedback(kind, message)

    # --- New Game ---

    @_synchronized
    def begin_new_game(self, theme: str = DEFAULT_THEME_PROMPT) -> int:
        """Discards the current run and enters LOADING. Returns the new generation id."""
        self._cancel_pending_reveal()
        self.generation += 1
        self.puzzle = None
        self.grid = GridState()
        self.tokens = STARTING_TOKENS
        self.revealed_clues = INITIAL_REVEALED_CLUES
        self.feedback = None
        self.phase = Phase.LOADING
        logger.info(f"New game requested (generation {self.generation}, theme '{theme}').")
        self._notify()
        return self.generation

    @_synchronized
    def finish_loading(self, generation: int, puzzle: PuzzleData) -> bool:
        """Installs generated content. Results for a superseded generation are dropped."""
        if generation != self.generation or self.phase != Phase.LOADING:
            logger.info(f"Discarding puzzle for stale generation {generation} (current {self.generation}).")
            return False
        self.puzzle = puzzle
        self.revealed_clues = min(INITIAL_REVEALED_CLUES, len(puzzle.clues))
        self.phase = Phase.PLAYING
        if puzzle.is_fallback:
            self._set_feedback(FeedbackKind.ERROR, self.MSG_FALLBACK)
        logger.info(f"Puzzle '{puzzle.title}' loaded (generation {generation}, {len(puzzle.clues)} clues).")
        self._notify()
        return True

    async def new_game(self, theme: str = DEFAULT_THEME_PROMPT) -> bool:
        """Requests a fresh puzzle from the generator and starts playing it."""
        generation = self.begin_new_game(theme)
        if self.generator is None:
            self.generator = PuzzleGenerator()
        try:
            puzzle = await self.generator.generate_puzzle(theme)
        except Exception:
            logger.exception("Puzzle generator raised; using the fallback puzzle.")
            puzzle = load_fallback_puzzle()
        return self.finish_loading(generation, puzzle)

    @_synchronized
    def load_puzzle(self, puzzle: PuzzleData) -> None:
        """Starts a new run on already-available content."""
        self.finish_loading(self.begin_new_game(puzzle.title), puzzle)

    # --- Player Actions ---

    def _reject_if_not_playing(self, action: str) -> bool:
        if self.phase != Phase.PLAYING or self.puzzle is None:
            logger.debug(f"{action} ignored in phase {self.phase.name}.")
            return True
        return False

    @_synchronized
    def mark_cell(self, c1: int, i1: int, c2: int, i2: int, secondary: bool = False) -> bool:
        """Applies a click on cell (c1, i1)-(c2, i2) and re-runs auto-deduction."""
        if self._reject_if_not_playing("Mark"):
            return False
        self.grid = recalculate(apply_manual_transition(self.grid, c1, i1, c2, i2, secondary))
        self._notify()
        return True

    @_synchronized
    def reset_grid(self) -> bool:
        """Clears every mark without refunding tokens or hiding clues."""
        if self._reject_if_not_playing("Reset"):
            return False
        self.grid = GridState()
        logger.info("Grid cleared by player.")
        self._notify()
        return True

    @_synchronized
    def check(self) -> Optional[CheckResult]:
        """Spends a token to grade the grid. Returns None when the check is rejected."""
        if self._reject_if_not_playing("Check"):
            return None
        if self.tokens <= 0:
            self._set_feedback(FeedbackKind.ERROR, self.MSG_NO_TOKENS)
            self._notify()
            return None

        result = check_solution(self.puzzle, self.grid)
        self.tokens -= 1
        logger.info(f"Check used a token ({self.tokens} left): {result}")

        if result.is_win:
            self.phase = Phase.WON
            self._set_feedback(FeedbackKind.SUCCESS, self.MSG_WIN)
            logger.info(f"Puzzle '{self.puzzle.title}' solved.")
            self._notify()
            if self.on_win:
                self.on_win(self)
            return result

        if self.tokens == 0:
            self.grid = reveal_solution(self.puzzle, self.grid)
            self.phase = Phase.LOST
            self._set_feedback(FeedbackKind.ERROR, self.MSG_OUT_OF_TOKENS)
            logger.info("Out of tokens after check; solution revealed.")
        elif not result.correct:
            self._set_feedback(FeedbackKind.ERROR, self.MSG_WRONG)
        else:
            self._set_feedback(FeedbackKind.INFO, self.MSG_INCOMPLETE)
        self._notify()
        return result

    @_synchronized
    def hint(self) -> bool:
        """Spends a token to reveal the next clue."""
        if self._reject_if_not_playing("Hint"):
            return False
        if self.tokens <= 0:
            self._set_feedback(FeedbackKind.ERROR, self.MSG_NO_TOKENS)
            self._notify()
            return False
        if self.revealed_clues >= self.total_clues:
            self._set_feedback(FeedbackKind.INFO, self.MSG_ALL_CLUES)
            self._notify()
            return False

        self.tokens -= 1
        self.revealed_clues += 1
        self._set_feedback(FeedbackKind.SUCCESS, self.MSG_NEW_CLUE)
        logger.info(f"Hint revealed clue {self.revealed_clues}/{self.total_clues} ({self.tokens} tokens left).")

        if self.tokens == 0:
            self.phase = Phase.REVEALING
            self._schedule_reveal(self.grid.copy())
        self._notify()
        return True

    # --- Deferred Reveal ---

    def _schedule_reveal(self, snapshot: GridState) -> None:
        pending = _PendingReveal(self.generation, snapshot)
        self._pending_reveal = pending
        pending.handle = self.scheduler(self.reveal_delay, lambda: self._complete_reveal(pending))
        logger.debug(f"Reveal scheduled in {self.reveal_delay}s for generation {pending.generation}.")

    @_synchronized
    def _complete_reveal(self, pending: _PendingReveal) -> None:
        if pending is not self._pending_reveal or pending.generation != self.generation:
            logger.info(f"Discarding stale reveal for generation {pending.generation}.")
            return
        self._pending_reveal = None
        if self.phase != Phase.REVEALING or self.puzzle is None:
            return
        self.grid = reveal_solution(self.puzzle, pending.snapshot)
        self.phase = Phase.LOST
        self._set_feedback(FeedbackKind.ERROR, self.MSG_OUT_OF_TOKENS)
        logger.info("Out of tokens after hint; solution revealed.")
        self._notify()

    def _cancel_pending_reveal(self) -> None:
        pending, self._pending_reveal = self._pending_reveal, None
        if pending is None:
            return
        cancel = getattr(pending.handle, "cancel", None) or getattr(pending.handle, "stop", None)
        if callable(cancel):
            cancel()
        logger.debug(f"Cancelled pending reveal for generation {pending.generation}.")
