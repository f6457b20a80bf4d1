import asyncio
import threading
import time

import pytest

from logic_grid_mystery.core import game_state
from logic_grid_mystery.core.game_state import GameSession, Phase, Feedback
from logic_grid_mystery.puzzle.common import CellState, FeedbackKind
from logic_grid_mystery.puzzle.generator import load_fallback_puzzle

from conftest import mark_true


@pytest.fixture
def session(scheduler, puzzle):
    game = GameSession(scheduler=scheduler)
    game.load_puzzle(puzzle)
    return game


def _make_non_fallback(puzzle):
    puzzle.is_fallback = False
    return puzzle


def test_loaded_session_starts_playing(session):
    assert session.phase == Phase.PLAYING
    assert session.tokens == 3
    assert session.revealed_clues == 4
    assert len(session.visible_clues) == 4
    assert session.hidden_clue_count == 2
    assert len(session.grid) == 0


def test_fallback_puzzle_sets_error_feedback(session):
    assert session.feedback == Feedback(FeedbackKind.ERROR, GameSession.MSG_FALLBACK)


def test_mark_cell_runs_deduction(session):
    assert session.mark_cell(0, 0, 1, 0)
    assert session.grid.get_cell(0, 0, 1, 0) == CellState.TRUE
    assert session.grid.get_cell(0, 0, 1, 1) == CellState.FALSE_AUTO
    assert session.grid.get_cell(0, 3, 1, 0) == CellState.FALSE_AUTO


def test_exclude_then_affirm_auto_cell(session):
    session.mark_cell(0, 0, 1, 0)
    session.mark_cell(0, 1, 1, 0) # FALSE_AUTO -> TRUE
    assert session.grid.get_cell(0, 1, 1, 0) == CellState.TRUE
    session.mark_cell(0, 1, 1, 0, secondary=True) # TRUE -> EMPTY, then re-deduced
    assert session.grid.get_cell(0, 1, 1, 0) == CellState.FALSE_AUTO


def test_incomplete_check_spends_one_token(session):
    session.mark_cell(0, 0, 1, 0)
    result = session.check()
    assert result.correct and not result.complete
    assert session.tokens == 2
    assert session.phase == Phase.PLAYING
    assert session.feedback == Feedback(FeedbackKind.INFO, GameSession.MSG_INCOMPLETE)


def test_wrong_check_reports_error(session):
    session.mark_cell(0, 0, 1, 1)
    result = session.check()
    assert not result.correct
    assert session.feedback == Feedback(FeedbackKind.ERROR, GameSession.MSG_WRONG)


def test_perfect_check_wins_and_freezes(session, true_cells):
    wins = []
    session.on_win = wins.append
    mark_true(session.grid, true_cells)
    result = session.check()

    assert result.is_win
    assert session.phase == Phase.WON
    assert session.tokens == 2
    assert wins == [session]
    assert not session.mark_cell(0, 0, 1, 1)
    assert session.check() is None
    assert not session.hint()
    assert session.tokens == 2


def test_last_check_reveals_solution(session):
    session.mark_cell(0, 0, 1, 0)
    session.check()
    session.check()
    session.check()
    assert session.tokens == 0
    assert session.phase == Phase.LOST
    assert session.grid.get_cell(0, 0, 1, 0) == CellState.TRUE_CORRECT
    assert session.grid.count(CellState.MISSED) == 11
    assert session.feedback == Feedback(FeedbackKind.ERROR, GameSession.MSG_OUT_OF_TOKENS)
    assert session.check() is None
    assert session.tokens == 0
    assert not session.hint()
    assert session.is_over
    assert session.tokens == 0


def test_tokens_never_increase(session):
    seen = [session.tokens]
    session.hint()
    seen.append(session.tokens)
    session.mark_cell(0, 0, 1, 0)
    session.reset_grid()
    seen.append(session.tokens)
    session.check()
    seen.append(session.tokens)
    assert seen == sorted(seen, reverse=True)
    assert seen[-1] == 1


def test_hint_reveals_next_clue(session):
    assert session.hint()
    assert session.revealed_clues == 5
    assert session.tokens == 2
    assert session.feedback == Feedback(FeedbackKind.SUCCESS, GameSession.MSG_NEW_CLUE)


def test_hint_rejected_when_all_clues_visible(session):
    session.hint()
    session.hint()
    assert session.revealed_clues == 6
    assert session.tokens == 1
    assert not session.hint()
    assert session.tokens == 1
    assert session.feedback == Feedback(FeedbackKind.INFO, GameSession.MSG_ALL_CLUES)


def test_exhausting_hint_defers_the_reveal(scheduler, puzzle):
    puzzle.clues = puzzle.clues + ["Extra clue one.", "Extra clue two."]
    session = GameSession(scheduler=scheduler)
    session.load_puzzle(puzzle)
    session.check()
    session.check()
    session.mark_cell(0, 0, 1, 0)

    assert session.hint()
    assert session.tokens == 0
    assert session.phase == Phase.REVEALING
    assert session.revealed_clues == 5
    assert len(scheduler.calls) == 1
    assert scheduler.calls[0].delay == pytest.approx(1.5)
    # Nothing is accepted while the reveal is pending
    assert not session.mark_cell(0, 1, 1, 3)
    assert session.check() is None

    scheduler.fire_all()
    assert session.phase == Phase.LOST
    assert session.grid.get_cell(0, 0, 1, 0) == CellState.TRUE_CORRECT
    assert session.grid.count(CellState.MISSED) == 11


def test_stale_reveal_is_discarded_after_new_game(scheduler, puzzle):
    puzzle.clues = puzzle.clues + ["Extra clue one.", "Extra clue two."]
    session = GameSession(scheduler=scheduler)
    session.load_puzzle(puzzle)
    session.check()
    session.check()
    session.hint()
    assert session.phase == Phase.REVEALING

    session.load_puzzle(load_fallback_puzzle())
    assert scheduler.calls[0].cancelled
    scheduler.fire_all()
    assert session.phase == Phase.PLAYING
    assert session.tokens == 3
    assert len(session.grid) == 0


def test_reset_grid_keeps_tokens_and_clues(session):
    session.hint()
    session.mark_cell(0, 0, 1, 0)
    assert session.reset_grid()
    assert len(session.grid) == 0
    assert session.tokens == 2
    assert session.revealed_clues == 5


def test_stale_load_is_discarded(scheduler, puzzle):
    session = GameSession(scheduler=scheduler)
    first = session.begin_new_game("Noir")
    second = session.begin_new_game("Sci-Fi")
    assert not session.finish_loading(first, puzzle)
    assert session.phase == Phase.LOADING
    assert session.finish_loading(second, puzzle)
    assert session.phase == Phase.PLAYING


def test_actions_rejected_while_loading(scheduler):
    session = GameSession(scheduler=scheduler)
    session.begin_new_game()
    assert not session.mark_cell(0, 0, 1, 0)
    assert session.check() is None
    assert not session.hint()
    assert not session.reset_grid()


def test_listeners_are_notified(session):
    events = []
    session.add_listener(lambda s: events.append(s.phase))
    session.mark_cell(0, 0, 1, 0)
    session.check()
    assert events == [Phase.PLAYING, Phase.PLAYING]


def test_failing_listener_does_not_break_the_session(session):
    def broken(_):
        raise RuntimeError("boom")
    session.add_listener(broken)
    assert session.mark_cell(0, 0, 1, 0)


class FakeGenerator:
    def __init__(self, puzzle=None, error=None):
        self.puzzle = puzzle
        self.error = error
        self.themes = []

    async def generate_puzzle(self, theme):
        self.themes.append(theme)
        if self.error is not None:
            raise self.error
        return self.puzzle


def test_new_game_uses_generator(scheduler, puzzle):
    generator = FakeGenerator(_make_non_fallback(puzzle))
    session = GameSession(generator=generator, scheduler=scheduler)
    assert asyncio.run(session.new_game("Space Heist"))
    assert generator.themes == ["Space Heist"]
    assert session.phase == Phase.PLAYING
    assert session.feedback is None


def test_new_game_falls_back_when_generator_raises(scheduler):
    session = GameSession(generator=FakeGenerator(error=RuntimeError("down")), scheduler=scheduler)
    assert asyncio.run(session.new_game("Noir"))
    assert session.puzzle.is_fallback
    assert session.feedback.kind == FeedbackKind.ERROR


def _exhaust_with_hint(session):
    session.check()
    session.check()
    session.mark_cell(0, 0, 1, 0)
    assert session.hint()
    assert session.phase == Phase.REVEALING


def _puzzle_with_spare_clues():
    puzzle = load_fallback_puzzle()
    puzzle.clues = puzzle.clues + ["Extra clue one.", "Extra clue two."]
    return puzzle


def test_timer_reveal_completes_on_default_scheduler():
    session = GameSession(reveal_delay=0.01)
    session.load_puzzle(_puzzle_with_spare_clues())
    done = threading.Event()
    session.add_listener(lambda s: done.set() if s.phase == Phase.LOST else None)
    _exhaust_with_hint(session)

    assert done.wait(2.0)
    assert session.grid.get_cell(0, 0, 1, 0) == CellState.TRUE_CORRECT


def test_new_game_before_timer_fires_cancels_reveal():
    session = GameSession(reveal_delay=0.05)
    session.load_puzzle(_puzzle_with_spare_clues())
    _exhaust_with_hint(session)

    session.load_puzzle(load_fallback_puzzle())
    time.sleep(0.2)
    assert session.phase == Phase.PLAYING
    assert len(session.grid) == 0


def test_new_game_during_running_reveal_keeps_new_grid(monkeypatch):
    started = threading.Event()
    real_reveal = game_state.reveal_solution

    def slow_reveal(puzzle, grid):
        started.set()
        time.sleep(0.2)
        return real_reveal(puzzle, grid)

    monkeypatch.setattr(game_state, "reveal_solution", slow_reveal)
    session = GameSession(reveal_delay=0.01)
    session.load_puzzle(_puzzle_with_spare_clues())
    _exhaust_with_hint(session)

    assert started.wait(2.0)
    session.load_puzzle(load_fallback_puzzle())
    time.sleep(0.3)
    assert session.phase == Phase.PLAYING
    assert session.tokens == 3
    assert len(session.grid) == 0
