import sys
from typing import List, Optional
import asyncio
import logging

# --- PyQt6 Imports ---
from PyQt6.QtWidgets import QApplication, QMainWindow, QWidget, QMessageBox
from PyQt6.QtWidgets import QVBoxLayout, QHBoxLayout, QPushButton, QLabel, QLineEdit, QListWidget, QFrame
from PyQt6.QtCore import Qt, QTimer, QThread, pyqtSignal
from PyQt6.QtGui import QFont

# --- Application Imports ---
from .. import config
from ..core.game_state import GameSession, Phase
from ..core.settings import UserSettings
from ..puzzle.common import DEFAULT_THEME_PROMPT
from ..puzzle.generator import PuzzleGenerator, load_fallback_puzzle
from ..puzzle.puzzle_types import PuzzleData, VisualTheme
from .info_bar import populate_info_bar_layout
from .game_area import create_game_area_layout
from .control_bar import populate_control_bar_layout
from .puzzle_display import LogicGridWidget, display_clues, clear_layout, FEEDBACK_COLORS
from .themes import Theme

logger = logging.getLogger(__name__)

FEEDBACK_CLEAR_MS = 5000


class PuzzleLoadWorker(QThread):
    """Runs the async puzzle generator off the GUI thread."""
    puzzle_ready = pyqtSignal(int, object) # (generation, PuzzleData)

    def __init__(self, generator: PuzzleGenerator, theme: str, generation: int, parent=None):
        super().__init__(parent)
        self.generator = generator
        self.theme = theme
        self.generation = generation

    def run(self):
        try:
            puzzle = asyncio.run(self.generator.generate_puzzle(self.theme))
        except Exception:
            logger.exception("Puzzle worker failed; using the fallback puzzle.")
            puzzle = load_fallback_puzzle()
        self.puzzle_ready.emit(self.generation, puzzle)


class LogicGridMysteryWindow(QMainWindow):
    """Main application window for Logic Grid Mystery."""
    def __init__(self):
        super().__init__()
        logger.info("Initializing main application window...")
        self.settings = UserSettings()
        self.settings.load()
        self.generator = PuzzleGenerator()
        self.session = GameSession(generator=self.generator, scheduler=self._qt_scheduler,
                                   on_win=self._celebrate)
        self.session.add_listener(self._on_session_changed)

        # --- UI Widget References ---
        # Info Bar
        self.title_label: Optional[QLabel] = None
        self.story_label: Optional[QLabel] = None
        self.tokens_label: Optional[QLabel] = None
        # Game Area
        self.board_frame: Optional[QFrame] = None
        self.puzzle_content_layout: Optional[QVBoxLayout] = None
        self.legend_label: Optional[QLabel] = None
        self.clues_list: Optional[QListWidget] = None
        self.grid_widget: Optional[LogicGridWidget] = None
        # Control Bar
        self.theme_input: Optional[QLineEdit] = None
        self.new_game_button: Optional[QPushButton] = None
        self.hint_button: Optional[QPushButton] = None
        self.check_button: Optional[QPushButton] = None
        self.reset_button: Optional[QPushButton] = None
        # Feedback
        self.feedback_label: Optional[QLabel] = None

        self._workers: List[PuzzleLoadWorker] = []
        self._shown_puzzle: Optional[PuzzleData] = None
        self._shown_clue_count = -1
        self._feedback_timer = QTimer(self)
        self._feedback_timer.setSingleShot(True)
        self._feedback_timer.timeout.connect(self._clear_feedback)

        # --- Window Setup ---
        self.setWindowTitle("Logic Grid Mystery")
        self.setMinimumSize(900, 700)

        # --- UI Construction ---
        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout(central_widget)

        populate_info_bar_layout(main_layout, self)
        create_game_area_layout(main_layout, self)
        populate_control_bar_layout(main_layout, self)
        self._create_feedback_label(main_layout)

        self._apply_theme(VisualTheme())
        self._start_new_game()
        logger.info("Main window initialization complete.")

    def _create_feedback_label(self, parent_layout):
        """Creates the banner at the bottom for feedback messages."""
        feedback_layout = QHBoxLayout()
        self.feedback_label = QLabel("")
        self.feedback_label.setFont(QFont("Arial", 12, QFont.Weight.Bold))
        self.feedback_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.feedback_label.setMinimumHeight(30)
        self.feedback_label.setWordWrap(True)
        feedback_layout.addWidget(self.feedback_label)
        parent_layout.addLayout(feedback_layout)

    # --- Session Wiring ---

    def _qt_scheduler(self, delay: float, callback):
        """Runs ``callback`` on the GUI thread after ``delay`` seconds. The timer's stop() cancels it."""
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.timeout.connect(callback)
        timer.start(int(delay * 1000))
        return timer

    def _start_new_game(self):
        theme = (self.theme_input.text().strip() if self.theme_input else "") or DEFAULT_THEME_PROMPT
        self.settings.theme_prompt = theme
        generation = self.session.begin_new_game(theme)
        self._set_feedback(f"Generating a '{theme}' case...", FEEDBACK_COLORS["info"], auto_clear=False)

        worker = PuzzleLoadWorker(self.generator, theme, generation, self)
        worker.puzzle_ready.connect(self._on_puzzle_ready)
        worker.finished.connect(lambda: self._workers.remove(worker) if worker in self._workers else None)
        self._workers.append(worker)
        worker.start()

    def _on_puzzle_ready(self, generation: int, puzzle: PuzzleData):
        if not self.session.finish_loading(generation, puzzle):
            return
        if not puzzle.is_verified:
            logger.warning(f"Playing unverified puzzle '{puzzle.title}'.")

    def _on_session_changed(self, session: GameSession):
        puzzle = session.puzzle
        if puzzle is not self._shown_puzzle:
            self._rebuild_board(puzzle)

        self.tokens_label.setText(f"Budget: {session.tokens}")
        if puzzle is not None and session.revealed_clues != self._shown_clue_count:
            display_clues(self.clues_list, session.visible_clues, session.hidden_clue_count)
            self._shown_clue_count = session.revealed_clues
        elif puzzle is None:
            self.clues_list.clear()
            self._shown_clue_count = -1

        if self.grid_widget is not None:
            self.grid_widget.render_grid(session.grid, interactive=session.is_playing)
        self.legend_label.setVisible(session.is_lost)

        self.new_game_button.setEnabled(True)
        self.hint_button.setEnabled(session.can_hint)
        self.check_button.setEnabled(session.can_check)
        self.reset_button.setEnabled(session.is_playing)

        if session.phase in (Phase.WON, Phase.LOST):
            self._show_case_closed(session)
        elif session.feedback is not None:
            self._set_feedback(session.feedback.message, FEEDBACK_COLORS.get(session.feedback.kind.value, ""))

    def _rebuild_board(self, puzzle: Optional[PuzzleData]):
        clear_layout(self.puzzle_content_layout)
        self.grid_widget = None
        self._shown_puzzle = puzzle
        self._shown_clue_count = -1
        if puzzle is None:
            self.title_label.setText("LOGIC GRID MYSTERY")
            self.story_label.setText("Gathering evidence...")
            return

        self.title_label.setText(f"{puzzle.theme.emoji} {puzzle.title}")
        self.story_label.setText(puzzle.story)
        self._apply_theme(puzzle.theme)
        self.grid_widget = LogicGridWidget(puzzle)
        self.grid_widget.set_theme(self.theme)
        self.grid_widget.cell_clicked.connect(self.session.mark_cell)
        self.puzzle_content_layout.addWidget(self.grid_widget)
        logger.debug(f"Board rebuilt for puzzle '{puzzle.title}'.")

    # --- Player Actions ---

    def _use_hint(self):
        logger.info("Hint button clicked.")
        self.session.hint()

    def _check_solution(self):
        logger.info("Verify button clicked.")
        self.session.check()

    def _reset_grid(self):
        reply = QMessageBox.question(self, "Clear Grid", "Remove every mark from the grid? Tokens are not refunded.",
                                     QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                                     QMessageBox.StandardButton.No)
        if reply == QMessageBox.StandardButton.Yes:
            self.session.reset_grid()

    def _celebrate(self, session: GameSession):
        QMessageBox.information(self, "Case Closed", f"You solved '{session.puzzle.title}' with {session.tokens} token(s) to spare!")

    # --- Helper Methods ---

    def _show_case_closed(self, session: GameSession):
        won = session.phase == Phase.WON
        color = FEEDBACK_COLORS["success"] if won else FEEDBACK_COLORS["error"]
        headline = "CASE CLOSED: SOLVED" if won else "CASE CLOSED: UNSOLVED"
        message = session.feedback.message if session.feedback else ""
        self._set_feedback(f"{headline}. {message} Start a New Case to play again.", color, auto_clear=False)

    def _set_feedback(self, message: str, color: str = "", auto_clear: bool = True):
        """Updates the feedback banner; ordinary messages clear themselves after a few seconds."""
        if not self.feedback_label:
            logger.warning("Feedback label not available.")
            return
        logger.debug(f"Setting feedback: '{message}' (Color: {color})")
        self.feedback_label.setText(message)
        self.feedback_label.setStyleSheet(f"color: {color};" if color else "")
        self._feedback_timer.stop()
        if auto_clear:
            self._feedback_timer.start(FEEDBACK_CLEAR_MS)

    def _clear_feedback(self):
        if self.feedback_label and not self.session.is_over:
            self.feedback_label.setText("")

    def _apply_theme(self, visual_theme: VisualTheme):
        """Applies the puzzle's generated look to the main window."""
        self.theme = Theme(visual_theme)
        try:
            self.setStyleSheet(self.theme.stylesheet)
        except Exception as e:
            logger.error(f"Error applying stylesheet for theme '{visual_theme.emoji}': {e}")
            self.setStyleSheet("")

    def closeEvent(self, event):
        """Saves preferences and drops any in-flight generation before closing."""
        logger.info("Close event triggered.")
        self.session.remove_listener(self._on_session_changed)
        self.session.begin_new_game()
        if self.theme_input:
            self.settings.theme_prompt = self.theme_input.text().strip() or DEFAULT_THEME_PROMPT
        try:
            self.settings.save()
        except IOError as e:
            logger.error(f"Failed to save settings on exit: {e}")
        for worker in list(self._workers):
            worker.wait(2000)
        event.accept()


# --- main Function (Entry Point) ---
def main():
    """Main function to initialize and run the PyQt application."""
    logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.INFO), format=config.LOG_FORMAT)
    logger.info("Application starting...")

    app = QApplication(sys.argv)
    app.setApplicationName("Logic Grid Mystery")

    window = LogicGridMysteryWindow()
    window.show()

    logger.info("Entering application event loop.")
    exit_code = app.exec()
    logger.info(f"Application exiting with code {exit_code}.")
    sys.exit(exit_code)


if __name__ == '__main__':
    main()
