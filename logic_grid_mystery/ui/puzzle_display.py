from PyQt6.QtWidgets import (QLabel, QGridLayout, QWidget, QPushButton, QListWidget,
                             QListWidgetItem, QSizePolicy)
from PyQt6.QtGui import QFont
from PyQt6.QtCore import Qt, pyqtSignal
import logging
from typing import Dict, Optional, Tuple

from ..puzzle.common import CellState
from ..puzzle.grid import GridState
from ..puzzle.puzzle_types import PuzzleData
from .themes import Theme

logger = logging.getLogger(__name__)

# CellState -> (symbol, theme colour role)
CELL_SYMBOLS: Dict[CellState, Tuple[str, str]] = {
    CellState.EMPTY: ("", "text"),
    CellState.FALSE: ("✕", "primary"),
    CellState.FALSE_AUTO: ("✕", "border"),
    CellState.TRUE: ("●", "accent"),
    CellState.TRUE_CORRECT: ("✔", "accent"),
    CellState.TRUE_INCORRECT: ("✘", "#e63946"),
    CellState.MISSED: ("?", "primary"),
}

FEEDBACK_COLORS = {
    "error": "#800f2f",
    "success": "#004b23",
    "info": "#0077b6",
}

CELL_SIZE = 44


class GridCellButton(QPushButton):
    """One cell of the grid. Left click affirms, right click excludes."""
    clicked_with_button = pyqtSignal(bool) # True for the secondary (right) button

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setProperty("gridCell", "true")
        self.setFixedSize(CELL_SIZE, CELL_SIZE)
        self.setFont(QFont("Arial", 16, QFont.Weight.Bold))
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.PreventContextMenu)

    def mouseReleaseEvent(self, event):
        if not self.isEnabled():
            return
        if event.button() == Qt.MouseButton.RightButton:
            self.clicked_with_button.emit(True)
            return
        if event.button() == Qt.MouseButton.LeftButton:
            self.clicked_with_button.emit(False)
        super().mouseReleaseEvent(event)


class LogicGridWidget(QWidget):
    """The triangular grid.

    Columns are the first and third categories, rows the second and third:
    blocks (1,0), (1,2) on top and (2,0) below, the (2,2) corner left empty.
    """
    cell_clicked = pyqtSignal(int, int, int, int, bool)

    BLOCKS = (
        # (row category, column category, row offset, column offset)
        (1, 0, 0, 0),
        (1, 2, 0, 1),
        (2, 0, 1, 0),
    )

    def __init__(self, puzzle: PuzzleData, parent=None):
        super().__init__(parent)
        self.puzzle = puzzle
        self.theme: Optional[Theme] = None
        self.cells: Dict[Tuple[int, int, int, int], GridCellButton] = {}
        layout = QGridLayout(self)
        layout.setSpacing(2)
        self._build(layout)

    def _header(self, text: str, vertical: bool = False) -> QLabel:
        label = QLabel(text)
        label.setFont(QFont("Arial", 9, QFont.Weight.Bold))
        label.setWordWrap(True)
        if vertical:
            label.setFixedWidth(CELL_SIZE)
            label.setAlignment(Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignBottom)
        else:
            label.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        label.setSizePolicy(QSizePolicy.Policy.Preferred, QSizePolicy.Policy.Preferred)
        return label

    def _build(self, layout: QGridLayout):
        cats = self.puzzle.categories
        n = len(cats[0].items)
        gap = 1 # Spacer column/row between blocks

        # Column headers: category 0 then category 2
        for col_block, cat_index in enumerate((0, 2)):
            for i, item in enumerate(cats[cat_index].items):
                layout.addWidget(self._header(item, vertical=True), 0, 1 + col_block * (n + gap) + i)
        # Row headers: category 1 then category 2
        for row_block, cat_index in enumerate((1, 2)):
            for i, item in enumerate(cats[cat_index].items):
                layout.addWidget(self._header(item), 1 + row_block * (n + gap) + i, 0)

        for row_cat, col_cat, row_block, col_block in self.BLOCKS:
            for r in range(n):
                for c in range(n):
                    button = GridCellButton(self)
                    coords = (row_cat, r, col_cat, c)
                    button.clicked_with_button.connect(
                        lambda secondary, coords=coords: self.cell_clicked.emit(*coords, secondary))
                    button.setToolTip(f"{cats[row_cat].items[r]} / {cats[col_cat].items[c]}")
                    layout.addWidget(button, 1 + row_block * (n + gap) + r, 1 + col_block * (n + gap) + c)
                    self.cells[coords] = button
        logger.debug(f"Logic grid widget built with {len(self.cells)} cells.")

    def set_theme(self, theme: Theme):
        self.theme = theme

    def render_grid(self, grid: GridState, interactive: bool):
        for (c1, i1, c2, i2), button in self.cells.items():
            state = grid.get_cell(c1, i1, c2, i2)
            symbol, role = CELL_SYMBOLS.get(state, ("", "text"))
            color = role if role.startswith("#") else (self.theme.cell_color(role) if self.theme else "")
            button.setText(symbol)
            button.setStyleSheet(f"color: {color};" if color else "")
            button.setEnabled(interactive)


def display_clues(list_widget: QListWidget, clues, hidden_count: int):
    """Fills the clue list. Clicking a clue toggles its strike-through."""
    list_widget.clear()
    for i, clue in enumerate(clues):
        item = QListWidgetItem(f"{i + 1}. {clue}")
        item.setData(Qt.ItemDataRole.UserRole, False) # Done flag
        list_widget.addItem(item)
    if hidden_count > 0:
        hidden = QListWidgetItem(f"🔒 {hidden_count} clue(s) hidden... Use a Hint to reveal.")
        hidden.setFlags(Qt.ItemFlag.NoItemFlags)
        list_widget.addItem(hidden)


def toggle_clue_done(item: QListWidgetItem):
    done = item.data(Qt.ItemDataRole.UserRole)
    if done is None:
        return
    done = not done
    item.setData(Qt.ItemDataRole.UserRole, done)
    font = item.font()
    font.setStrikeOut(done)
    item.setFont(font)


def clear_layout(layout):
    """Removes all widgets and sub-layouts from a layout."""
    if layout is not None:
        while layout.count():
            item = layout.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()
            else:
                sub_layout = item.layout()
                if sub_layout is not None:
                    clear_layout(sub_layout)
