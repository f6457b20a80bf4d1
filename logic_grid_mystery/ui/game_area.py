from PyQt6.QtWidgets import (QHBoxLayout, QVBoxLayout, QFrame, QLabel, QListWidget,
                             QWidget, QScrollArea)
from PyQt6.QtGui import QFont
from PyQt6.QtCore import Qt
import logging

from .puzzle_display import toggle_clue_done

logger = logging.getLogger(__name__)

def create_game_area_layout(parent_layout, main_window):
    """Creates the main game area layout (grid on the left, clues on the right).
       Stores references to key widgets and layouts on main_window.
    """
    logger.debug("Creating game area layout...")
    main_window.game_area_layout = QHBoxLayout()

    # --- Grid Area (Left Side - Scrollable) ---
    main_window.puzzle_scroll_area = QScrollArea()
    main_window.puzzle_scroll_area.setWidgetResizable(True)
    main_window.puzzle_scroll_area.setFrameShape(QFrame.Shape.NoFrame)

    scroll_content_widget = QWidget(main_window.puzzle_scroll_area)
    main_window.puzzle_area_layout = QVBoxLayout(scroll_content_widget)

    main_window.board_frame = QFrame()
    main_window.board_frame.setObjectName("boardFrame")
    main_window.puzzle_content_layout = QVBoxLayout(main_window.board_frame)
    main_window.puzzle_content_layout.setContentsMargins(12, 12, 12, 12)
    main_window.puzzle_area_layout.addWidget(main_window.board_frame, alignment=Qt.AlignmentFlag.AlignHCenter)

    # Legend shown only on the comparison grid
    main_window.legend_label = QLabel("✔ Correct    ✘ Incorrect    ? Missed")
    main_window.legend_label.setFont(QFont("Georgia", 10, QFont.Weight.Bold))
    main_window.legend_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
    main_window.legend_label.setVisible(False)
    main_window.puzzle_area_layout.addWidget(main_window.legend_label)

    main_window.puzzle_area_layout.addStretch(1)
    main_window.puzzle_scroll_area.setWidget(scroll_content_widget)
    main_window.game_area_layout.addWidget(main_window.puzzle_scroll_area, stretch=3)

    # --- Clues Area (Right Side) ---
    clues_frame = QFrame()
    clues_frame.setFrameStyle(QFrame.Shape.StyledPanel | QFrame.Shadow.Raised)
    clues_layout = QVBoxLayout(clues_frame)

    main_window.clues_title = QLabel("INVESTIGATION NOTES")
    main_window.clues_title.setFont(QFont("Georgia", 14, QFont.Weight.Bold))
    main_window.clues_title.setAlignment(Qt.AlignmentFlag.AlignCenter)
    clues_layout.addWidget(main_window.clues_title)

    main_window.clues_list = QListWidget()
    main_window.clues_list.setFont(QFont("Georgia", 11))
    main_window.clues_list.setWordWrap(True)
    main_window.clues_list.itemClicked.connect(toggle_clue_done)
    clues_layout.addWidget(main_window.clues_list)

    main_window.game_area_layout.addWidget(clues_frame, stretch=2)

    parent_layout.addLayout(main_window.game_area_layout)
    logger.debug("Game area layout created.")
