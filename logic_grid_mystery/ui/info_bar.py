from PyQt6.QtWidgets import QHBoxLayout, QVBoxLayout, QLabel
from PyQt6.QtGui import QFont
from PyQt6.QtCore import Qt
import logging

from ..puzzle.common import STARTING_TOKENS

logger = logging.getLogger(__name__)

def populate_info_bar_layout(parent_layout, main_window):
    """Creates the header: puzzle title and story on the left, token budget on the right.
       Stores references to the widgets on the main_window object.
    """
    logger.debug("Populating info bar layout...")
    info_bar_layout = QHBoxLayout()

    text_layout = QVBoxLayout()
    main_window.title_label = QLabel("LOGIC GRID MYSTERY")
    main_window.title_label.setFont(QFont("Georgia", 18, QFont.Weight.Bold))
    text_layout.addWidget(main_window.title_label)

    main_window.story_label = QLabel("")
    main_window.story_label.setFont(QFont("Georgia", 11))
    main_window.story_label.setWordWrap(True)
    text_layout.addWidget(main_window.story_label)
    info_bar_layout.addLayout(text_layout, stretch=1)

    main_window.tokens_label = QLabel(f"Budget: {STARTING_TOKENS}")
    main_window.tokens_label.setFont(QFont("Courier New", 14, QFont.Weight.Bold))
    main_window.tokens_label.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
    main_window.tokens_label.setToolTip("Each Hint or Verify costs one token")
    info_bar_layout.addWidget(main_window.tokens_label)

    parent_layout.addLayout(info_bar_layout)
    logger.debug("Info bar layout populated.")
