from PyQt6.QtWidgets import QHBoxLayout, QPushButton, QLineEdit
import logging

logger = logging.getLogger(__name__)

def populate_control_bar_layout(parent_layout, main_window):
    """Creates the theme input and the New Case / Hint / Verify / Reset buttons.
       Connects signals and stores references on main_window.
    """
    logger.debug("Populating control bar layout...")
    control_layout = QHBoxLayout()

    # --- Theme Input ---
    main_window.theme_input = QLineEdit(main_window.settings.theme_prompt)
    main_window.theme_input.setPlaceholderText("Theme (e.g., 'Noir Detective')")
    main_window.theme_input.returnPressed.connect(main_window._start_new_game)
    control_layout.addWidget(main_window.theme_input, stretch=1)

    # --- New Case Button ---
    main_window.new_game_button = QPushButton("New Case")
    main_window.new_game_button.setToolTip("Generate a new puzzle for the theme (Ctrl+N)")
    main_window.new_game_button.setShortcut("Ctrl+N")
    main_window.new_game_button.clicked.connect(main_window._start_new_game)
    control_layout.addWidget(main_window.new_game_button)

    control_layout.addStretch(1)

    # --- Hint Button ---
    main_window.hint_button = QPushButton("Hint (1 token)")
    main_window.hint_button.setToolTip("Reveal the next clue (Ctrl+H)")
    main_window.hint_button.setShortcut("Ctrl+H")
    main_window.hint_button.clicked.connect(main_window._use_hint)
    main_window.hint_button.setEnabled(False) # Initially disabled until puzzle loaded
    control_layout.addWidget(main_window.hint_button)

    # --- Verify Button ---
    main_window.check_button = QPushButton("Verify (1 token)")
    main_window.check_button.setToolTip("Check your marks against the solution (Ctrl+Enter)")
    main_window.check_button.setShortcut("Ctrl+Return")
    main_window.check_button.clicked.connect(main_window._check_solution)
    main_window.check_button.setEnabled(False)
    control_layout.addWidget(main_window.check_button)

    # --- Reset Button ---
    main_window.reset_button = QPushButton("Clear Grid")
    main_window.reset_button.setToolTip("Remove every mark from the grid (Ctrl+R)")
    main_window.reset_button.setShortcut("Ctrl+R")
    main_window.reset_button.clicked.connect(main_window._reset_grid)
    main_window.reset_button.setEnabled(False)
    control_layout.addWidget(main_window.reset_button)

    parent_layout.addLayout(control_layout)
    logger.debug("Control bar layout populated.")
