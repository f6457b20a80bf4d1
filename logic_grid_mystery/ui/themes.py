from ..puzzle.puzzle_types import VisualTheme

FONT_FAMILIES = {
    "serif": "Georgia",
    "sans": "Arial",
    "mono": "Courier New",
}


class Theme:
    """Qt stylesheet built from a generated VisualTheme."""
    def __init__(self, visual_theme: VisualTheme):
        self.name = visual_theme.emoji
        self.colors = visual_theme.colors
        self.font_family = FONT_FAMILIES.get(visual_theme.font, "Georgia")

    @property
    def stylesheet(self):
        """Generate Qt stylesheet for the theme."""
        return f"""
            QMainWindow, QDialog {{
                background-color: {self.colors['background']};
                color: {self.colors['text']};
                font-family: "{self.font_family}";
            }}

            QPushButton {{
                background-color: {self.colors['primary']};
                color: {self.colors['surface']};
                border: none;
                padding: 8px;
                border-radius: 4px;
                font-weight: bold;
            }}

            QPushButton:disabled {{
                background-color: {self.colors['border']};
            }}

            QPushButton[gridCell="true"] {{
                background-color: {self.colors['surface']};
                color: {self.colors['text']};
                border: 1px solid {self.colors['border']};
                border-radius: 6px;
                padding: 0px;
                font-size: 18px;
            }}

            QLineEdit, QListWidget {{
                background-color: {self.colors['surface']};
                color: {self.colors['text']};
                border: 1px solid {self.colors['border']};
                border-radius: 4px;
                padding: 4px;
            }}

            QLabel {{
                color: {self.colors['text']};
            }}

            QFrame#boardFrame {{
                background-color: {self.colors['surface']};
                border: 4px solid {self.colors['border']};
            }}
        """

    def cell_color(self, role: str) -> str:
        """Foreground colour for a grid symbol ('accent', 'primary', 'border', ...)."""
        return self.colors.get(role, self.colors['text'])
