# Make 'puzzle' a package
# Selectively expose key classes/enums for easier top-level imports
from .common import CellState, FeedbackKind
from .grid import GridState
from .puzzle_types import Category, PuzzleData, VisualTheme, SolutionIndex
from .generator import PuzzleGenerator, PuzzleFormatError
