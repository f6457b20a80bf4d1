"""Logic Grid Mystery: generated three-category logic grid puzzles."""
__version__ = "0.1.0"
