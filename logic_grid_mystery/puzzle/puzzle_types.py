from typing import Dict, List, Optional, Any
import logging

from .common import NUM_CATEGORIES, ITEMS_PER_CATEGORY

logger = logging.getLogger(__name__)


def normalize_name(name: Any) -> str:
    """Case/whitespace-insensitive form used for every item-name comparison."""
    return str(name).strip().lower()


class Category:
    """One labelled group of items. Item order defines index addressing."""
    def __init__(self, id: str, name: str, items: List[str]):
        self.id = id
        self.name = name
        self.items = list(items)

    def index_of(self, item_name: str) -> Optional[int]:
        """Index of ``item_name`` ignoring case and surrounding whitespace, or None."""
        wanted = normalize_name(item_name)
        for index, item in enumerate(self.items):
            if normalize_name(item) == wanted:
                return index
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "items": list(self.items)}

    def __repr__(self) -> str:
        return f"Category({self.id!r}, {self.name!r}, {self.items!r})"


class VisualTheme:
    """Colours, font and emoji generated alongside a puzzle."""
    FONTS = ("serif", "sans", "mono")
    DEFAULT_COLORS = {
        "background": "#fdf6e3",
        "surface": "#f3e9dc",
        "border": "#d6cbb6",
        "text": "#2b2d42",
        "accent": "#d90429",
        "primary": "#2b2d42",
    }

    def __init__(self, colors: Optional[Dict[str, str]] = None, font: str = "serif", emoji: str = "🔍"):
        merged = dict(self.DEFAULT_COLORS)
        if isinstance(colors, dict):
            merged.update({k: str(v) for k, v in colors.items() if k in self.DEFAULT_COLORS and v})
        self.colors = merged
        if font not in self.FONTS:
            logger.debug(f"Unknown theme font '{font}', using serif.")
            font = "serif"
        self.font = font
        self.emoji = emoji or "🔍"

    @classmethod
    def from_dict(cls, data: Any) -> "VisualTheme":
        if not isinstance(data, dict):
            return cls()
        return cls(colors=data.get("colors"), font=data.get("font", "serif"), emoji=data.get("emoji", ""))

    def to_dict(self) -> Dict[str, Any]:
        return {"colors": dict(self.colors), "font": self.font, "emoji": self.emoji}


class SolutionIndex:
    """Normalized view of a solution mapping, built once per puzzle load.

    Keys and matches are compared by ``normalize_name``. A name with no entry
    has no matches, so grading treats it as incorrect instead of failing.
    """
    def __init__(self, solution: Dict[str, List[str]]):
        self._ordered_matches: Dict[str, List[str]] = {}
        for item, matches in solution.items():
            key = normalize_name(item)
            if key in self._ordered_matches:
                logger.warning(f"Duplicate solution entry for '{item}' (normalized '{key}'); keeping the first.")
                continue
            self._ordered_matches[key] = [normalize_name(m) for m in (matches or [])]
        self._matches = {key: frozenset(matches) for key, matches in self._ordered_matches.items()}

    def matches_for(self, item_name: str) -> Optional[frozenset]:
        return self._matches.get(normalize_name(item_name))

    def ordered_matches_for(self, item_name: str) -> List[str]:
        return self._ordered_matches.get(normalize_name(item_name), [])

    def is_match(self, item_name: str, other_name: str) -> bool:
        matches = self.matches_for(item_name)
        if matches is None:
            return False
        return normalize_name(other_name) in matches

    def __contains__(self, item_name: str) -> bool:
        return normalize_name(item_name) in self._matches


class PuzzleData:
    """Immutable puzzle content: categories, clues and the ground-truth solution."""
    def __init__(self, title: str, story: str, categories: List[Category], clues: List[str],
                 solution: Dict[str, List[str]], theme: Optional[VisualTheme] = None,
                 is_fallback: bool = False, is_verified: bool = False):
        if len(categories) != NUM_CATEGORIES:
            raise ValueError(f"Expected {NUM_CATEGORIES} categories, got {len(categories)}.")
        for category in categories:
            if len(category.items) != ITEMS_PER_CATEGORY:
                raise ValueError(f"Category '{category.name}' must have {ITEMS_PER_CATEGORY} items, got {len(category.items)}.")

        self.title = title
        self.story = story
        self.categories = list(categories)
        self.clues = list(clues)
        self.solution = {item: list(matches) for item, matches in solution.items()}
        self.theme = theme if theme is not None else VisualTheme()
        self.is_fallback = is_fallback
        self.is_verified = is_verified
        self.solution_index = SolutionIndex(self.solution)

    def item_name(self, category_index: int, item_index: int) -> str:
        return self.categories[category_index].items[item_index]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "story": self.story,
            "categories": [c.to_dict() for c in self.categories],
            "clues": list(self.clues),
            "solution": [{"item": item, "matches": list(matches)} for item, matches in self.solution.items()],
            "theme": self.theme.to_dict(),
        }

    def __repr__(self) -> str:
        return f"PuzzleData({self.title!r}, fallback={self.is_fallback}, verified={self.is_verified})"
