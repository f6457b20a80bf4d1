from typing import Dict, List, Optional, Any
import logging
import json
import os
import re

from openai import AsyncOpenAI

from .. import config
from .common import NUM_CATEGORIES, ITEMS_PER_CATEGORY, EXPECTED_CLUE_COUNT, DEFAULT_THEME_PROMPT
from .puzzle_types import Category, PuzzleData, VisualTheme, normalize_name
from .verifiers.solution_verifier import _SolutionConsistencyVerifier

logger = logging.getLogger(__name__)

FALLBACK_PUZZLE_FILE = "fallback_puzzle.json"


class PuzzleFormatError(ValueError):
    """Raised when generated puzzle content does not have the expected shape."""


# --- Payload Parsing ---

def _parse_categories(raw_categories: Any) -> List[Category]:
    if not isinstance(raw_categories, list) or len(raw_categories) != NUM_CATEGORIES:
        raise PuzzleFormatError(f"Expected a list of exactly {NUM_CATEGORIES} categories.")

    categories = []
    for idx, raw in enumerate(raw_categories):
        if not isinstance(raw, dict):
            raise PuzzleFormatError(f"Category {idx} is not an object.")
        items = raw.get("items")
        if not isinstance(items, list) or len(items) != ITEMS_PER_CATEGORY:
            raise PuzzleFormatError(f"Category {idx} must have exactly {ITEMS_PER_CATEGORY} items.")
        items = [str(item).strip() for item in items]
        if len({normalize_name(item) for item in items}) != ITEMS_PER_CATEGORY:
            raise PuzzleFormatError(f"Category {idx} has duplicate items: {items}")
        category_id = str(raw.get("id") or f"cat_{idx}")
        name = str(raw.get("name") or category_id)
        categories.append(Category(id=category_id, name=name, items=items))

    all_items = [normalize_name(item) for c in categories for item in c.items]
    if len(set(all_items)) != len(all_items):
        raise PuzzleFormatError("The same item name appears in more than one category.")
    return categories


def _parse_solution(raw_solution: Any) -> Dict[str, List[str]]:
    """Turns the generated list of {item, matches} entries into a solution map."""
    if isinstance(raw_solution, dict):
        entries = [{"item": k, "matches": v} for k, v in raw_solution.items()]
    elif isinstance(raw_solution, list):
        entries = raw_solution
    else:
        raise PuzzleFormatError("Solution must be a list of {item, matches} objects.")

    solution: Dict[str, List[str]] = {}
    for entry in entries:
        if not isinstance(entry, dict) or "item" not in entry:
            logger.warning(f"Skipping malformed solution entry: {entry}")
            continue
        matches = entry.get("matches") or []
        if not isinstance(matches, list):
            matches = [matches]
        solution[str(entry["item"])] = [str(m) for m in matches]
    if not solution:
        raise PuzzleFormatError("Solution is empty.")
    return solution


def parse_puzzle_payload(raw: Any, is_fallback: bool = False) -> PuzzleData:
    """Validates generated JSON and converts it into a PuzzleData."""
    if not isinstance(raw, dict):
        raise PuzzleFormatError(f"Puzzle payload must be a JSON object, got {type(raw).__name__}.")

    categories = _parse_categories(raw.get("categories"))

    clues = raw.get("clues")
    if not isinstance(clues, list):
        raise PuzzleFormatError("Puzzle must include a list of clues.")
    clues = [str(clue).strip() for clue in clues if str(clue).strip()]
    if not clues:
        raise PuzzleFormatError("Puzzle must include at least one non-blank clue.")
    if len(clues) != EXPECTED_CLUE_COUNT:
        logger.warning(f"Generated puzzle has {len(clues)} clues (expected {EXPECTED_CLUE_COUNT}).")

    solution = _parse_solution(raw.get("solution"))

    return PuzzleData(
        title=str(raw.get("title") or "Untitled Mystery"),
        story=str(raw.get("story") or ""),
        categories=categories,
        clues=clues,
        solution=solution,
        theme=VisualTheme.from_dict(raw.get("theme")),
        is_fallback=is_fallback,
    )


def _extract_json(text: str) -> Any:
    """Parses the JSON object in an LLM reply, tolerating code fences around it."""
    text = (text or "").strip()
    if not text:
        raise PuzzleFormatError("Empty response from the puzzle service.")
    fenced = re.search(r"```(?:json)?\s*(\{.*\})\s*```", text, re.DOTALL)
    if fenced:
        text = fenced.group(1)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise PuzzleFormatError(f"Puzzle service returned invalid JSON: {e}") from e


def verify_solution(puzzle: PuzzleData) -> bool:
    """Marks ``puzzle.is_verified`` if its solution is one consistent matching."""
    try:
        is_consistent, _ = _SolutionConsistencyVerifier(puzzle.categories, puzzle.solution).verify()
    except ValueError as e:
        logger.warning(f"Could not run solution verification: {e}")
        is_consistent = False
    puzzle.is_verified = is_consistent
    if not is_consistent:
        logger.warning(f"Puzzle '{puzzle.title}' solution could not be verified as a consistent matching.")
    return is_consistent


def _load_data_from_json(filename: str) -> Any:
    filepath = os.path.join(config.DATA_DIR, filename)
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError:
        logger.error(f"Data file not found: {filepath}")
        raise FileNotFoundError(f"Required data file missing: {filepath}")
    except json.JSONDecodeError as e:
        logger.error(f"Error decoding JSON from {filepath}: {e}")
        raise ValueError(f"Invalid JSON format in {filepath}")


def load_fallback_puzzle() -> PuzzleData:
    """The bundled offline puzzle, used whenever generation fails."""
    try:
        puzzle = parse_puzzle_payload(_load_data_from_json(FALLBACK_PUZZLE_FILE), is_fallback=True)
    except (FileNotFoundError, ValueError) as e:
        logger.critical(f"Fatal error loading the bundled fallback puzzle: {e}", exc_info=True)
        raise RuntimeError("Failed to load the bundled fallback puzzle.") from e
    verify_solution(puzzle)
    return puzzle


# --- Generator ---

class PuzzleGenerator:
    """Asks an LLM for a themed 3x4 logic grid puzzle, falling back to the bundled one."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 temperature: Optional[float] = None, timeout: Optional[float] = None,
                 client: Optional[Any] = None):
        self.api_key = api_key if api_key is not None else config.OPENAI_API_KEY
        self.model = model or config.LOGIC_GRID_MODEL
        self.temperature = config.LOGIC_GRID_TEMPERATURE if temperature is None else temperature
        self.timeout = config.LOGIC_GRID_TIMEOUT if timeout is None else timeout
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        return self._client

    def _build_prompt(self, theme: str) -> str:
        prompt = f"Create a logic grid puzzle with a '{theme}' theme.\n\n"
        prompt += "DESIGN INSTRUCTIONS:\n"
        prompt += "You are also a UI designer. Include a 'theme' object with colors, a font and an emoji that match the puzzle's vibe.\n"
        prompt += "- If 'Noir': grayscale, serif, dark backgrounds.\n"
        prompt += "- If 'Sci-Fi': dark blue/black, neon green/cyan accents, mono font.\n"
        prompt += "- If 'Fantasy': parchment/gold colors, serif font.\n"
        prompt += "- If 'Cyberpunk': pink/blue neon, black background, sans font.\n\n"
        prompt += "LOGIC INSTRUCTIONS:\n"
        prompt += f"The puzzle MUST have exactly {NUM_CATEGORIES} categories.\n"
        prompt += f"Each category MUST have exactly {ITEMS_PER_CATEGORY} unique items.\n"
        prompt += f"Provide exactly {EXPECTED_CLUE_COUNT} clues.\n"
        prompt += f"The puzzle MUST be 100% solvable using ONLY these {EXPECTED_CLUE_COUNT} clues.\n\n"
        prompt += "--- Required Output Format ---\n"
        prompt += "Respond with ONLY a JSON object with these keys:\n"
        prompt += '- "title": a catchy mystery title\n'
        prompt += '- "story": a short backstory (max 2 sentences)\n'
        prompt += '- "theme": {"colors": {"background", "surface", "border", "text", "accent", "primary"} as hex strings, "font": "serif"|"sans"|"mono", "emoji": one emoji}\n'
        prompt += '- "categories": [{"id": str, "name": str, "items": [4 strings]}, ...]\n'
        prompt += '- "clues": [strings]\n'
        prompt += '- "solution": [{"item": str, "matches": [the items it is paired with in BOTH other categories]}, ...] covering every item\n'
        return prompt

    async def _request_payload(self, theme: str) -> Any:
        client = self._get_client()
        resp = await client.responses.create(
            model=self.model,
            input=self._build_prompt(theme),
            temperature=self.temperature,
            text={"format": {"type": "json_object"}},
        )
        return _extract_json(getattr(resp, "output_text", "") or "")

    async def generate_puzzle(self, theme: str = DEFAULT_THEME_PROMPT) -> PuzzleData:
        """Generates a puzzle for ``theme``. Never raises: failures return the fallback puzzle."""
        theme = (theme or "").strip() or DEFAULT_THEME_PROMPT
        if not self.is_configured:
            logger.warning("No OPENAI_API_KEY configured. Using the bundled fallback puzzle.")
            return load_fallback_puzzle()

        logger.info(f"Requesting puzzle generation (model={self.model}, theme='{theme}')")
        try:
            raw = await self._request_payload(theme)
            puzzle = parse_puzzle_payload(raw)
        except Exception as e:
            logger.error(f"Failed to generate puzzle for theme '{theme}': {e}", exc_info=True)
            return load_fallback_puzzle()

        verify_solution(puzzle)
        logger.info(f"Generated puzzle '{puzzle.title}' ({len(puzzle.clues)} clues, verified={puzzle.is_verified})")
        return puzzle
