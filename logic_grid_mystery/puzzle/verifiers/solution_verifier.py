import logging
from typing import Dict, List, Tuple, Optional
from constraint import Problem, AllDifferentConstraint, FunctionConstraint

from ..common import ITEMS_PER_CATEGORY
from ..puzzle_types import Category, normalize_name

logger = logging.getLogger(__name__)


class _SolutionConsistencyVerifier:
    """
    (Internal Use) Checks that a generated solution mapping describes exactly one
    consistent matching across three categories, using a CSP solver (python-constraint).

    Rows are the items of the first category; each row gets one variable per
    other category whose domain is that category's item indices. Every listed
    match becomes a constraint. Clue sufficiency is not examined.
    """
    def __init__(self, categories: List[Category], solution: Dict[str, List[str]]):
        if len(categories) < 2:
            raise ValueError("At least two categories are required for verification.")
        self.categories = list(categories)
        self.solution = solution
        self.problem = Problem()
        self.unresolved: List[str] = []
        self._location: Dict[str, Tuple[int, int]] = {}
        for cat_index, category in enumerate(self.categories):
            for item_index, item in enumerate(category.items):
                self._location[normalize_name(item)] = (cat_index, item_index)

        # Variable name format: f"r{row}__c{category}"
        for s_cat in range(1, len(self.categories)):
            column = [self._var(row, s_cat) for row in range(ITEMS_PER_CATEGORY)]
            for var_name in column:
                self.problem.addVariable(var_name, list(range(ITEMS_PER_CATEGORY)))
            self.problem.addConstraint(AllDifferentConstraint(), column)

        logger.debug(f"CSP SolutionVerifier initialized: {ITEMS_PER_CATEGORY}x{len(self.categories)} grid.")

    @staticmethod
    def _var(row: int, category: int) -> str:
        return f"r{row}__c{category}"

    def _locate(self, name: str) -> Optional[Tuple[int, int]]:
        location = self._location.get(normalize_name(name))
        if location is None:
            self.unresolved.append(name)
        return location

    def _add_link(self, a: Tuple[int, int], b: Tuple[int, int]) -> None:
        """Constrains the CSP so that items ``a`` and ``b`` end up paired."""
        if a[0] > b[0]:
            a, b = b, a
        (cat_a, idx_a), (cat_b, idx_b) = a, b
        if cat_a == cat_b:
            logger.warning(f"Solution pairs two items of the same category ({cat_a}); ignoring link.")
            return
        if cat_a == 0:
            self.problem.addConstraint(lambda val, expected=idx_b: val == expected, [self._var(idx_a, cat_b)])
            return

        # Both sides are secondary: whichever row holds idx_a must also hold idx_b.
        def linked(val_a, val_b, target_a=idx_a, target_b=idx_b):
            return (val_a == target_a) == (val_b == target_b)

        for row in range(ITEMS_PER_CATEGORY):
            self.problem.addConstraint(FunctionConstraint(linked), [self._var(row, cat_a), self._var(row, cat_b)])

    def verify(self) -> Tuple[bool, Optional[Dict[str, Dict[str, str]]]]:
        """
        Returns:
            Tuple[bool, Optional[Dict]]:
                - bool: True if exactly one matching satisfies every listed link.
                - Optional[Dict]: {first-category item: {category name: item}} when unique.
        """
        for item, matches in self.solution.items():
            origin = self._locate(item)
            for match in matches or []:
                target = self._locate(match)
                if origin is not None and target is not None:
                    self._add_link(origin, target)

        if self.unresolved:
            logger.warning(f"Solution references unknown item(s): {sorted(set(self.unresolved))}")
            return False, None

        try:
            solutions = self.problem.getSolutions()
        except Exception as e:
            logger.error(f"CSP solver encountered an error: {e}", exc_info=True)
            return False, None

        if len(solutions) != 1:
            logger.info(f"Solution verification failed: {len(solutions)} matchings satisfy the solution links.")
            return False, None

        primary = self.categories[0]
        formatted: Dict[str, Dict[str, str]] = {item: {} for item in primary.items}
        for var_name, value in solutions[0].items():
            row_str, cat_str = var_name.split("__", 1)
            row, s_cat = int(row_str[1:]), int(cat_str[1:])
            category = self.categories[s_cat]
            formatted[primary.items[row]][category.name] = category.items[value]
        logger.debug(f"Solution verified: {formatted}")
        return True, formatted
