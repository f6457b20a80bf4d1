"""Canonical, order-independent keys for grid pairs.

A key looks like ``"c0i2|c1i3"``: one ``c{category}i{item}`` part per
coordinate, sorted so both argument orders give the same string.
"""
from typing import Tuple

SEPARATOR = "|"

PairCoordinates = Tuple[int, int, int, int]


def _part(category: int, item: int) -> str:
    return f"c{category}i{item}"


def encode(c1: int, i1: int, c2: int, i2: int) -> str:
    """Builds the key for the pair (c1, i1)-(c2, i2)."""
    part1 = _part(c1, i1)
    part2 = _part(c2, i2)
    if part1 < part2:
        return f"{part1}{SEPARATOR}{part2}"
    return f"{part2}{SEPARATOR}{part1}"


def _parse_part(part: str) -> Tuple[int, int]:
    category_str, item_str = part[1:].split("i", 1)
    return int(category_str), int(item_str)


def decode(key: str) -> PairCoordinates:
    """Returns (c1, i1, c2, i2) in the key's canonical order."""
    part1, part2 = key.split(SEPARATOR)
    c1, i1 = _parse_part(part1)
    c2, i2 = _parse_part(part2)
    return c1, i1, c2, i2
