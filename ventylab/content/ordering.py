"""
Section order validation.

A lesson's sections must carry the orders 1..N exactly once each, where N is
the number of sections. All defects are collected in one pass.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# Longer gaps are reported as one range instead of one error per order.
MISSING_RUN_LIMIT = 10


@dataclass(frozen=True)
class OrderValidation:
    """Result of validating a section list."""

    valid: bool
    errors: list[str] = field(default_factory=list)


def _format_order(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _missing_runs(seen: set[int | float], max_order: int | float) -> list[tuple[int, int]]:
    """Contiguous runs of integers in 1..max_order absent from seen, as (first, last)."""
    present = sorted({int(order) for order in seen if order == int(order) and 1 <= order <= max_order})
    runs = []
    previous = 0
    for order in [*present, int(max_order) + 1]:
        if order - previous > 1:
            runs.append((previous + 1, order - 1))
        previous = order
    return runs


def validate_sections_order(sections: Any) -> OrderValidation:
    """
    Check that sections use a gapless, duplicate-free 1..N ordering.

    Args:
        sections: The lesson's ``sections`` value, as parsed from JSON.

    Returns:
        OrderValidation with every error found.
    """
    if not isinstance(sections, list) or not sections:
        return OrderValidation(valid=False, errors=["Sections array is empty or invalid"])

    errors: list[str] = []
    orders: list[int | float] = []

    for index, section in enumerate(sections):
        if not isinstance(section, Mapping):
            errors.append(f"Section at index {index} is not a valid object")
            continue
        order = section.get("order")
        # bool is an int subclass, but true/false are not orders
        if isinstance(order, bool) or not isinstance(order, (int, float)) or (
            isinstance(order, float) and not math.isfinite(order)
        ):
            label = section.get("id") or index
            errors.append(f'Section "{label}" has invalid order: {order} (must be a number)')
            continue
        orders.append(order)

    seen: set[int | float] = set()
    for order in orders:
        if order in seen:
            errors.append(f"Duplicate order {_format_order(order)} found in sections")
        seen.add(order)

    if orders:
        ordered = sorted(orders)
        min_order, max_order = ordered[0], ordered[-1]
        found = ", ".join(_format_order(order) for order in ordered)

        if min_order != 1:
            errors.append(
                f"Sections order must start from 1, but found minimum order: {_format_order(min_order)}"
            )

        for first, last in _missing_runs(seen, max_order):
            if last - first < MISSING_RUN_LIMIT:
                for expected in range(first, last + 1):
                    errors.append(f"Missing order {expected} in sections (found orders: {found})")
            else:
                errors.append(f"Missing orders {first}..{last} in sections (found orders: {found})")

        if max_order > len(sections):
            errors.append(
                f"Maximum order {_format_order(max_order)} exceeds number of sections {len(sections)}"
            )

    return OrderValidation(valid=not errors, errors=errors)
