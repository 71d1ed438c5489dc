# storefront/core/cart_rules.py
"""
Cart line rules.

A cart's lines are a mapping of product id -> quantity, so a product can
never appear twice. Every function returns a new mapping and leaves its
input untouched.
"""

from collections.abc import Hashable, Mapping

from storefront.core.pricing import check_quantity

CartLines = Mapping[Hashable, int]


def validate_quantity(quantity) -> int:
    """Reject anything that is not an integer >= 1. No clamping."""
    return check_quantity(quantity)


def add_line(lines: CartLines, product_id: Hashable, quantity: int) -> dict:
    """
    Add `quantity` units of a product.

    An existing line accumulates (existing + quantity); otherwise a new line
    is appended.
    """
    qty = validate_quantity(quantity)
    updated = dict(lines)
    updated[product_id] = updated.get(product_id, 0) + qty
    return updated


def set_line_quantity(lines: CartLines, product_id: Hashable, quantity: int) -> dict:
    """Replace the quantity of an existing line."""
    qty = validate_quantity(quantity)
    if product_id not in lines:
        raise KeyError(product_id)
    updated = dict(lines)
    updated[product_id] = qty
    return updated


def remove_line(lines: CartLines, product_id: Hashable) -> dict:
    if product_id not in lines:
        raise KeyError(product_id)
    return {pid: qty for pid, qty in lines.items() if pid != product_id}


def clear_lines(lines: CartLines) -> dict:
    return {}


def merge_lines(target: CartLines, source: CartLines) -> dict:
    """Fold every line of `source` into `target` with add semantics."""
    merged = dict(target)
    for product_id, quantity in source.items():
        merged = add_line(merged, product_id, quantity)
    return merged
