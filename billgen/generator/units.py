"""Randomized unit distribution across bills."""

from __future__ import annotations

import random

from billgen.generator.errors import ValidationError


def check_distribution(total: int, count: int, min_units: int, max_units: int) -> None:
    """Validate distribution inputs, failing fast on the first violation.

    Raises:
        ValidationError: With a message naming the violated bound
    """
    if min_units <= 0:
        raise ValidationError("Minimum units per bill must be greater than 0")
    if max_units <= 0:
        raise ValidationError("Maximum units per bill must be greater than 0")
    if min_units > max_units:
        raise ValidationError(
            f"Minimum units ({min_units}) cannot be greater than maximum units ({max_units})"
        )
    if total <= 0:
        raise ValidationError("Total units to sell must be greater than 0")
    if count <= 0:
        raise ValidationError("Number of bills must be greater than 0")

    min_possible = count * min_units
    max_possible = count * max_units
    if total < min_possible:
        raise ValidationError(
            f"Cannot distribute {total} units across {count} bills with minimum {min_units} units each. "
            f"Minimum possible total: {min_possible} units. "
            "Either reduce the minimum units per bill or increase the total units to sell."
        )
    if total > max_possible:
        raise ValidationError(
            f"Cannot distribute {total} units across {count} bills with maximum {max_units} units each. "
            f"Maximum possible total: {max_possible} units. "
            "Either increase the maximum units per bill or reduce the total units to sell."
        )


def distribute_units(
    total: int,
    count: int,
    min_units: int,
    max_units: int,
    rng: random.Random | None = None,
) -> list[int]:
    """Split ``total`` units into ``count`` slots bounded by [min_units, max_units].

    Every slot starts at ``min_units``; the remainder is handed out in
    repeated sweeps, each slot taking a uniform random share of what it can
    still absorb. The result is shuffled so slot position does not correlate
    with allocation order.

    Only the aggregate invariants are guaranteed: the slots sum to ``total``
    and each lies within the bounds. Pass a seeded ``random.Random`` to make
    the output reproducible.

    Raises:
        ValidationError: If the inputs make the distribution impossible
    """
    check_distribution(total, count, min_units, max_units)
    rng = rng or random.Random()

    units = [min_units] * count
    remaining = total - count * min_units

    while remaining > 0:
        for index in range(count):
            if remaining <= 0:
                break
            capacity = min(remaining, max_units - units[index])
            if capacity > 0:
                add = rng.randint(0, capacity)
                units[index] += add
                remaining -= add

    rng.shuffle(units)
    return units
