"""Resource cost helpers and the unbounded sentinel."""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Final, Union

UNBOUNDED: Final[float] = math.inf
UNBOUNDED_LABEL: Final[str] = "unbounded"

Amount = Union[int, float, Fraction]


def is_unbounded(value: Amount) -> bool:
    """Return True when ``value`` is the unbounded sentinel."""

    return isinstance(value, float) and math.isinf(value) and value > 0


def attempts_cost(attempts: Amount, cost_per_attempt: float) -> Amount:
    """Return the resource cost of ``attempts`` attempts.

    Parameters
    ----------
    attempts:
        Attempt count, or ``UNBOUNDED``.
    cost_per_attempt:
        Resource charged per stage or final attempt.

    Returns
    -------
    int, float or Fraction
        ``attempts * cost_per_attempt``; unbounded attempts stay unbounded even
        when attempts are free. A finite attempt count whose cost does not fit
        in a float is returned exactly, as an int or a ``Fraction``.
    """

    if is_unbounded(attempts):
        return UNBOUNDED
    try:
        cost = attempts * cost_per_attempt
    except OverflowError:
        cost = UNBOUNDED
    if is_unbounded(cost):
        exact = Fraction(cost_per_attempt) * attempts
        return exact.numerator if exact.denominator == 1 else exact
    return cost


def serialize_amount(value: Amount) -> Union[int, float, str]:
    """Return a JSON-safe representation of an attempt or cost amount.

    Exact fractional costs are rendered as ``"numerator/denominator"`` strings.
    """

    if is_unbounded(value):
        return UNBOUNDED_LABEL
    if isinstance(value, Fraction):
        return str(value)
    return value
