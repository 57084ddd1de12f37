"""Human readable vote counts."""

from collections.abc import Mapping
from decimal import Decimal, localcontext

from voting.domain.value import RoundingMode


def format_count(
    number: int,
    *,
    divisors: Mapping[int, str],
    precision: int = 1,
    mode: RoundingMode = RoundingMode.HALF_UP,
) -> str:
    """Format a count with a magnitude suffix, e.g. ``1500 -> "1.5k"``.

    The largest divisor that is less than or equal to ``abs(number)`` is
    used. When no divisor qualifies, or the qualifying divisor is 1, the
    number is returned as a plain integer string.

    Args:
        number: Count to format
        divisors: Mapping of divisor to suffix, in any key order
        precision: Number of decimal digits rendered
        mode: Rounding applied to ``number / divisor``

    Returns:
        Formatted count

    Raises:
        ValueError: If precision is negative or a divisor is not positive
    """
    if precision < 0:
        raise ValueError("Precision must not be negative")
    if any(candidate <= 0 for candidate in divisors):
        raise ValueError("Divisors must be positive integers")

    magnitude = abs(number)
    divisor = 1
    for candidate in sorted(divisors):
        if candidate > magnitude:
            break
        divisor = candidate

    if divisor == 1:
        return str(number)

    # Decimal arithmetic so ties round as requested. The context holds the
    # integer digits, the requested decimals and enough guard digits that a
    # rounded quotient never lands on a tie the exact quotient misses.
    quantum = Decimal(1).scaleb(-precision)
    with localcontext() as ctx:
        ctx.prec = (
            len(str(magnitude // divisor)) + precision + len(str(divisor)) + 2
        )
        value = (Decimal(number) / Decimal(divisor)).quantize(
            quantum, rounding=mode.decimal_rounding
        )
    return f"{value:,.{precision}f}{divisors[divisor]}"
