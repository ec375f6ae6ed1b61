"""Derived metrics computed from raw readings."""

DIFFERENCE_PRECISION = 2


def compute_difference(nav: float, price: float) -> float:
    """
    Compute NAV minus price rounded to cents.

    Args:
        nav: Net asset value.
        price: Market price.

    Returns:
        Rounded difference.
    """
    return round(nav - price, DIFFERENCE_PRECISION)
