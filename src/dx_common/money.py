"""Integer arithmetic for ruble amounts.

All prices, bids and commissions use int (kopecks). No float, no Decimal.
"""


def kopecks_to_display(kopecks: int) -> str:
    """Convert kopecks to display string: 150000 -> '1 500 ₽', 150050 -> '1 500.50 ₽'."""
    sign = "-" if kopecks < 0 else ""
    rubles, rest = divmod(abs(kopecks), 100)
    whole = f"{rubles:,}".replace(",", " ")
    if rest:
        return f"{sign}{whole}.{rest:02d} ₽"
    return f"{sign}{whole} ₽"


def calculate_commission(amount: int, commission_bps: int) -> int:
    """Calculate commission with ceiling division (platform never under-collects).

    commission = ceil(amount * commission_bps / 10000)
    Using integer ceiling: (a + b - 1) // b
    """
    if amount == 0 or commission_bps == 0:
        return 0
    return (amount * commission_bps + 9999) // 10000
