"""
American roulette layout: wheel order, colours, payouts and the numbers
covered by each kind of bet.

Numbers are string labels so that ``"0"`` and ``"00"`` stay distinct.
"""

from enum import Enum

# Pockets in wheel order, starting from 0
WHEEL_ORDER: tuple[str, ...] = (
    "0", "28", "9", "26", "30", "11", "7", "20", "32", "17", "5", "22", "34", "15",
    "3", "24", "36", "13", "1", "00", "27", "10", "25", "29", "12", "8", "19", "31",
    "18", "6", "21", "33", "16", "4", "23", "35", "14", "2",
)

ZEROES = frozenset({"0", "00"})
ALL_NUMBERS = frozenset(WHEEL_ORDER)

RED_NUMBERS = frozenset(
    str(n) for n in (1, 3, 5, 7, 9, 12, 14, 16, 18, 19, 21, 23, 25, 27, 30, 32, 34, 36)
)
BLACK_NUMBERS = frozenset(str(n) for n in range(1, 37)) - RED_NUMBERS


class BetType(Enum):
    """Roulette bet kinds."""

    STRAIGHT = "straight"
    SPLIT = "split"
    STREET = "street"
    CORNER = "corner"
    LINE = "line"
    COLUMN = "column"
    DOZEN = "dozen"
    COLOR = "color"
    ODD_EVEN = "oddEven"
    HIGH_LOW = "highLow"
    BASKET = "basket"
    FIRST_FIVE = "firstFive"


class Color(Enum):
    RED = "red"
    BLACK = "black"
    GREEN = "green"


# Winnings per unit staked ("35 to 1"); the stake is returned on top
PAYOUTS: dict[BetType, int] = {
    BetType.STRAIGHT: 35,
    BetType.SPLIT: 17,
    BetType.STREET: 11,
    BetType.CORNER: 8,
    BetType.LINE: 5,
    BetType.COLUMN: 2,
    BetType.DOZEN: 2,
    BetType.COLOR: 1,
    BetType.ODD_EVEN: 1,
    BetType.HIGH_LOW: 1,
    BetType.BASKET: 11,
    BetType.FIRST_FIVE: 6,
}


def number_color(number: str) -> Color:
    if number in ZEROES:
        return Color.GREEN
    if number in RED_NUMBERS:
        return Color.RED
    return Color.BLACK


def _check_range(value: int, low: int, high: int, what: str) -> None:
    if not low <= value <= high:
        raise ValueError(f"{what} must be between {low} and {high}, got {value}")


def _labels(*numbers: int) -> frozenset[str]:
    return frozenset(str(n) for n in numbers)


def straight_numbers(number: str) -> frozenset[str]:
    if number not in ALL_NUMBERS:
        raise ValueError(f"Unknown roulette number: {number!r}")
    return frozenset({number})


def split_numbers(first: int, second: int) -> frozenset[str]:
    """Two numbers next to each other on the layout, across or down."""
    low, high = sorted((first, second))
    _check_range(low, 1, 36, "split number")
    _check_range(high, 1, 36, "split number")
    across = high - low == 1 and low % 3 != 0
    down = high - low == 3
    if not (across or down):
        raise ValueError(f"{first} and {second} are not adjacent")
    return _labels(low, high)


def street_numbers(street: int) -> frozenset[str]:
    """Three numbers of one layout row (street 1 is 1-3)."""
    _check_range(street, 1, 12, "street")
    top = street * 3
    return _labels(top - 2, top - 1, top)


def corner_numbers(top_left: int) -> frozenset[str]:
    """Four numbers meeting at a corner, named by the smallest."""
    _check_range(top_left, 1, 32, "corner")
    if top_left % 3 == 0:
        raise ValueError(f"No corner starts at {top_left}")
    return _labels(top_left, top_left + 1, top_left + 3, top_left + 4)


def line_numbers(first_street: int) -> frozenset[str]:
    """Two adjacent streets (six numbers)."""
    _check_range(first_street, 1, 11, "line")
    return street_numbers(first_street) | street_numbers(first_street + 1)


def column_numbers(column: int) -> frozenset[str]:
    """Column 1 holds 1, 4, ... 34; column 3 holds 3, 6, ... 36."""
    _check_range(column, 1, 3, "column")
    return _labels(*range(column, 37, 3))


def dozen_numbers(dozen: int) -> frozenset[str]:
    _check_range(dozen, 1, 3, "dozen")
    start = (dozen - 1) * 12 + 1
    return _labels(*range(start, start + 12))


def color_numbers(color: Color) -> frozenset[str]:
    if color == Color.RED:
        return RED_NUMBERS
    if color == Color.BLACK:
        return BLACK_NUMBERS
    raise ValueError("Only red or black can be backed")


def odd_even_numbers(odd: bool) -> frozenset[str]:
    return _labels(*range(1 if odd else 2, 37, 2))


def high_low_numbers(high: bool) -> frozenset[str]:
    return _labels(*(range(19, 37) if high else range(1, 19)))


def basket_numbers() -> frozenset[str]:
    return frozenset({"0", "00", "2"})


def first_five_numbers() -> frozenset[str]:
    return frozenset({"0", "00", "1", "2", "3"})
