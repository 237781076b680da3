# sponsoring/utils/rounding.py
"""
Rounding for reported percentages and amounts.

Python's round() sends halves to the even neighbour (round(2.5) == 2); every
sponsoring report rounds halves up instead, so 1 of 8 is 13% and a 2.5 average
deal is 3.
"""

import math
from typing import Union


def round_half_up(value: float, ndigits: int = 0) -> Union[int, float]:
    """Round a non-negative number, halves up. Returns an int when ndigits is 0."""
    factor = 10 ** ndigits
    rounded = math.floor(value * factor + 0.5)
    return rounded / factor if ndigits else rounded
