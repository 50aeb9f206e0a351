"""Rounding helpers matching spreadsheet-style half-up rounding"""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity (2.5 -> 3, -2.5 -> -2)"""
    return int(math.floor(value + 0.5))


def round_to_tenth(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10
