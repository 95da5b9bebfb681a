"""
numerics.py
-----------
Helpers for "not meaningful" arithmetic.

Every derived ratio in the model is an ``Optional[float]``: ``None``
means the figure is not meaningful (division by zero, no real root),
so a degenerate year or sensitivity cell never aborts the rest of the run.
"""

from typing import Optional


def safe_div(num: float, den: float) -> Optional[float]:
    """num / den, or None when den is zero."""
    if den == 0:
        return None
    return num / den


def positive_div(num: float, den: float) -> Optional[float]:
    """num / den, or None unless den is strictly positive."""
    if den <= 0:
        return None
    return num / den


def annualized_return(moic: Optional[float], years: int) -> Optional[float]:
    """
    Closed-form annual return implied by a multiple over ``years``:
    moic ** (1 / years) - 1.  Negative multiples have no real root.
    """
    if moic is None or moic < 0 or years < 1:
        return None
    return moic ** (1.0 / years) - 1.0


def clamp(val: Optional[float], lo: float, hi: float) -> Optional[float]:
    if val is None:
        return None
    return max(lo, min(hi, val))
