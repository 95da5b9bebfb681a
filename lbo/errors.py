"""
errors.py
---------
Exceptions raised by the LBO engine.

Only structurally invalid input is fatal.  Arithmetic degeneracies
(zero sponsor equity, zero interest, zero shares) are reported as
``None`` on the result records and never raised.
"""


class LBOError(Exception):
    """Base class for all engine errors."""


class InvalidAssumptionsError(LBOError, ValueError):
    """Assumption set cannot drive a projection (e.g. holding period < 1)."""


class InvalidSnapshotError(LBOError, ValueError):
    """Statement records cannot be turned into a company snapshot."""
