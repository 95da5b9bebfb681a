"""
sensitivity.py
--------------
Two-way sensitivity of sponsor returns to entry and exit multiples.

Entry EV/EBITDA (rows) vs Exit EV/EBITDA (cols) → IRR and MOIC

Each cell re-prices the entry (EV, equity value, fees, sponsor equity plug)
at the candidate entry multiple but REUSES the base-case final-year EBITDA,
debt and cash rather than re-running the projection.  Changing entry
leverage would change the debt schedule in a fully linked model; the grid
deliberately holds it fixed.

IRR is clamped to [-100%, +100%]; a cell whose exit equity is zero or
negative against positive sponsor equity reports -100%.  Cells whose MOIC
is not meaningful (sponsor equity <= 0) carry None and the loop carries on.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import pandas as pd

from lbo.model.assumptions import AssumptionSet, CompanySnapshot
from lbo.model.entry_valuation import build_entry_valuation
from lbo.model.exit_analysis import exit_equity_value
from lbo.model.numerics import annualized_return, clamp, positive_div
from lbo.model.projection import YearProjection

logger = logging.getLogger(__name__)


DEFAULT_MULTIPLES = (9.0, 10.0, 11.0, 12.0, 13.0, 14.0, 15.0)
BASE_CASE_TOLERANCE = 0.1
IRR_CLAMP = (-1.0, 1.0)


@dataclass(frozen=True)
class SensitivityCell:
    entry_multiple: float
    exit_multiple: float
    irr: Optional[float]
    moic: Optional[float]
    sponsor_equity: float
    exit_equity_value: float
    is_base_case: bool


def _is_base_case(entry_m: float, exit_m: float, a: AssumptionSet) -> bool:
    return (abs(entry_m - a.entry_multiple) < BASE_CASE_TOLERANCE
            and abs(exit_m - a.exit_multiple) < BASE_CASE_TOLERANCE)


def build_sensitivity_grid(
    snapshot: CompanySnapshot,
    assumptions: AssumptionSet,
    final_projection: YearProjection,
    entry_multiples: Sequence[float] = DEFAULT_MULTIPLES,
    exit_multiples: Sequence[float] = DEFAULT_MULTIPLES,
) -> tuple[SensitivityCell, ...]:
    """
    Returns one SensitivityCell per (entry, exit) pair, entry-major.
    ``final_projection`` is the base-case final year.
    """
    n = assumptions.holding_period
    final_ebitda = final_projection.ebitda
    final_debt   = final_projection.total_debt
    final_cash   = final_projection.ending_cash

    cells = []
    not_meaningful = 0
    for entry_m in entry_multiples:
        entry = build_entry_valuation(snapshot, assumptions, entry_multiple=entry_m)
        sponsor_equity = entry.sponsor_equity

        for exit_m in exit_multiples:
            exit_equity = exit_equity_value(final_ebitda, final_debt, final_cash, exit_m)
            moic = positive_div(exit_equity, sponsor_equity)
            if moic is not None and moic <= 0:
                # equity wiped out at exit
                irr = IRR_CLAMP[0]
            else:
                irr = clamp(annualized_return(moic, n), *IRR_CLAMP)
            if irr is None:
                not_meaningful += 1

            cells.append(SensitivityCell(
                entry_multiple=entry_m,
                exit_multiple=exit_m,
                irr=irr,
                moic=moic,
                sponsor_equity=sponsor_equity,
                exit_equity_value=exit_equity,
                is_base_case=_is_base_case(entry_m, exit_m, assumptions),
            ))

    if not_meaningful:
        logger.debug("sensitivity grid: %d of %d cells not meaningful",
                     not_meaningful, len(cells))
    return tuple(cells)


def sensitivity_tables(cells: Sequence[SensitivityCell]) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Returns (irr_table, moic_table).
    Rows = entry EV/EBITDA, Columns = exit EV/EBITDA.
    """
    irr_data  = {}
    moic_data = {}
    for c in cells:
        col = f"Exit {c.exit_multiple:.1f}x"
        row = f"{c.entry_multiple:.1f}x"
        irr_data.setdefault(col, {})[row]  = c.irr
        moic_data.setdefault(col, {})[row] = c.moic

    irr_df  = pd.DataFrame(irr_data, dtype=float)
    moic_df = pd.DataFrame(moic_data, dtype=float)
    irr_df.index.name  = "Entry Multiple"
    moic_df.index.name = "Entry Multiple"
    return irr_df, moic_df


def base_case_cell(cells: Sequence[SensitivityCell]) -> Optional[SensitivityCell]:
    for c in cells:
        if c.is_base_case:
            return c
    return None
