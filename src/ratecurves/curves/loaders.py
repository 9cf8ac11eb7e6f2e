"""
Quote loading from CSV files.

Expected columns: instrument_type, tenor, quote; optional columns
(day_count, start_tenor, pay_freq, float_tenor, month, year, frequency,
fixing_days, convexity_adjustment) are passed through when present.
Blank cells are dropped so each record only carries its own fields.
"""

from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from ..conventions import DayCount
from ..errors import InvalidInstrumentError
from ..settings import BootstrapConfig
from .bootstrap import PiecewiseYieldCurve, bootstrap_from_quotes

REQUIRED_COLUMNS = ("instrument_type", "quote")


def load_quotes_csv(path: Union[str, Path]) -> List[Dict]:
    """
    Read quote records from a CSV file.

    Args:
        path: CSV file path

    Returns:
        List of dicts in the format bootstrap_from_quotes accepts

    Raises:
        InvalidInstrumentError: A required column is missing
    """
    # tenors like "1M" and month numbers are parsed by build_helper
    df = pd.read_csv(path, dtype=str, comment="#", skipinitialspace=True)
    df.columns = [c.strip().lower() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise InvalidInstrumentError(f"Quote file {path} missing columns: {missing}")

    records = []
    for i, row in enumerate(df.to_dict(orient="records")):
        record = {k: v.strip() for k, v in row.items() if not pd.isna(v)}
        if "quote" not in record:
            raise InvalidInstrumentError(f"Quote file {path} row {i} has no quote")
        record["quote"] = float(record["quote"])
        records.append(record)
    return records


def bootstrap_from_csv(
    reference_date: date,
    path: Union[str, Path],
    day_count: DayCount = DayCount.ACT_365,
    traits: str = "discount",
    interpolation: str = "log_linear",
    config: Optional[BootstrapConfig] = None
) -> PiecewiseYieldCurve:
    """Load quotes from CSV and bootstrap a curve."""
    return bootstrap_from_quotes(
        reference_date, load_quotes_csv(path), day_count, traits, interpolation, config
    )


__all__ = [
    "load_quotes_csv",
    "bootstrap_from_csv",
]
