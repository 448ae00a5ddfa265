"""
Base row source.

A row source turns an external dataset into passes of records (plain
dicts keyed by column name). Every call to ``records()`` starts a fresh
pass over the same snapshot, so rules that need the whole pass and rules
that stream can each get their own.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..quality.errors import SourceUnavailable
from ..quality.rules import is_null

Record = Dict[str, Any]


def normalize_value(value: Any) -> Any:
    """Convert pandas/numpy scalars to plain Python values, missing to None."""
    if is_null(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, np.generic):
        return value.item()
    return value


def frame_records(df: pd.DataFrame, columns: Sequence[str]) -> Iterator[Record]:
    """Yield one normalized record per DataFrame row."""
    columns = list(columns)
    for row in df[columns].itertuples(index=False, name=None):
        yield {c: normalize_value(v) for c, v in zip(columns, row)}


class RowSource(ABC):
    """Abstract base class for row sources.

    Subclasses implement ``fields()`` and ``records()`` for a specific
    storage engine. Both raise ``SourceUnavailable`` when the dataset
    cannot be opened.

    Usage::

        source = CsvSource("exports/")
        for record in source.records("supastore_db", columns=["order_id"]):
            ...
    """

    source_name = 'source'

    def __init__(self):
        self._log = logging.getLogger(f"source.{self.source_name}")

    # --- Abstract interface ---------------------------------------------------

    @abstractmethod
    def fields(self, table: str) -> List[str]:
        """Column names of ``table``, in storage order."""

    @abstractmethod
    def records(self, table: str, columns: Optional[Sequence[str]] = None) -> Iterator[Record]:
        """Start a fresh pass over ``table``, optionally projected to ``columns``."""

    # --- Helpers --------------------------------------------------------------

    def _project(self, table: str, available: Sequence[str], columns: Optional[Sequence[str]]) -> List[str]:
        """Resolve a projection against the available columns."""
        if columns is None:
            return list(available)
        unknown = [c for c in columns if c not in available]
        if unknown:
            raise SourceUnavailable(table, f"unknown columns: {unknown}")
        # keep caller order, drop repeats
        return list(dict.fromkeys(columns))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
