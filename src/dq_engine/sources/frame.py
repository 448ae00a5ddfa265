"""
In-memory DataFrame source.
"""

from typing import Dict, Iterator, List, Optional, Sequence

import pandas as pd

from ..quality.errors import SourceUnavailable
from .base import Record, RowSource, frame_records


class DataFrameSource(RowSource):
    """Serve pandas DataFrames as tables.

    Each DataFrame is copied on construction, so later changes to the
    caller's frame do not leak into the snapshot.

    Usage::

        source = DataFrameSource({"supastore_db": df})
        report = Evaluator().run(registry, source, "supastore_db")
    """

    source_name = 'dataframe'

    def __init__(self, tables: Dict[str, pd.DataFrame]):
        super().__init__()
        self._tables = {name: df.copy() for name, df in tables.items()}

    def _frame(self, table: str) -> pd.DataFrame:
        try:
            return self._tables[table]
        except KeyError:
            raise SourceUnavailable(table, 'no such table') from None

    def fields(self, table: str) -> List[str]:
        return [str(c) for c in self._frame(table).columns]

    def records(self, table: str, columns: Optional[Sequence[str]] = None) -> Iterator[Record]:
        df = self._frame(table)
        cols = self._project(table, self.fields(table), columns)
        return frame_records(df, cols)

    def __repr__(self) -> str:
        return f"DataFrameSource(tables={sorted(self._tables)!r})"
