"""
File-backed sources: CSV and Parquet exports of the ETL output.

Files are re-read on every pass. CSV is streamed in chunks with pandas;
Parquet is streamed in record batches with pyarrow.
"""

import os
from typing import Dict, Iterator, List, Optional, Sequence, Union

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from ..quality.errors import SourceUnavailable
from .base import Record, RowSource, frame_records

PathSpec = Union[str, os.PathLike, Dict[str, Union[str, os.PathLike]]]


class _FileSource(RowSource):
    """Resolve table names to files.

    Args:
        paths: Either a mapping of table name to file path, or a directory
               holding ``<table><extension>`` files.
        chunksize: Rows per chunk while streaming.
    """

    extension = ''

    def __init__(self, paths: PathSpec, chunksize: int = 10_000):
        super().__init__()
        self._paths = paths
        self.chunksize = chunksize

    def path_for(self, table: str) -> str:
        if isinstance(self._paths, dict):
            if table not in self._paths:
                raise SourceUnavailable(table, 'no file configured')
            path = os.fspath(self._paths[table])
        else:
            path = os.path.join(os.fspath(self._paths), f"{table}{self.extension}")
        if not os.path.isfile(path):
            raise SourceUnavailable(table, f"file not found: {path}")
        return path

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._paths!r})"


class CsvSource(_FileSource):
    """CSV files read with pandas.

    Args:
        paths: Table-to-file mapping or directory of ``<table>.csv`` files.
        parse_dates: Columns to parse as datetimes.
        chunksize: Rows per chunk while streaming.
    """

    source_name = 'csv'
    extension = '.csv'

    def __init__(
        self,
        paths: PathSpec,
        parse_dates: Optional[Sequence[str]] = None,
        chunksize: int = 10_000,
    ):
        super().__init__(paths, chunksize)
        self.parse_dates = list(parse_dates or [])

    def fields(self, table: str) -> List[str]:
        path = self.path_for(table)
        try:
            header = pd.read_csv(path, nrows=0)
        except (OSError, ValueError) as exc:
            raise SourceUnavailable(table, str(exc)) from exc
        return [str(c) for c in header.columns]

    def records(self, table: str, columns: Optional[Sequence[str]] = None) -> Iterator[Record]:
        path = self.path_for(table)
        cols = self._project(table, self.fields(table), columns)
        dates = [c for c in self.parse_dates if c in cols]
        self._log.debug("Reading %s (%d columns)", path, len(cols))
        return self._stream(table, path, cols, dates)

    def _stream(self, table: str, path: str, cols: List[str], dates: List[str]) -> Iterator[Record]:
        try:
            with pd.read_csv(
                path,
                usecols=cols,
                parse_dates=dates or False,
                chunksize=self.chunksize,
            ) as reader:
                for chunk in reader:
                    yield from frame_records(chunk, cols)
        except (OSError, pd.errors.ParserError) as exc:
            raise SourceUnavailable(table, str(exc)) from exc


class ParquetSource(_FileSource):
    """Parquet files read with pyarrow."""

    source_name = 'parquet'
    extension = '.parquet'

    def _open(self, table: str) -> pq.ParquetFile:
        path = self.path_for(table)
        try:
            return pq.ParquetFile(path)
        except (OSError, pa.ArrowException) as exc:
            raise SourceUnavailable(table, str(exc)) from exc

    def fields(self, table: str) -> List[str]:
        return list(self._open(table).schema_arrow.names)

    def records(self, table: str, columns: Optional[Sequence[str]] = None) -> Iterator[Record]:
        pf = self._open(table)
        cols = self._project(table, pf.schema_arrow.names, columns)
        return self._stream(pf, cols)

    def _stream(self, pf: pq.ParquetFile, cols: List[str]) -> Iterator[Record]:
        for batch in pf.iter_batches(batch_size=self.chunksize, columns=cols):
            yield from frame_records(batch.to_pandas(), cols)
