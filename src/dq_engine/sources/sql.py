"""
SQL database source.

Reads tables through SQLAlchemy, so the same checks run against the
MySQL warehouse in production and SQLite files in tests. Rows are
streamed in chunks with ``pandas.read_sql_query``.
"""

import re
from typing import Iterator, List, Optional, Sequence, Union

import pandas as pd
from sqlalchemy import column, create_engine, inspect, select, table as sql_table
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..quality.errors import SourceUnavailable
from .base import Record, RowSource, frame_records

_IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


class SqlSource(RowSource):
    """Tables in a relational database.

    Args:
        url: SQLAlchemy URL (e.g. ``mysql+pymysql://user:pw@host/db``)
             or an existing Engine.
        schema: Optional schema/database name qualifying every table.
        parse_dates: Columns to parse as datetimes.
        chunksize: Rows fetched per round trip.
    """

    source_name = 'sql'

    def __init__(
        self,
        url: Union[str, Engine],
        schema: Optional[str] = None,
        parse_dates: Optional[Sequence[str]] = None,
        chunksize: int = 10_000,
    ):
        super().__init__()
        if isinstance(url, str):
            try:
                url = create_engine(url)
            except (SQLAlchemyError, ImportError) as exc:
                raise SourceUnavailable(schema or '<database>', f"cannot create engine: {exc}") from exc
        self._engine = url
        self.schema = schema
        self.parse_dates = list(parse_dates or [])
        self.chunksize = chunksize

    @staticmethod
    def _check_identifier(table: str, name: str) -> None:
        if not _IDENTIFIER.match(name):
            raise SourceUnavailable(table, f"invalid identifier: {name!r}")

    def fields(self, table: str) -> List[str]:
        self._check_identifier(table, table)
        try:
            inspector = inspect(self._engine)
            if not inspector.has_table(table, schema=self.schema):
                raise SourceUnavailable(table, 'no such table')
            return [c['name'] for c in inspector.get_columns(table, schema=self.schema)]
        except SQLAlchemyError as exc:
            raise SourceUnavailable(table, str(exc)) from exc

    def records(self, table: str, columns: Optional[Sequence[str]] = None) -> Iterator[Record]:
        cols = self._project(table, self.fields(table), columns)
        for name in cols:
            self._check_identifier(table, name)
        stmt = select(*[column(c) for c in cols]).select_from(
            sql_table(table, schema=self.schema)
        )
        dates = [c for c in self.parse_dates if c in cols]
        return self._stream(table, stmt, cols, dates)

    def _stream(self, table: str, stmt, cols: List[str], dates: List[str]) -> Iterator[Record]:
        try:
            with self._engine.connect() as conn:
                chunks = pd.read_sql_query(
                    stmt,
                    conn,
                    parse_dates=dates or None,
                    chunksize=self.chunksize,
                )
                for chunk in chunks:
                    yield from frame_records(chunk, cols)
        except SQLAlchemyError as exc:
            raise SourceUnavailable(table, str(exc)) from exc

    def __repr__(self) -> str:
        return f"SqlSource({self._engine.url!r})"
