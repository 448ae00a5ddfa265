"""Row sources: adapters that turn external datasets into record passes."""

from .base import RowSource, frame_records, normalize_value
from .files import CsvSource, ParquetSource
from .frame import DataFrameSource
from .http import HttpJsonSource
from .sql import SqlSource

__all__ = [
    'RowSource',
    'DataFrameSource',
    'CsvSource',
    'ParquetSource',
    'SqlSource',
    'HttpJsonSource',
    'frame_records',
    'normalize_value',
]
