"""
SupaStore data quality engine.

Declarative data quality rules evaluated against tabular row sources
(DataFrames, CSV/Parquet exports, SQL tables, JSON APIs).
"""

__version__ = '1.1.0'
