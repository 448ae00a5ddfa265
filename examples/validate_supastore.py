#!/usr/bin/env python3
"""
Example: Validate a SupaStore orders extract in memory.

Builds a small orders table with the usual post-load problems (missing
keys, duplicated order lines, padded text, shipping before ordering,
zero quantities), then runs the built-in SupaStore checks against it.

Usage:
    python examples/validate_supastore.py
"""

import sys
from datetime import date
from pathlib import Path

import pandas as pd

# Allow imports from src/
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from dq_engine.quality import Evaluator, supastore_registry
from dq_engine.quality.suites import KEY_COLUMNS, SUPASTORE_TABLE
from dq_engine.sources import DataFrameSource


def build_orders() -> pd.DataFrame:
    """Ten order lines, four of them with a problem."""
    return pd.DataFrame({
        'order_id': ['CA-1001', 'CA-1002', 'CA-1002', 'CA-1003', None,
                     'CA-1005', 'CA-1006', 'CA-1007', 'CA-1008', 'CA-1009'],
        'customer_id': ['C-01', 'C-02', 'C-02', 'C-03', 'C-04',
                        'C-05', 'C-06', 'C-07', 'C-08', 'C-09'],
        'product_id': ['P-10', 'P-11', 'P-11', 'P-12', 'P-13',
                       'P-14', 'P-15', 'P-16', 'P-17', 'P-18'],
        'customer_name': ['Ada Byrne', 'Ben Cole', 'Ben Cole', ' Cara Diaz', 'Dev Earl',
                          'Eve Ford', 'Fay Gold', 'Gus Hale', 'Hal Ives', 'Ivy Jones'],
        'ship_mode': ['Standard Class'] * 9 + ['Second Class '],
        'segment': ['Consumer'] * 10,
        'country': ['United States'] * 10,
        'city': ['Henderson', 'Los Angeles', 'Los Angeles', 'Seattle', 'Austin',
                 'Boston', 'Denver', 'Miami', 'Dallas', 'Tulsa'],
        'state': ['Kentucky', 'California', 'California', 'Washington', 'Texas',
                  'Massachusetts', 'Colorado', 'Florida', 'Texas', 'Oklahoma'],
        'region': ['South', 'West', 'West', 'West', 'Central',
                   'East', 'West', 'South', 'Central', 'Central'],
        'category': ['Furniture', 'Technology', 'Technology', 'Office Supplies', 'Furniture',
                     'Technology', 'Furniture', 'Office Supplies', 'Technology', 'Furniture'],
        'order_date': [date(2024, 1, d) for d in range(1, 11)],
        'ship_date': [date(2024, 1, 4), date(2024, 1, 6), date(2024, 1, 6), date(2024, 1, 2),
                      date(2024, 1, 9), None, date(2024, 1, 11), date(2024, 1, 12),
                      date(2024, 1, 13), date(2024, 1, 14)],
        'quantity': [2, 3, 3, 1, 5, 0, 2, 4, 1, 7],
    })


def main():
    orders = build_orders()
    source = DataFrameSource({SUPASTORE_TABLE: orders})

    evaluator = Evaluator(max_workers=4, key_columns=KEY_COLUMNS)
    report = evaluator.run(supastore_registry(), source, SUPASTORE_TABLE)

    report.print_summary()
    report.print_failures()

    print("Anomaly summary:")
    for rule_name, count in report.anomaly_summary().items():
        print(f"  {rule_name:<26} {count}")
    print()


if __name__ == '__main__':
    main()
