"""Shared test fixtures and path setup."""
import sys
from datetime import date
from pathlib import Path

# Add src/ to sys.path so tests can import dq_engine without installing
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

import pytest
import pandas as pd


# --- Record fixtures ---

@pytest.fixture
def order_records():
    """Ten order lines; two have no order_id."""
    ids = ['O1', 'O2', None, 'O4', 'O5', 'O6', None, 'O8', 'O9', 'O10']
    return [
        {'order_id': oid, 'customer_id': f'C{i}', 'product_id': f'P{i}'}
        for i, oid in enumerate(ids, start=1)
    ]


@pytest.fixture
def dated_records():
    return [
        {'order_id': 'O1', 'order_date': date(2024, 1, 5), 'ship_date': date(2024, 1, 1)},
        {'order_id': 'O2', 'order_date': date(2024, 1, 5), 'ship_date': None},
        {'order_id': 'O3', 'order_date': date(2024, 1, 5), 'ship_date': date(2024, 1, 8)},
        {'order_id': 'O4', 'order_date': None, 'ship_date': date(2024, 1, 8)},
    ]


# --- DataFrame fixtures ---

@pytest.fixture
def clean_df():
    """SupaStore-shaped table with no quality issues."""
    return pd.DataFrame({
        'order_id': ['CA-1', 'CA-2', 'CA-3', 'CA-4'],
        'customer_id': ['C-1', 'C-2', 'C-3', 'C-4'],
        'product_id': ['P-1', 'P-2', 'P-3', 'P-4'],
        'customer_name': ['Ada Byrne', 'Ben Cole', 'Cara Diaz', 'Dev Earl'],
        'ship_mode': ['Standard Class', 'First Class', 'Same Day', 'Second Class'],
        'segment': ['Consumer', 'Corporate', 'Home Office', 'Consumer'],
        'country': ['United States'] * 4,
        'city': ['Henderson', 'Seattle', 'Austin', 'Boston'],
        'state': ['Kentucky', 'Washington', 'Texas', 'Massachusetts'],
        'region': ['South', 'West', 'Central', 'East'],
        'category': ['Furniture', 'Technology', 'Office Supplies', 'Furniture'],
        'order_date': pd.to_datetime(['2024-01-01', '2024-01-02', '2024-01-03', '2024-01-04']),
        'ship_date': pd.to_datetime(['2024-01-03', '2024-01-02', '2024-01-07', '2024-01-08']),
        'quantity': [2, 1, 5, 3],
    })


@pytest.fixture
def messy_df(clean_df):
    """clean_df plus one row per kind of problem."""
    extra = pd.DataFrame({
        'order_id': [None, 'CA-2', 'CA-7', 'CA-8'],
        'customer_id': ['C-5', 'C-2', 'C-7', None],
        'product_id': ['P-5', 'P-2', 'P-7', 'P-8'],
        'customer_name': ['Eve Ford', 'Ben Cole', ' Gus Hale', 'Hal Ives'],
        'ship_mode': ['Standard Class', 'First Class', 'Same Day', 'Second Class '],
        'segment': ['Consumer', 'Corporate', 'Consumer', 'Consumer'],
        'country': ['United States'] * 4,
        'city': ['Miami', 'Seattle', 'Dallas', 'Tulsa'],
        'state': ['Florida', 'Washington', 'Texas', 'Oklahoma'],
        'region': ['South', 'West', 'Central', 'Central'],
        'category': ['Furniture', 'Technology', 'Furniture', 'Technology'],
        'order_date': pd.to_datetime(['2024-01-05', '2024-01-02', '2024-01-07', '2024-01-08']),
        'ship_date': pd.to_datetime(['2024-01-04', '2024-01-02', None, '2024-01-09']),
        'quantity': [1, 1, 0, -2],
    })
    return pd.concat([clean_df, extra], ignore_index=True)
