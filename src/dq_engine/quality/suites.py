"""
Post-load checks for the SupaStore orders table.

Covers key completeness, null and duplicate keys, stray whitespace in
text columns, shipping before ordering, and non-positive quantities.
"""

from typing import List

from .registry import RuleRegistry
from .rules import (
    BusinessPredicateRule,
    CompletenessRule,
    CrossFieldRule,
    DuplicateCheckRule,
    NullCheckRule,
    Rule,
    WhitespaceRule,
)

SUPASTORE_TABLE = 'supastore_db'

KEY_COLUMNS = ['order_id', 'customer_id', 'product_id']

# exported as text (e.g. 12/30/2023); compared as dates by invalid_ship_dates
DATE_COLUMNS = ['order_date', 'ship_date']

TEXT_COLUMNS = [
    'ship_mode',
    'customer_name',
    'segment',
    'country',
    'city',
    'state',
    'region',
    'category',
]


def supastore_rules() -> List[Rule]:
    rules: List[Rule] = [
        CompletenessRule([col], name=f"missing_{col}") for col in KEY_COLUMNS
    ]
    rules.append(NullCheckRule(KEY_COLUMNS, name='null_key_identifiers'))
    # one order line per order/product pair
    rules.append(DuplicateCheckRule(['order_id', 'product_id'], name='duplicate_order_lines'))
    rules.extend(WhitespaceRule(col, name=f"whitespace_{col}") for col in TEXT_COLUMNS)
    rules.append(CrossFieldRule('ship_date', '<', 'order_date', name='invalid_ship_dates'))
    rules.append(BusinessPredicateRule.comparison('quantity', '<', 1, name='invalid_quantities'))
    return rules


def supastore_registry() -> RuleRegistry:
    return RuleRegistry('supastore').register_all(supastore_rules())
