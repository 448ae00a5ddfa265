"""
Tests for validation rules.
"""

from datetime import date

import numpy as np
import pandas as pd
import pytest

from dq_engine.quality.errors import RuleDefinitionError, RuleEvaluationError
from dq_engine.quality.rules import (
    BusinessPredicateRule,
    CompletenessRule,
    CrossFieldRule,
    DuplicateCheckRule,
    NullCheckRule,
    RecordRule,
    Rule,
    RuleResult,
    WhitespaceRule,
    is_null,
)


class TestIsNull:

    def test_missing_markers(self):
        assert is_null(None)
        assert is_null(float('nan'))
        assert is_null(pd.NaT)
        assert is_null(pd.NA)
        assert is_null(np.nan)

    def test_values(self):
        assert not is_null(0)
        assert not is_null('')
        assert not is_null(date(2024, 1, 1))
        assert not is_null([None])


class TestCompletenessRule:

    def test_counts_missing_order_ids(self, order_records):
        rule = CompletenessRule(columns=['order_id'])
        result = rule.evaluate(order_records)
        assert result.total_examined == 10
        assert result.violation_count == 2
        assert result.status == 'fail'
        assert result.details['null_counts'] == {'order_id': 2}
        assert result.details['completeness'] == {'order_id': 0.8}

    def test_clean_columns_pass(self, order_records):
        result = CompletenessRule(columns=['customer_id', 'product_id']).evaluate(order_records)
        assert result.passed is True
        assert result.total_examined == 10
        assert result.details['null_counts'] == {'customer_id': 0, 'product_id': 0}

    def test_per_column_sub_counts(self):
        records = [
            {'a': None, 'b': None},
            {'a': 1, 'b': None},
            {'a': 1, 'b': 2},
        ]
        result = CompletenessRule(columns=['a', 'b']).evaluate(records)
        assert result.violation_count == 2  # records missing at least one column
        assert result.details['null_counts'] == {'a': 1, 'b': 2}

    def test_missing_column_raises(self, order_records):
        rule = CompletenessRule(columns=['nonexistent'])
        with pytest.raises(RuleEvaluationError, match='missing columns'):
            rule.evaluate(order_records)

    def test_empty_pass(self):
        result = CompletenessRule(columns=['col']).evaluate([])
        assert result.passed is True
        assert result.total_examined == 0
        assert result.details['completeness'] == {'col': 1.0}

    def test_default_name(self):
        assert CompletenessRule(columns=['order_id', 'customer_id']).name == 'completeness_order_id_customer_id'

    def test_needs_a_column(self):
        with pytest.raises(RuleDefinitionError):
            CompletenessRule(columns=[])


class TestNullCheckRule:

    def test_counts_each_record_once(self):
        records = [
            {'order_id': None, 'product_id': None, 'customer_id': None},
            {'order_id': 'O2', 'product_id': None, 'customer_id': 'C2'},
            {'order_id': 'O3', 'product_id': 'P3', 'customer_id': 'C3'},
        ]
        rule = NullCheckRule(columns=['order_id', 'product_id', 'customer_id'])
        result = rule.evaluate(records)
        assert result.total_examined == 3
        assert result.violation_count == 2

    def test_samples_carry_row_and_key(self, order_records):
        rule = NullCheckRule(columns=['order_id'], name='null_order_id')
        result = rule.evaluate(order_records, key_columns=['customer_id'])
        assert [v.row_number for v in result.violations] == [3, 7]
        assert result.violations[0].key == ('C3',)
        assert result.violations[0].rule_name == 'null_order_id'

    def test_sample_size_caps_samples_not_counts(self):
        records = [{'x': None}] * 20
        result = NullCheckRule(columns=['x']).evaluate(records, sample_size=3)
        assert result.violation_count == 20
        assert len(result.violations) == 3

    def test_does_not_mutate_records(self):
        records = [{'x': None, 'y': 1}]
        NullCheckRule(columns=['x']).evaluate(records)
        assert records == [{'x': None, 'y': 1}]


class TestDuplicateCheckRule:

    def test_counts_offending_records(self):
        records = [{'order_id': k} for k in ['A', 'B', 'A', 'C']]
        result = DuplicateCheckRule(columns=['order_id']).evaluate(records)
        # both occurrences of A are violations, in a single group
        assert result.violation_count == 2
        assert result.total_examined == 4
        assert result.details['duplicate_groups'] == 1
        assert result.details['unique_rows'] == 2
        assert [v.row_number for v in result.violations] == [1, 3]

    def test_unique_keys_pass(self):
        records = [{'order_id': k} for k in ['A', 'B', 'C']]
        result = DuplicateCheckRule(columns=['order_id']).evaluate(records)
        assert result.passed is True
        assert result.details['duplicate_groups'] == 0

    def test_composite_key(self):
        records = [
            {'order_id': 'A', 'product_id': 'P1'},
            {'order_id': 'A', 'product_id': 'P2'},
            {'order_id': 'A', 'product_id': 'P1'},
            {'order_id': 'B', 'product_id': 'P2'},
            {'order_id': 'B', 'product_id': 'P2'},
        ]
        result = DuplicateCheckRule(columns=['order_id', 'product_id']).evaluate(records)
        assert result.violation_count == 4
        assert result.details['duplicate_groups'] == 2

    def test_null_keys_skipped(self):
        records = [{'order_id': k} for k in [None, None, 'A']]
        result = DuplicateCheckRule(columns=['order_id']).evaluate(records)
        assert result.passed is True
        assert result.total_examined == 1
        assert result.details['null_keys_skipped'] == 2

    def test_empty_pass(self):
        result = DuplicateCheckRule(columns=['order_id']).evaluate([])
        assert result.passed is True
        assert result.total_examined == 0

    def test_accepts_generator(self):
        records = ({'k': k} for k in [1, 2, 1])
        result = DuplicateCheckRule(columns=['k']).evaluate(records)
        assert result.violation_count == 2


class TestWhitespaceRule:

    def test_leading_and_trailing(self):
        records = [{'city': v} for v in ['abc', ' abc', 'abc ', None]]
        result = WhitespaceRule('city').evaluate(records)
        assert result.violation_count == 2
        assert result.total_examined == 3  # null exempt
        assert [v.row_number for v in result.violations] == [2, 3]

    def test_tabs_and_newlines(self):
        records = [{'city': v} for v in ['Austin\t', '\nDallas', 'El Paso']]
        result = WhitespaceRule('city').evaluate(records)
        assert result.violation_count == 2

    def test_inner_spaces_allowed(self):
        result = WhitespaceRule('ship_mode').evaluate([{'ship_mode': 'Standard Class'}])
        assert result.passed is True

    def test_non_text_values(self):
        result = WhitespaceRule('zip').evaluate([{'zip': 42420}, {'zip': float('nan')}])
        assert result.passed is True
        assert result.total_examined == 1


class TestCrossFieldRule:

    def test_ship_before_order_is_violation(self, dated_records):
        rule = CrossFieldRule('ship_date', '<', 'order_date')
        result = rule.evaluate(dated_records)
        assert result.violation_count == 1
        assert result.violations[0].row_number == 1

    def test_nulls_excluded_from_totals(self, dated_records):
        result = CrossFieldRule('ship_date', '<', 'order_date').evaluate(dated_records)
        assert result.total_examined == 2

    def test_single_null_record_not_evaluable(self):
        records = [{'order_date': date(2024, 1, 5), 'ship_date': None}]
        result = CrossFieldRule('ship_date', '<', 'order_date').evaluate(records)
        assert result.total_examined == 0
        assert result.violation_count == 0

    def test_default_name_and_condition(self):
        rule = CrossFieldRule('ship_date', '<', 'order_date')
        assert rule.name == 'cross_field_ship_date_lt_order_date'
        assert rule.details() == {'condition': 'ship_date < order_date'}

    def test_unknown_operator(self):
        with pytest.raises(RuleDefinitionError, match='unknown operator'):
            CrossFieldRule('a', '=>', 'b')

    def test_incomparable_values_raise(self):
        records = [{'a': date(2024, 1, 1), 'b': 'yesterday'}]
        with pytest.raises(RuleEvaluationError, match='row 1'):
            CrossFieldRule('a', '<', 'b').evaluate(records)


class TestBusinessPredicateRule:

    def test_quantity_below_one(self):
        records = [{'quantity': q} for q in [5, 0, -1, 1]]
        rule = BusinessPredicateRule.comparison('quantity', '<', 1)
        result = rule.evaluate(records)
        assert result.violation_count == 2
        assert result.total_examined == 4
        assert rule.name == 'business_quantity_lt_1'
        assert result.details == {'condition': 'quantity < 1'}

    def test_nulls_excluded(self):
        records = [{'quantity': q} for q in [None, 0, 3]]
        result = BusinessPredicateRule.comparison('quantity', '<', 1).evaluate(records)
        assert result.total_examined == 2
        assert result.violation_count == 1

    def test_custom_predicate(self):
        records = [
            {'sales': 100.0, 'discount': 0.2},
            {'sales': 50.0, 'discount': 0.9},
        ]
        rule = BusinessPredicateRule(
            columns=['sales', 'discount'],
            predicate=lambda r: r['discount'] > 0.8,
            name='excessive_discount',
        )
        result = rule.evaluate(records)
        assert result.violation_count == 1
        assert result.details == {}

    def test_predicate_error_raises(self):
        rule = BusinessPredicateRule(
            columns=['x'],
            predicate=lambda r: 1 / r['x'] > 1,
            name='broken',
        )
        with pytest.raises(RuleEvaluationError, match="rule 'broken' failed on row 1"):
            rule.evaluate([{'x': 0}])


class TestRuleBase:

    def test_bases_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            Rule(['a'])
        with pytest.raises(TypeError):
            RecordRule(['a'])

    def test_record_rule_subclass(self):
        class NegativeRule(RecordRule):
            kind = 'business-predicate'

            def violates(self, record):
                return record['a'] < 0

        result = NegativeRule(['a']).evaluate([{'a': 1}, {'a': -1}])
        assert result.violation_count == 1
        assert result.rule_name == 'business_predicate_a'

    def test_name_must_be_text(self):
        with pytest.raises(RuleDefinitionError, match='must be a string'):
            CompletenessRule(['order_id'], name=2024)


class TestRuleResult:

    def test_invariant(self):
        with pytest.raises(ValueError):
            RuleResult(rule_name='r', kind='null-check', columns=('x',),
                       total_examined=1, violation_count=2)

    def test_severity(self):
        result = RuleResult(rule_name='r', kind='null-check', columns=('x',), status='error')
        assert result.severity == 'ERROR'
        assert result.passed is False

    def test_to_dict(self):
        records = [{'quantity': 0, 'order_id': 'O1'}]
        result = BusinessPredicateRule.comparison('quantity', '<', 1).evaluate(
            records, key_columns=['order_id'])
        d = result.to_dict()
        assert d['severity'] == 'FAIL'
        assert d['columns'] == ['quantity']
        assert d['violations'][0]['key'] == ['O1']
        assert d['violations'][0]['record'] == {'quantity': 0, 'order_id': 'O1'}
