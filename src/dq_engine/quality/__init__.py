"""Rule-based data quality checks: rules, registry, evaluator and report."""

from .errors import (
    DataQualityError,
    DuplicateRuleName,
    RegistryLocked,
    RuleDefinitionError,
    RuleEvaluationError,
    RuleTimeout,
    SourceUnavailable,
)
from .evaluator import Evaluator
from .loader import RuleConfig, build_registry, build_rule, load_rule_file, parse_rule_document
from .registry import RuleRegistry
from .report import Report, RunStatus
from .rules import (
    BusinessPredicateRule,
    CompletenessRule,
    CrossFieldRule,
    DuplicateCheckRule,
    NullCheckRule,
    RecordRule,
    Rule,
    RuleResult,
    Violation,
    WhitespaceRule,
)
from .suites import supastore_registry, supastore_rules

__all__ = [
    'Rule',
    'RecordRule',
    'RuleResult',
    'Violation',
    'CompletenessRule',
    'NullCheckRule',
    'DuplicateCheckRule',
    'WhitespaceRule',
    'CrossFieldRule',
    'BusinessPredicateRule',
    'RuleRegistry',
    'Evaluator',
    'Report',
    'RunStatus',
    'RuleConfig',
    'build_rule',
    'build_registry',
    'parse_rule_document',
    'load_rule_file',
    'supastore_rules',
    'supastore_registry',
    'DataQualityError',
    'SourceUnavailable',
    'DuplicateRuleName',
    'RegistryLocked',
    'RuleDefinitionError',
    'RuleEvaluationError',
    'RuleTimeout',
]
