"""
Declarative rule definitions.

Rules can be written as plain dicts, or in a JSON or YAML file:

    table: supastore_db
    key_columns: [order_id]
    date_columns: [order_date, ship_date]
    rules:
      - {name: missing_order_id, kind: completeness, columns: [order_id]}
      - {name: late_ship, kind: cross-field, left: ship_date, op: "<", right: order_date}
      - {name: quantity_positive, kind: business-predicate, column: quantity, op: "<", value: 1}

Every definition resolves to a Rule before evaluation begins.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional

import yaml

from .errors import RuleDefinitionError
from .registry import RuleRegistry
from .rules import (
    KINDS,
    BusinessPredicateRule,
    CompletenessRule,
    CrossFieldRule,
    DuplicateCheckRule,
    NullCheckRule,
    Rule,
    WhitespaceRule,
)

_ALLOWED_KEYS = {
    'completeness': {'columns', 'column'},
    'null-check': {'columns', 'column'},
    'duplicate-check': {'columns', 'column'},
    'whitespace-check': {'column'},
    'cross-field': {'left', 'op', 'right'},
    'business-predicate': {'column', 'op', 'value'},
}


@dataclass
class RuleConfig:
    """A parsed rule document."""
    name: str
    registry: RuleRegistry
    table: Optional[str] = None
    key_columns: List[str] = field(default_factory=list)
    date_columns: List[str] = field(default_factory=list)


def _require(definition: Mapping[str, Any], key: str) -> Any:
    if key not in definition:
        raise RuleDefinitionError(
            f"rule {definition.get('name', '<unnamed>')!r} is missing {key!r}"
        )
    return definition[key]


def _columns(definition: Mapping[str, Any]) -> List[str]:
    if 'columns' in definition:
        columns = definition['columns']
        if isinstance(columns, str):
            return [columns]
        if not isinstance(columns, list) or not columns:
            raise RuleDefinitionError(f"rule {definition.get('name')!r}: columns must be a non-empty list")
        return [str(c) for c in columns]
    return [str(_require(definition, 'column'))]


def build_rule(definition: Mapping[str, Any]) -> Rule:
    """Resolve one declarative definition to a Rule."""
    if not isinstance(definition, Mapping):
        raise RuleDefinitionError(f"rule definition must be a mapping, got {type(definition).__name__}")
    kind = _require(definition, 'kind')
    if kind not in KINDS:
        raise RuleDefinitionError(f"unknown rule kind {kind!r}; expected one of {list(KINDS)}")

    unknown = set(definition) - {'name', 'kind'} - _ALLOWED_KEYS[kind]
    if unknown:
        raise RuleDefinitionError(
            f"rule {definition.get('name', kind)!r}: unexpected keys {sorted(unknown)}"
        )
    name = definition.get('name')
    # YAML reads `name: 2024` as an int
    if isinstance(name, (int, float)) and not isinstance(name, bool):
        name = str(name)
    elif name is not None and not isinstance(name, str):
        raise RuleDefinitionError(f"rule name must be a string, got {type(name).__name__}")

    if kind == 'completeness':
        return CompletenessRule(_columns(definition), name=name)
    if kind == 'null-check':
        return NullCheckRule(_columns(definition), name=name)
    if kind == 'duplicate-check':
        return DuplicateCheckRule(_columns(definition), name=name)
    if kind == 'whitespace-check':
        return WhitespaceRule(_require(definition, 'column'), name=name)
    if kind == 'cross-field':
        return CrossFieldRule(
            _require(definition, 'left'),
            _require(definition, 'op'),
            _require(definition, 'right'),
            name=name,
        )
    return BusinessPredicateRule.comparison(
        _require(definition, 'column'),
        _require(definition, 'op'),
        _require(definition, 'value'),
        name=name,
    )


def build_registry(definitions: Iterable[Mapping[str, Any]], name: str = 'default') -> RuleRegistry:
    registry = RuleRegistry(name)
    for definition in definitions:
        registry.register(build_rule(definition))
    return registry


def _column_list(document: Mapping[str, Any], key: str) -> List[str]:
    columns = document.get(key) or []
    if isinstance(columns, str):
        columns = [columns]
    return [str(c) for c in columns]


def parse_rule_document(document: Any, default_name: str = 'default') -> RuleConfig:
    """Parse an already-decoded rule document (a dict or a bare list of rules)."""
    if isinstance(document, list):
        document = {'rules': document}
    if not isinstance(document, Mapping):
        raise RuleDefinitionError("rule document must be a mapping or a list of rules")

    rules = document.get('rules')
    if not isinstance(rules, list):
        raise RuleDefinitionError("rule document needs a 'rules' list")

    name = str(document.get('name', default_name))
    key_columns = _column_list(document, 'key_columns')
    date_columns = _column_list(document, 'date_columns')

    return RuleConfig(
        name=name,
        registry=build_registry(rules, name),
        table=document.get('table'),
        key_columns=key_columns,
        date_columns=date_columns,
    )


def load_rule_file(path: str) -> RuleConfig:
    """Load rules from a ``.json``, ``.yaml`` or ``.yml`` file."""
    ext = os.path.splitext(path)[1].lower()
    default_name = os.path.splitext(os.path.basename(path))[0]
    try:
        with open(path, encoding='utf-8') as fh:
            if ext == '.json':
                document = json.load(fh)
            elif ext in ('.yaml', '.yml'):
                document = yaml.safe_load(fh)
            else:
                raise RuleDefinitionError(f"unsupported rule file type: {ext or path}")
    except OSError as exc:
        raise RuleDefinitionError(f"cannot read rule file {path}: {exc}") from exc
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise RuleDefinitionError(f"cannot parse rule file {path}: {exc}") from exc

    return parse_rule_document(document, default_name)
