#!/usr/bin/env python3
"""
Example: Run the YAML rule file against a SQLite copy of the orders table.

Loads the sample orders into a temporary SQLite database, then runs
rules/supastore.yaml through the SQL source, the same path used against
the MySQL warehouse in production.

Usage:
    python examples/validate_supastore_sqlite.py
"""

import sys
import tempfile
from pathlib import Path

from sqlalchemy import create_engine

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))
sys.path.insert(0, str(Path(__file__).parent))

from dq_engine.quality import Evaluator, load_rule_file
from dq_engine.sources import SqlSource
from validate_supastore import build_orders

RULE_FILE = Path(__file__).parent.parent / 'rules' / 'supastore.yaml'


def main():
    config = load_rule_file(str(RULE_FILE))

    with tempfile.TemporaryDirectory() as tmp:
        engine = create_engine(f"sqlite:///{Path(tmp) / 'supastore.db'}")
        orders = build_orders()
        orders['order_date'] = orders['order_date'].astype(str)
        orders['ship_date'] = orders['ship_date'].astype('string')
        orders.to_sql(config.table, engine, index=False)

        source = SqlSource(engine, parse_dates=config.date_columns)
        report = Evaluator(key_columns=config.key_columns).run(config.registry, source, config.table)
        engine.dispose()

    print(report.render())
    print(report.to_frame()[['rule', 'severity', 'violation_count', 'total_examined']].to_string(index=False))


if __name__ == '__main__':
    main()
