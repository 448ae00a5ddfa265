"""
Command-line runner.

Usage:
  dq-check --source exports/ --table supastore_db
  dq-check --rules rules/supastore.yaml --source "mysql+pymysql://etl@warehouse/supastore"
  dq-check --rules rules.json --source https://api.example.com/v1 --format json
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .config import Settings
from .quality import (
    DataQualityError,
    Evaluator,
    RuleDefinitionError,
    SourceUnavailable,
    load_rule_file,
    supastore_registry,
)
from .quality.suites import DATE_COLUMNS, KEY_COLUMNS
from .sources import CsvSource, HttpJsonSource, ParquetSource, RowSource, SqlSource

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_ABORTED = 2

log = logging.getLogger("dq_engine.cli")


def _file_paths(table: str, target: str):
    return {table: target} if os.path.isfile(target) else target


def build_source(spec: str, table: str, parse_dates: Optional[List[str]] = None) -> RowSource:
    """Build a row source from ``csv:PATH``, ``parquet:PATH``, ``sql:URL`` or a bare path/URL."""
    if spec.startswith(('http://', 'https://')):
        return HttpJsonSource(spec)

    prefix, sep, target = spec.partition(':')
    if sep and prefix == 'csv':
        return CsvSource(_file_paths(table, target), parse_dates=parse_dates)
    if sep and prefix == 'parquet':
        return ParquetSource(_file_paths(table, target))
    if sep and prefix == 'sql':
        return SqlSource(target, parse_dates=parse_dates)

    if '://' in spec:
        return SqlSource(spec, parse_dates=parse_dates)
    if spec.endswith('.parquet'):
        return ParquetSource(_file_paths(table, spec))
    return CsvSource(_file_paths(table, spec), parse_dates=parse_dates)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='dq-check',
        description='Run data quality rules against a table and report violations.',
    )
    parser.add_argument('--rules', help='JSON or YAML rule file (default: built-in SupaStore checks)')
    parser.add_argument('--source', help='csv:PATH, parquet:PATH, sql:URL, an http(s) URL, or a path')
    parser.add_argument('--table', help='table to check (default: from rule file or DQ_TABLE)')
    parser.add_argument('--format', choices=['text', 'json'], default='text')
    parser.add_argument('--workers', type=int, help='rules evaluated concurrently')
    parser.add_argument('--timeout', type=float, help='per-rule timeout in seconds')
    parser.add_argument('--sample-size', type=int, help='violations kept per rule')
    parser.add_argument('--parse-dates', default='',
                        help='comma-separated date columns (default: from rule file, or order_date,ship_date)')
    parser.add_argument('--log-level', help='logging level (default: DQ_LOG_LEVEL or INFO)')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = Settings.from_env()
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )

    try:
        if args.rules:
            config = load_rule_file(args.rules)
            registry, key_columns = config.registry, config.key_columns
            date_columns = config.date_columns
            table = args.table or config.table or settings.table
        else:
            registry, key_columns = supastore_registry(), list(KEY_COLUMNS)
            date_columns = list(DATE_COLUMNS)
            table = args.table or settings.table
    except DataQualityError as exc:
        log.error("Invalid rules: %s", exc)
        return EXIT_ABORTED

    spec = args.source or settings.database_url
    if not spec:
        log.error("No source given (use --source or DQ_DATABASE_URL)")
        return EXIT_ABORTED

    parse_dates = [c.strip() for c in args.parse_dates.split(',') if c.strip()] or date_columns
    evaluator = Evaluator(
        max_workers=args.workers or settings.max_workers,
        rule_timeout=args.timeout if args.timeout is not None else settings.rule_timeout,
        sample_size=args.sample_size if args.sample_size is not None else settings.sample_size,
        key_columns=key_columns,
    )

    try:
        source = build_source(spec, table, parse_dates)
        report = evaluator.run(registry, source, table)
    except (SourceUnavailable, RuleDefinitionError) as exc:
        log.error("Run aborted: %s", exc)
        return EXIT_ABORTED

    if args.format == 'json':
        sys.stdout.write(report.to_json() + '\n')
    else:
        sys.stdout.write(report.render())
    return EXIT_PASSED if report.passed else EXIT_FAILED


if __name__ == '__main__':
    sys.exit(main())
