"""
Runtime settings read from the environment (and a local .env file).
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_TABLE = 'supastore_db'


def _optional_float(raw: Optional[str]) -> Optional[float]:
    if raw is None or raw.strip() == '':
        return None
    return float(raw)


@dataclass(frozen=True)
class Settings:
    max_workers: int = 1
    rule_timeout: Optional[float] = None
    sample_size: int = 5
    log_level: str = 'INFO'
    database_url: Optional[str] = None
    table: str = DEFAULT_TABLE

    @classmethod
    def from_env(cls) -> 'Settings':
        return cls(
            max_workers=int(os.getenv("DQ_MAX_WORKERS", "1")),
            rule_timeout=_optional_float(os.getenv("DQ_RULE_TIMEOUT")),
            sample_size=int(os.getenv("DQ_SAMPLE_SIZE", "5")),
            log_level=os.getenv("DQ_LOG_LEVEL", "INFO").upper(),
            database_url=os.getenv("DQ_DATABASE_URL") or None,
            table=os.getenv("DQ_TABLE", DEFAULT_TABLE),
        )
