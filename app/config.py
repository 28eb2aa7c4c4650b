"""Environment-driven settings."""

import os
from functools import lru_cache
from typing import Dict, List

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

DEFAULT_RISK_THRESHOLDS = 'low:0,medium:40,high:70'
DEFAULT_FACTOR_THRESHOLDS = 'attendance:70,academic_performance:70,fee_payment:75,engagement:60'
DEFAULT_TREND_PERIODS = 'Jan,Feb,Mar,Apr,May'


def parse_thresholds(value: str) -> Dict[str, float]:
    """Parse a ``name:number,name:number`` string into a dict."""
    thresholds = {}
    for item in value.split(','):
        if not item.strip():
            continue
        key, number = item.split(':')
        thresholds[key.strip()] = float(number.strip())
    return thresholds


class Settings(BaseModel):
    risk_thresholds: Dict[str, float]
    factor_thresholds: Dict[str, float]
    trend_periods: List[str]
    allow_origins: List[str]
    max_upload_size_mb: int = 10
    debug: bool = False
    log_level: str = 'INFO'
    advisor_name: str = 'Academic Advisor'
    advisor_email: str = 'advisor@example.com'

    @property
    def max_upload_size(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """Read settings from the environment once per process."""
    return Settings(
        risk_thresholds=parse_thresholds(os.getenv('RISK_THRESHOLDS', DEFAULT_RISK_THRESHOLDS)),
        factor_thresholds=parse_thresholds(os.getenv('FACTOR_THRESHOLDS', DEFAULT_FACTOR_THRESHOLDS)),
        trend_periods=[p.strip() for p in os.getenv('TREND_PERIODS', DEFAULT_TREND_PERIODS).split(',') if p.strip()],
        allow_origins=os.getenv('ALLOW_ORIGINS', '*').split(','),
        max_upload_size_mb=int(os.getenv('MAX_UPLOAD_SIZE_MB', '10')),
        debug=os.getenv('DEBUG', 'False').lower() == 'true',
        log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        advisor_name=os.getenv('ADVISOR_NAME', 'Academic Advisor'),
        advisor_email=os.getenv('ADVISOR_EMAIL', 'advisor@example.com'),
    )
