"""
Application settings
"""
import logging
import sys
from typing import Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

from vpa_advisor.core.exceptions import ConfigError

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Numeric levels follow the "lower is more verbose" convention:
# -4 debug, 0 info, 4 warning, 8 error
_LEVEL_THRESHOLDS = [
    (-4, logging.DEBUG),
    (0, logging.INFO),
    (4, logging.WARNING),
    (8, logging.ERROR),
]


class Settings(BaseSettings):
    """Application settings"""

    # Logging
    log_level: int = 0

    # Kubernetes settings
    kubeconfig_path: Optional[str] = None
    kube_context: Optional[str] = None
    request_timeout: Optional[float] = Field(default=None, gt=0)

    # Report settings
    results_file: str = "results.csv"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"
        env_ignore_empty = True


def load_settings(**overrides) -> Settings:
    """Read settings from the environment, raising ConfigError on bad input"""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def to_logging_level(level: int) -> int:
    """Map a numeric verbosity level onto a logging module level"""
    for threshold, logging_level in _LEVEL_THRESHOLDS:
        if level <= threshold:
            return logging_level
    return logging.CRITICAL


def setup_logging(level: int = 0):
    """Configure application-wide logging"""
    logging.basicConfig(
        level=to_logging_level(level),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True
    )
    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("kubernetes").setLevel(logging.WARNING)
