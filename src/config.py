"""
Configuration loader for the AWS resource tables plugin.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_REGION = "eu-west-2"


@dataclass
class Config:
    """Configuration class for the plugin."""

    regions: List[str] = field(default_factory=lambda: [DEFAULT_REGION])
    aws_profile: Optional[str] = None
    log_level: str = "INFO"
    max_workers: int = 10
    max_retries: int = 3
    timeout_seconds: int = 30
    ignore_error_codes: List[str] = field(default_factory=list)

    @property
    def default_region(self) -> str:
        """Region used for global services such as IAM and STS."""
        return self.regions[0]


def _split_list(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _positive_int(name: str, default: str) -> int:
    raw = os.environ.get(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")
    if value <= 0:
        raise ValueError(f"{name} must be greater than zero, got {value}")
    return value


def load_config() -> Config:
    """
    Loads and validates configuration from the environment.

    Returns:
        Config object with validated settings

    Raises:
        ValueError: If configuration is invalid
    """
    regions_raw = os.environ.get("AWS_REGIONS") or os.environ.get("AWS_REGION") or DEFAULT_REGION
    regions = _split_list(regions_raw)
    if not regions:
        raise ValueError("AWS_REGIONS must name at least one region")

    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        raise ValueError(f"LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, got '{log_level}'")

    return Config(
        regions=regions,
        aws_profile=os.environ.get("AWS_PROFILE") or None,
        log_level=log_level,
        max_workers=_positive_int("MAX_WORKERS", "10"),
        max_retries=_positive_int("MAX_RETRIES", "3"),
        timeout_seconds=_positive_int("TIMEOUT_SECONDS", "30"),
        ignore_error_codes=_split_list(os.environ.get("IGNORE_ERROR_CODES", "")),
    )
