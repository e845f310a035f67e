"""Configuration loading.

Settings come from defaults, then a YAML config file, then environment
variables; CLI options are applied last by the caller.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_REGION = "ap-southeast-2"
CONFIG_ENV_VAR = "EC2_DECOM_CONFIG"


def default_config_path() -> Path:
    return Path.home() / ".ec2-decom" / "config.yaml"


def default_audit_dir() -> str:
    return str(Path.home() / ".ec2-decom" / "audit-logs")


@dataclass
class DecomConfig:
    """Decommission settings threaded into the discovery and execution engines.

    Attributes:
        region: AWS region the instance lives in
        aws_profile: AWS profile name (optional)
        log_level: Logging level name
        default_security_group_id: Reserved security group never proposed for deletion
        wait_timeout_seconds: Upper bound for each stop/terminate/detach wait
        wait_delay_seconds: Polling interval while waiting
        max_retries: Attempts for mutations failing with DependencyViolation
        concurrent_discovery: Run discovery queries on a thread pool
        discovery_workers: Thread pool size for concurrent discovery
        audit_dir: Directory for YAML run logs
    """

    region: str = DEFAULT_REGION
    aws_profile: Optional[str] = None
    log_level: str = "INFO"
    default_security_group_id: Optional[str] = None
    wait_timeout_seconds: int = 600
    wait_delay_seconds: int = 15
    max_retries: int = 3
    concurrent_discovery: bool = False
    discovery_workers: int = 4
    audit_dir: str = field(default_factory=default_audit_dir)

    ENV_OVERRIDES = {
        "EC2_DECOM_REGION": "region",
        "AWS_PROFILE": "aws_profile",
        "EC2_DECOM_LOG_LEVEL": "log_level",
        "EC2_DECOM_DEFAULT_SG": "default_security_group_id",
        "EC2_DECOM_AUDIT_DIR": "audit_dir",
    }

    @classmethod
    def load(cls, path: Optional[str] = None) -> DecomConfig:
        """Load configuration from file and environment.

        Args:
            path: Config file path (default: $EC2_DECOM_CONFIG or ~/.ec2-decom/config.yaml)

        Returns:
            Loaded configuration

        Raises:
            ValueError: If the config file is not a YAML mapping
        """
        config = cls()

        config_path = Path(path or os.environ.get(CONFIG_ENV_VAR) or default_config_path())
        if config_path.exists():
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"Config file {config_path} must contain a mapping")
            config.update(data)
            logger.debug(f"Loaded configuration from {config_path}")

        for env_var, attr in cls.ENV_OVERRIDES.items():
            value = os.environ.get(env_var)
            if value:
                setattr(config, attr, value)

        return config

    def update(self, values: dict[str, Any]) -> None:
        """Apply known settings from a mapping, coercing to the field's type."""
        known = {f.name: f for f in fields(self)}
        for key, value in values.items():
            if key not in known:
                logger.debug(f"Ignoring unknown config key: {key}")
                continue
            if value is None:
                setattr(self, key, None)
                continue
            default = getattr(self, key)
            if isinstance(default, bool):
                value = value if isinstance(value, bool) else str(value).lower() in ("1", "true", "yes")
            elif isinstance(default, int):
                value = int(value)
            setattr(self, key, value)

    @property
    def waiter_config(self) -> dict[str, int]:
        """boto3 WaiterConfig bounding a wait by wait_timeout_seconds."""
        delay = max(1, self.wait_delay_seconds)
        return {"Delay": delay, "MaxAttempts": max(1, -(-self.wait_timeout_seconds // delay))}
