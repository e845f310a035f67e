"""boto3 client factory."""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.config import Config as BotoConfig

logger = logging.getLogger(__name__)

# Adaptive retries absorb API throttling during discovery fan-out
DEFAULT_BOTO_CONFIG = BotoConfig(retries={"max_attempts": 5, "mode": "adaptive"})


def create_session(profile_name: Optional[str] = None, region_name: Optional[str] = None) -> boto3.Session:
    """Create a boto3 session for the given profile and region."""
    return boto3.Session(profile_name=profile_name, region_name=region_name)


def create_boto_client(
    service_name: str,
    region_name: Optional[str] = None,
    profile_name: Optional[str] = None,
    session: Optional[boto3.Session] = None,
) -> Any:
    """Create a boto3 client.

    Args:
        service_name: AWS service name (e.g. "ec2")
        region_name: AWS region
        profile_name: AWS profile name (ignored when a session is passed)
        session: Existing session to create the client from (optional)

    Returns:
        boto3 client for the service
    """
    if session is None:
        session = create_session(profile_name=profile_name, region_name=region_name)

    logger.debug(f"Creating {service_name} client in {region_name or session.region_name}")
    return session.client(service_name, region_name=region_name, config=DEFAULT_BOTO_CONFIG)


class ClientFactory:
    """Caches one client per service for a single session and region.

    boto3 sessions are not thread-safe but clients are, so clients are created
    on the calling thread before any concurrent use.
    """

    def __init__(self, region_name: str, profile_name: Optional[str] = None) -> None:
        self.region_name = region_name
        self.profile_name = profile_name
        self._session: Optional[boto3.Session] = None
        self._clients: dict[str, Any] = {}

    def client(self, service_name: str) -> Any:
        if service_name not in self._clients:
            if self._session is None:
                self._session = create_session(profile_name=self.profile_name, region_name=self.region_name)
            self._clients[service_name] = create_boto_client(
                service_name=service_name,
                region_name=self.region_name,
                session=self._session,
            )
        return self._clients[service_name]
