"""Base class for discovery queries."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, List

from ...models.instance import InstanceDetails
from ...models.resource import ResourceKind, ResourceRecord


class BaseDiscoveryQuery(ABC):
    """Abstract base class for per-kind discovery queries.

    Each query should:
    1. Declare the resource kind it discovers
    2. Declare the AWS service it talks to
    3. Implement discover() returning records in a deterministic order

    Queries let ClientError/BotoCoreError propagate; the engine turns them into
    partial discovery failures.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(f"{__name__}.{type(self).__name__}")

    @property
    @abstractmethod
    def kind(self) -> ResourceKind:
        """Resource kind produced by this query."""
        pass

    @property
    @abstractmethod
    def service_name(self) -> str:
        """boto3 service name (e.g. "ec2")."""
        pass

    @abstractmethod
    def discover(self, client: Any, instance: InstanceDetails) -> List[ResourceRecord]:
        """Find resources of this kind tied to the instance.

        Args:
            client: boto3 client for service_name
            instance: Instance attributes from describe_instances

        Returns:
            List of ResourceRecord objects (empty list if none found)
        """
        pass
