"""Discovery engine.

Queries the AWS directory APIs for every resource kind tied to an instance and
assembles a deduplicated, discovery-ordered inventory.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ..aws.client import ClientFactory
from ..cli.config import DecomConfig
from ..exceptions import InstanceNotFound, PartialDiscoveryFailure
from ..models.instance import InstanceDetails, InstanceHandle
from ..models.inventory import Inventory
from ..models.resource import ResourceRecord
from .queries import BaseDiscoveryQuery, default_queries

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {"InvalidInstanceID.NotFound", "InvalidInstanceID.Malformed"}

QueryOutcome = tuple[List[ResourceRecord], Optional[PartialDiscoveryFailure]]


class DiscoveryEngine:
    """Inventory builder for a single instance.

    Each query is independent; one failing query degrades its resource kind to
    "skipped" without failing discovery as a whole. Only a missing instance is
    fatal.

    Attributes:
        config: Decommission configuration (region, profile, concurrency)
        clients: boto3 client factory
        queries: Per-kind queries, in inventory order
    """

    def __init__(
        self,
        config: DecomConfig,
        clients: Optional[ClientFactory] = None,
        queries: Optional[List[BaseDiscoveryQuery]] = None,
    ) -> None:
        """Initialize discovery engine.

        Args:
            config: Decommission configuration
            clients: Client factory (default: one built from config region/profile)
            queries: Queries to run (default: every supported resource kind)
        """
        self.config = config
        self.clients = clients or ClientFactory(region_name=config.region, profile_name=config.aws_profile)
        self.queries = queries if queries is not None else default_queries(config.default_security_group_id)

    def describe_instance(self, instance_id: str) -> InstanceDetails:
        """Look up the instance.

        Raises:
            InstanceNotFound: If the instance does not exist
        """
        client = self.clients.client("ec2")
        try:
            response = client.describe_instances(InstanceIds=[instance_id])
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in NOT_FOUND_CODES:
                raise InstanceNotFound(instance_id, error_code) from e
            raise

        instances = [i for r in response.get("Reservations", []) for i in r.get("Instances", [])]
        if not instances:
            raise InstanceNotFound(instance_id)

        return InstanceDetails.from_api(instances[0])

    def discover(self, instance_id: str) -> Inventory:
        """Build the inventory for an instance.

        Args:
            instance_id: EC2 instance id

        Returns:
            Inventory with every discovered resource and any skipped kinds

        Raises:
            InstanceNotFound: If the instance does not exist
        """
        handle = InstanceHandle(instance_id=instance_id, region=self.config.region)
        logger.info(f"Gathering resources for {handle}")

        details = self.describe_instance(instance_id)
        logger.debug(f"Instance {instance_id} is {details.state}")

        # Create clients up front; sessions must not be shared across threads
        clients = [self.clients.client(query.service_name) for query in self.queries]

        if self.config.concurrent_discovery and len(self.queries) > 1:
            outcomes = self._run_concurrently(clients, details)
        else:
            outcomes = [self._run_query(query, client, details) for query, client in zip(self.queries, clients)]

        inventory = Inventory(instance=handle, details=details)
        for records, failure in outcomes:
            if failure is not None:
                inventory.mark_skipped(failure)
            inventory.extend(records)
        inventory.discovered_at = datetime.utcnow()

        logger.info(f"Discovered {len(inventory)} resources for {instance_id}")
        if not inventory.is_complete:
            logger.warning(
                f"Partial discovery for {instance_id}: skipped "
                + ", ".join(kind.value for kind in inventory.skipped_kinds)
            )

        return inventory

    def _run_concurrently(self, clients: List[Any], details: InstanceDetails) -> List[QueryOutcome]:
        """Run queries on a thread pool; results keep the query order."""
        workers = max(1, min(self.config.discovery_workers, len(self.queries)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._run_query, query, client, details) for query, client in zip(self.queries, clients)
            ]
            return [future.result() for future in futures]

    def _run_query(self, query: BaseDiscoveryQuery, client: Any, details: InstanceDetails) -> QueryOutcome:
        """Run one query, converting AWS errors into a partial discovery failure."""
        try:
            records = query.discover(client, details)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            error_message = e.response.get("Error", {}).get("Message", str(e))
            reason = f"{error_code}: {error_message}"
        except BotoCoreError as e:
            reason = f"{type(e).__name__}: {e}"
        else:
            logger.debug(f"Found {len(records)} {query.kind.value} resource(s)")
            return records, None

        logger.warning(f"Could not discover {query.kind.value} for {details.instance_id}: {reason}")
        return [], PartialDiscoveryFailure(query.kind, reason)
