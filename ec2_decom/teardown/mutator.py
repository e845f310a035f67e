"""AWS mutation calls for teardown steps.

Maps each (verb, target) pair to its boto3 call, and each service error code
that means "already in the target state" to a skipped outcome.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from botocore.exceptions import BotoCoreError, ClientError, WaiterError

from ..aws.client import ClientFactory
from ..cli.config import DecomConfig
from ..exceptions import StepFailed, WaitTimeout
from ..models.plan import ActionVerb, TeardownStep
from ..models.resource import ResourceKind
from ..models.step_result import ALREADY_STOPPED, StepStatus

logger = logging.getLogger(__name__)

ALREADY_TERMINATED = "already terminated"
ALREADY_DETACHED = "already detached"
NO_ROLE_BOUND = "no role bound to instance profile"

# Error codes treated as "already in target state": (verb, target) -> {code: skip reason}
SKIPPABLE_ERRORS: dict[tuple[ActionVerb, ResourceKind], dict[str, str]] = {
    (ActionVerb.TERMINATE, ResourceKind.INSTANCE): {
        "InvalidInstanceID.NotFound": ALREADY_TERMINATED,
    },
    (ActionVerb.DEREGISTER, ResourceKind.TARGET_GROUP_REGISTRATION): {
        "TargetGroupNotFound": "target group not found",
        "InvalidTarget": "instance not registered",
    },
    (ActionVerb.RELEASE, ResourceKind.ELASTIC_IP): {
        "InvalidAllocationID.NotFound": "address already released",
    },
    (ActionVerb.DETACH, ResourceKind.VOLUME): {
        "IncorrectState": ALREADY_DETACHED,
        "InvalidAttachment.NotFound": ALREADY_DETACHED,
        "InvalidVolume.NotFound": "volume not found",
    },
    (ActionVerb.DELETE, ResourceKind.VOLUME): {
        "InvalidVolume.NotFound": "volume already deleted",
    },
    (ActionVerb.DELETE, ResourceKind.NETWORK_INTERFACE): {
        "InvalidNetworkInterfaceID.NotFound": "network interface already deleted",
    },
    (ActionVerb.DELETE, ResourceKind.SECURITY_GROUP): {
        "InvalidGroup.NotFound": "security group already deleted",
    },
    (ActionVerb.REMOVE_ROLE_BINDING, ResourceKind.IAM_PROFILE): {
        "NoSuchEntity": "role already removed from instance profile",
    },
    (ActionVerb.DELETE, ResourceKind.IAM_PROFILE): {
        "NoSuchEntity": "instance profile already deleted",
    },
    (ActionVerb.DELETE, ResourceKind.IAM_ROLE): {
        "NoSuchEntity": "role already deleted",
    },
    (ActionVerb.DELETE, ResourceKind.ALARM): {
        "ResourceNotFound": "alarm already deleted",
    },
    (ActionVerb.DELETE, ResourceKind.ASSOCIATION): {
        "AssociationDoesNotExist": "association already deleted",
    },
}

RETRYABLE_ERRORS = {"DependencyViolation"}

MutationOutcome = tuple[StepStatus, Optional[str], Optional[str]]


class ResourceMutator:
    """AWS mutation orchestrator for teardown steps.

    Issues exactly one mutation (plus its wait, for blocking steps) per step.
    DependencyViolation errors are retried with exponential backoff; waits are
    attempted once.
    """

    def __init__(self, config: DecomConfig, clients: Optional[ClientFactory] = None) -> None:
        """Initialize mutator.

        Args:
            config: Decommission configuration (retries, wait bounds)
            clients: Client factory (default: one built from config region/profile)
        """
        self.config = config
        self.max_retries = max(1, config.max_retries)
        self.clients = clients or ClientFactory(region_name=config.region, profile_name=config.aws_profile)

        self._handlers: dict[tuple[ActionVerb, ResourceKind], Callable[[TeardownStep, str], Optional[str]]] = {
            (ActionVerb.STOP, ResourceKind.INSTANCE): self._stop_instance,
            (ActionVerb.TERMINATE, ResourceKind.INSTANCE): self._terminate_instance,
            (ActionVerb.DEREGISTER, ResourceKind.TARGET_GROUP_REGISTRATION): self._deregister_target,
            (ActionVerb.RELEASE, ResourceKind.ELASTIC_IP): self._release_address,
            (ActionVerb.DETACH, ResourceKind.VOLUME): self._detach_volume,
            (ActionVerb.DELETE, ResourceKind.VOLUME): self._delete_volume,
            (ActionVerb.DELETE, ResourceKind.NETWORK_INTERFACE): self._delete_network_interface,
            (ActionVerb.DELETE, ResourceKind.SECURITY_GROUP): self._delete_security_group,
            (ActionVerb.REMOVE_ROLE_BINDING, ResourceKind.IAM_PROFILE): self._remove_role_binding,
            (ActionVerb.DELETE, ResourceKind.IAM_PROFILE): self._delete_instance_profile,
            (ActionVerb.DELETE, ResourceKind.IAM_ROLE): self._delete_role,
            (ActionVerb.DELETE, ResourceKind.ALARM): self._delete_alarm,
            (ActionVerb.DELETE, ResourceKind.ASSOCIATION): self._delete_association,
        }

    def supports(self, step: TeardownStep) -> bool:
        return (step.verb, step.target_kind) in self._handlers

    def apply(self, step: TeardownStep, instance_id: str) -> MutationOutcome:
        """Apply one teardown step.

        Args:
            step: Step to apply
            instance_id: Instance being decommissioned

        Returns:
            Tuple of (status, reason, error_code); the service's error message is
            kept verbatim in reason
        """
        key = (step.verb, step.target_kind)
        if not self.supports(step):
            error_msg = f"Unsupported step: {step.description}"
            logger.warning(error_msg)
            return (StepStatus.FAILED, error_msg, "Unsupported")

        handler = self._handlers[key]

        for attempt in range(self.max_retries):
            try:
                skip_reason = handler(step, instance_id)

            except ClientError as e:
                error_code = e.response.get("Error", {}).get("Code", "Unknown")
                error_message = e.response.get("Error", {}).get("Message", str(e))

                skip_reason = SKIPPABLE_ERRORS.get(key, {}).get(error_code)
                if skip_reason is not None:
                    logger.info(f"Skipping {step.description}: {skip_reason} ({error_code})")
                    return (StepStatus.SKIPPED, skip_reason, None)

                if error_code in RETRYABLE_ERRORS and attempt < self.max_retries - 1:
                    wait_time = 2**attempt
                    logger.debug(
                        f"{error_code} for {step.description}, "
                        f"retrying in {wait_time}s (attempt {attempt + 1}/{self.max_retries})"
                    )
                    time.sleep(wait_time)
                    continue

                logger.error(f"Failed to {step.description}: {error_code} - {error_message}")
                return (StepStatus.FAILED, f"{error_code}: {error_message}", error_code)

            except StepFailed as e:
                logger.error(f"Failed to {step.description}: {e.reason}")
                return (StepStatus.FAILED, e.reason, e.error_code)

            except BotoCoreError as e:
                error_msg = f"{type(e).__name__}: {e}"
                logger.error(f"Failed to {step.description}: {error_msg}")
                return (StepStatus.FAILED, error_msg, type(e).__name__)

            if skip_reason is not None:
                logger.info(f"Skipping {step.description}: {skip_reason}")
                return (StepStatus.SKIPPED, skip_reason, None)

            logger.info(f"Completed {step.description}")
            return (StepStatus.SUCCEEDED, None, None)

        # Unreachable: the last attempt always returns
        return (StepStatus.FAILED, f"Failed to {step.description} after {self.max_retries} attempts", None)

    def _wait(self, client: Any, waiter_name: str, resource_id: str, **params: Any) -> None:
        """Block until the waiter's target state is reached.

        Raises:
            WaitTimeout: If the state is not reached within the configured bound
        """
        logger.info(f"Waiting for {resource_id} to reach {waiter_name.replace('_', ' ')}")
        try:
            client.get_waiter(waiter_name).wait(WaiterConfig=self.config.waiter_config, **params)
        except WaiterError as e:
            raise WaitTimeout(waiter_name, resource_id, str(e)) from e

    # Instance

    def _stop_instance(self, step: TeardownStep, instance_id: str) -> Optional[str]:
        ec2 = self.clients.client("ec2")
        response = ec2.stop_instances(InstanceIds=[step.target_id])
        previous = _previous_state(response.get("StoppingInstances", []))
        if previous == "stopped":
            return ALREADY_STOPPED
        self._wait(ec2, "instance_stopped", step.target_id, InstanceIds=[step.target_id])
        return None

    def _terminate_instance(self, step: TeardownStep, instance_id: str) -> Optional[str]:
        ec2 = self.clients.client("ec2")
        response = ec2.terminate_instances(InstanceIds=[step.target_id])
        previous = _previous_state(response.get("TerminatingInstances", []))
        if previous == "terminated":
            return ALREADY_TERMINATED
        self._wait(ec2, "instance_terminated", step.target_id, InstanceIds=[step.target_id])
        return None

    # Attached resources

    def _deregister_target(self, step: TeardownStep, instance_id: str) -> Optional[str]:
        target: dict[str, Any] = {"Id": instance_id}
        port = step.record.metadata.get("port") if step.record else None
        if port:
            target["Port"] = port
        self.clients.client("elbv2").deregister_targets(TargetGroupArn=step.target_id, Targets=[target])
        return None

    def _release_address(self, step: TeardownStep, instance_id: str) -> Optional[str]:
        ec2 = self.clients.client("ec2")
        association_id = step.record.metadata.get("association_id") if step.record else None
        if association_id:
            try:
                ec2.disassociate_address(AssociationId=association_id)
            except ClientError as e:
                if e.response.get("Error", {}).get("Code") != "InvalidAssociationID.NotFound":
                    raise
        ec2.release_address(AllocationId=step.target_id)
        return None

    def _detach_volume(self, step: TeardownStep, instance_id: str) -> Optional[str]:
        ec2 = self.clients.client("ec2")
        ec2.detach_volume(VolumeId=step.target_id, InstanceId=instance_id)
        self._wait(ec2, "volume_available", step.target_id, VolumeIds=[step.target_id])
        return None

    def _delete_volume(self, step: TeardownStep, instance_id: str) -> Optional[str]:
        self.clients.client("ec2").delete_volume(VolumeId=step.target_id)
        return None

    def _delete_network_interface(self, step: TeardownStep, instance_id: str) -> Optional[str]:
        self.clients.client("ec2").delete_network_interface(NetworkInterfaceId=step.target_id)
        return None

    def _delete_security_group(self, step: TeardownStep, instance_id: str) -> Optional[str]:
        self.clients.client("ec2").delete_security_group(GroupId=step.target_id)
        return None

    # IAM

    def _remove_role_binding(self, step: TeardownStep, instance_id: str) -> Optional[str]:
        role_name = step.record.metadata.get("role_name") if step.record else None
        if not role_name:
            return NO_ROLE_BOUND
        self.clients.client("iam").remove_role_from_instance_profile(
            InstanceProfileName=step.target_id,
            RoleName=role_name,
        )
        return None

    def _delete_instance_profile(self, step: TeardownStep, instance_id: str) -> Optional[str]:
        self.clients.client("iam").delete_instance_profile(InstanceProfileName=step.target_id)
        return None

    def _delete_role(self, step: TeardownStep, instance_id: str) -> Optional[str]:
        role_name = step.record.metadata.get("role_name") if step.record else None
        if not role_name:
            return NO_ROLE_BOUND

        iam = self.clients.client("iam")

        # IAM refuses to delete a role that still has policies
        for page in iam.get_paginator("list_attached_role_policies").paginate(RoleName=role_name):
            for policy in page.get("AttachedPolicies", []):
                logger.debug(f"Detaching {policy['PolicyArn']} from {role_name}")
                iam.detach_role_policy(RoleName=role_name, PolicyArn=policy["PolicyArn"])

        for page in iam.get_paginator("list_role_policies").paginate(RoleName=role_name):
            for policy_name in page.get("PolicyNames", []):
                logger.debug(f"Deleting inline policy {policy_name} from {role_name}")
                iam.delete_role_policy(RoleName=role_name, PolicyName=policy_name)

        iam.delete_role(RoleName=role_name)
        return None

    # Monitoring and management

    def _delete_alarm(self, step: TeardownStep, instance_id: str) -> Optional[str]:
        self.clients.client("cloudwatch").delete_alarms(AlarmNames=[step.target_id])
        return None

    def _delete_association(self, step: TeardownStep, instance_id: str) -> Optional[str]:
        self.clients.client("ssm").delete_association(AssociationId=step.target_id)
        return None


def _previous_state(state_changes: list[dict[str, Any]]) -> Optional[str]:
    """Previous state name from a stop/terminate response, if reported."""
    if not state_changes:
        return None
    return state_changes[0].get("PreviousState", {}).get("Name")
