"""
Auto Scaling group membership backend.

Lists the private addresses of the running EC2 instances in an Auto
Scaling group: the group's instance ids come from DescribeAutoScalingGroups
and are filtered to instance-state-name=running through DescribeInstances.
"""

import logging
from dataclasses import dataclass
from typing import Any

import boto3

from vault_aws.aws import BOTO_CONFIG, run_sync
from vault_protocols import GroupEmptyError, GroupNotFoundError

logger = logging.getLogger(__name__)

RUNNING_FILTER = {"Name": "instance-state-name", "Values": ["running"]}


@dataclass
class AutoScalingMembership:
    """
    MembershipProtocol implementation backed by EC2 Auto Scaling.

    Attributes:
        autoscaling: boto3 "autoscaling" client.
        ec2: boto3 "ec2" client.

    Example:
        membership = AutoScalingMembership.from_session(boto3.Session())
        addresses = await membership.list_running_members("vault-servers")
    """

    autoscaling: Any
    ec2: Any

    @classmethod
    def from_session(cls, session: boto3.Session) -> "AutoScalingMembership":
        return cls(
            autoscaling=session.client("autoscaling", config=BOTO_CONFIG),
            ec2=session.client("ec2", config=BOTO_CONFIG),
        )

    async def list_running_members(self, group: str) -> list[str]:
        return await run_sync(self._list_running_members, group)

    def _list_running_members(self, group: str) -> list[str]:
        described = self.autoscaling.describe_auto_scaling_groups(
            AutoScalingGroupNames=[group]
        )
        groups = described.get("AutoScalingGroups", [])
        if not groups:
            raise GroupNotFoundError(group)

        instance_ids = [i["InstanceId"] for i in groups[0].get("Instances", [])]
        if not instance_ids:
            raise GroupEmptyError(group)

        addresses = []
        paginator = self.ec2.get_paginator("describe_instances")
        for page in paginator.paginate(InstanceIds=instance_ids, Filters=[RUNNING_FILTER]):
            for reservation in page.get("Reservations", []):
                for instance in reservation.get("Instances", []):
                    address = instance.get("PrivateIpAddress")
                    if address:
                        addresses.append(address)

        logger.debug(
            "Group %s: %d instance(s), %d running",
            group,
            len(instance_ids),
            len(addresses),
        )
        return addresses
