"""Tests for Auto Scaling group membership."""

from unittest.mock import MagicMock

import pytest

from vault_aws.autoscaling import RUNNING_FILTER, AutoScalingMembership
from vault_protocols import GroupEmptyError, GroupNotFoundError


def make_membership(groups: list[dict], pages: list[dict] | None = None) -> AutoScalingMembership:
    autoscaling = MagicMock()
    autoscaling.describe_auto_scaling_groups.return_value = {"AutoScalingGroups": groups}
    ec2 = MagicMock()
    ec2.get_paginator.return_value.paginate.return_value = pages or []
    return AutoScalingMembership(autoscaling=autoscaling, ec2=ec2)


class TestListRunningMembers:
    @pytest.mark.asyncio
    async def test_collects_private_addresses_across_pages(self):
        membership = make_membership(
            groups=[{"Instances": [{"InstanceId": "i-1"}, {"InstanceId": "i-2"}, {"InstanceId": "i-3"}]}],
            pages=[
                {"Reservations": [{"Instances": [{"PrivateIpAddress": "10.0.1.10"}]}]},
                {
                    "Reservations": [
                        {"Instances": [{"PrivateIpAddress": "10.0.1.11"}, {"InstanceId": "i-3"}]}
                    ]
                },
            ],
        )

        addresses = await membership.list_running_members("vault-servers")

        assert addresses == ["10.0.1.10", "10.0.1.11"]
        membership.autoscaling.describe_auto_scaling_groups.assert_called_once_with(
            AutoScalingGroupNames=["vault-servers"]
        )
        membership.ec2.get_paginator.assert_called_once_with("describe_instances")
        membership.ec2.get_paginator.return_value.paginate.assert_called_once_with(
            InstanceIds=["i-1", "i-2", "i-3"], Filters=[RUNNING_FILTER]
        )

    @pytest.mark.asyncio
    async def test_missing_group(self):
        membership = make_membership(groups=[])

        with pytest.raises(GroupNotFoundError):
            await membership.list_running_members("vault-servers")

    @pytest.mark.asyncio
    async def test_group_without_instances(self):
        membership = make_membership(groups=[{"Instances": []}])

        with pytest.raises(GroupEmptyError):
            await membership.list_running_members("vault-servers")

        membership.ec2.get_paginator.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_running_instances(self):
        membership = make_membership(
            groups=[{"Instances": [{"InstanceId": "i-1"}]}],
            pages=[{"Reservations": []}],
        )

        assert await membership.list_running_members("vault-servers") == []


class TestFromSession:
    def test_creates_clients(self):
        session = MagicMock()

        membership = AutoScalingMembership.from_session(session)

        services = [c.args[0] for c in session.client.call_args_list]
        assert services == ["autoscaling", "ec2"]
        assert membership.autoscaling is session.client.return_value
