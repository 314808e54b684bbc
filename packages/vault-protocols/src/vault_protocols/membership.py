"""
Membership protocol definition.

A membership backend answers one question: which replicas of a logical
server group are currently running.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class MembershipProtocol(Protocol):
    """Protocol for cluster-membership lookups."""

    async def list_running_members(self, group: str) -> list[str]:
        """
        List the network addresses of running members of a group.

        Args:
            group: Logical group name (e.g., an Auto Scaling group).

        Returns:
            Addresses of members in the "running" lifecycle state.
            May be empty.

        Raises:
            GroupNotFoundError: If the group does not exist.
            GroupEmptyError: If the group exists but has no members.
        """
        ...
