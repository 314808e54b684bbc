"""
Membership resolution for a Vault server group.

Turns the running members of a logical group into ReplicaEndpoints. Pure
query: no side effects and no internal retries, the caller owns the retry
policy.
"""

import logging
from dataclasses import dataclass

from vault_protocols import (
    DEFAULT_PORT,
    DEFAULT_SCHEME,
    GroupEmptyError,
    MembershipProtocol,
    ReplicaEndpoint,
)

logger = logging.getLogger(__name__)


@dataclass
class MembershipResolver:
    """
    Resolves a server group into replica endpoints.

    Attributes:
        membership: Backend listing running members of a group.
        scheme: URL scheme of the Vault listeners ("http" or "https").
        port: Port of the Vault listeners.

    Example:
        resolver = MembershipResolver(membership=AutoScalingMembership(), port=8200)
        endpoints = await resolver.resolve("vault-servers")
    """

    membership: MembershipProtocol
    scheme: str = DEFAULT_SCHEME
    port: int = DEFAULT_PORT

    async def resolve(self, group: str) -> list[ReplicaEndpoint]:
        """
        Resolve the running members of group.

        Args:
            group: Logical group name.

        Returns:
            Endpoints deduplicated and sorted by address.

        Raises:
            GroupNotFoundError: If the group does not exist.
            GroupEmptyError: If the group has no running members.
        """
        addresses = await self.membership.list_running_members(group)
        if not addresses:
            raise GroupEmptyError(group)

        endpoints = [
            ReplicaEndpoint.from_address(address, scheme=self.scheme, port=self.port)
            for address in sorted(set(addresses))
        ]
        logger.info(
            "Resolved %d running member(s) in group %s: %s",
            len(endpoints),
            group,
            ", ".join(e.address for e in endpoints),
        )
        return endpoints
