"""
Secret-store protocol definition.

The secret store is a durable, versioned key/value service (SSM Parameter
Store in production). Writes requested with overwrite=False act as a
compare-and-set: the store alone decides whether a name already holds a
value, which makes it the arbiter between concurrent duplicate runs.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class SecretStoreProtocol(Protocol):
    """Protocol for versioned secret storage."""

    async def put(
        self,
        name: str,
        value: str,
        overwrite: bool = False,
        encryption_key: str | None = None,
        description: str = "",
    ) -> int:
        """
        Store a value under name.

        Args:
            name: Parameter name.
            value: Value to store.
            overwrite: Replace an existing value. When False, writing to an
                existing name raises SecretAlreadyExistsError.
            encryption_key: Optional key reference; stores the value encrypted.
            description: Human-readable description.

        Returns:
            Version number of the stored value.
        """
        ...

    async def get(self, name: str) -> tuple[str, int]:
        """
        Read the latest value stored under name.

        Returns:
            Tuple of (value, version).
        """
        ...
