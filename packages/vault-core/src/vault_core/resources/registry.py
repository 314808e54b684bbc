"""
Registry mapping custom-resource type names to handlers.

A handler may be registered under several names (e.g. the logical-write
handler answers to VaultData, VaultLogical, VaultSecret and VaultPath).

Example:
    ```python
    registry = ResourceRegistry()
    registry.register(InitResourceHandler(...), "Init", "VaultInit")
    handler = registry.get("VaultInit")
    ```
"""

from vault_core.resources.handler import ResourceHandler


class UnknownResourceTypeError(LookupError):
    """
    Raised when no handler is registered for a resource type.

    Attributes:
        resource_type: The unknown type name
        available: Registered type names
    """

    def __init__(self, resource_type: str, available: list[str]) -> None:
        self.resource_type = resource_type
        self.available = available
        super().__init__(
            f"Unknown resource type '{resource_type}'. "
            f"Available types: {', '.join(available) or 'none'}"
        )


class ResourceRegistry:
    """Name-to-handler lookup for the dispatcher."""

    def __init__(self) -> None:
        self._handlers: dict[str, ResourceHandler] = {}

    def register(self, handler: ResourceHandler, *names: str) -> None:
        """
        Register handler under every given name.

        Raises:
            ValueError: If no name is given or a name is already taken
        """
        if not names:
            raise ValueError("at least one resource type name is required")
        for name in names:
            if name in self._handlers:
                raise ValueError(f"resource type '{name}' is already registered")
        for name in names:
            self._handlers[name] = handler

    def get(self, name: str) -> ResourceHandler:
        """
        Find the handler for a resource type name.

        Raises:
            UnknownResourceTypeError: If no handler is registered
        """
        try:
            return self._handlers[name]
        except KeyError:
            raise UnknownResourceTypeError(name, self.list_names()) from None

    def list_names(self) -> list[str]:
        """Registered type names, sorted."""
        return sorted(self._handlers)

    def __contains__(self, name: str) -> bool:
        return name in self._handlers
