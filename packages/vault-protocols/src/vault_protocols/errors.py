"""
Error taxonomy for cluster initialization.

Every error carries enough context (node address, parameter name, step) to
diagnose a failed run, and never a secret value.

Attributes shared by all errors:
- retryable: Whether re-invoking the whole run may succeed. Errors raised
  for impossible cluster states are never retryable.
- severity: "critical" for errors that may mean lost key material,
  "error" otherwise.
"""


class VaultOperatorError(Exception):
    """Base class for all coordinator errors."""

    retryable: bool = False
    severity: str = "error"


class GroupNotFoundError(VaultOperatorError):
    """
    Raised when the server group does not exist.

    Attributes:
        group: Name of the missing group
    """

    def __init__(self, group: str) -> None:
        self.group = group
        super().__init__(f"server group `{group}` not found")


class GroupEmptyError(VaultOperatorError):
    """
    Raised when the server group has no running members.

    Attributes:
        group: Name of the empty group
    """

    def __init__(self, group: str) -> None:
        self.group = group
        super().__init__(f"server group `{group}` has no running instances")


class NodeUnreachableError(VaultOperatorError):
    """
    Raised when a replica cannot be queried.

    Transient: the probe loop drops or retries unreachable nodes.

    Attributes:
        address: Address of the node
        step: Operation that failed (e.g., "health", "init-status")
        reason: Short description of the underlying failure
    """

    retryable = True

    def __init__(self, address: str, step: str, reason: str) -> None:
        self.address = address
        self.step = step
        self.reason = reason
        super().__init__(f"node {address} unreachable during {step}: {reason}")


class ClusterStateMismatchError(VaultOperatorError):
    """
    Raised when reachable replicas disagree on initialization status.

    The replicas share one storage backend, so the disagreement cannot be
    fixed by retrying and indicates a configuration or backend error.

    Attributes:
        address: Address of the first disagreeing node
        expected: Initialization flag observed on the reference node
        observed: Initialization flag reported by this node
    """

    def __init__(self, address: str, expected: bool, observed: bool) -> None:
        self.address = address
        self.expected = expected
        self.observed = observed
        super().__init__(
            f"node {address} reports initialized={observed}, "
            f"but other nodes report initialized={expected}"
        )


class ImpossibleStateMismatchError(VaultOperatorError):
    """
    Raised when a node is still uninitialized after a bootstrap in this run.

    Attributes:
        address: Address of the node still reporting initialized=False
        bootstrap_address: Address of the node that was bootstrapped
    """

    def __init__(self, address: str, bootstrap_address: str) -> None:
        self.address = address
        self.bootstrap_address = bootstrap_address
        super().__init__(
            f"node {address} reports uninitialized after {bootstrap_address} "
            f"was initialized in this run"
        )


class BootstrapFailedError(VaultOperatorError):
    """
    Raised when the one-time initialization call fails.

    Retrying the whole run is safe: an initialized backend is detected and
    skipped on the next attempt.

    Attributes:
        address: Address of the node the bootstrap was issued to
        reason: Short description of the underlying failure
    """

    retryable = True

    def __init__(self, address: str, reason: str) -> None:
        self.address = address
        self.reason = reason
        super().__init__(f"initialization of node {address} failed: {reason}")


class SecretAlreadyExistsError(VaultOperatorError):
    """
    Raised by a secret store when a no-overwrite write hits an existing name.

    Attributes:
        name: Parameter name that already holds a value
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"parameter `{name}` already exists")


class SecretPersistFailedError(VaultOperatorError):
    """
    Raised when generated key material could not be stored.

    At this point the material exists only in memory. The run must not
    retry the bootstrap, which would fail against the initialized backend.

    Attributes:
        name: Parameter name that could not be written
        reason: Short description of the underlying failure
    """

    severity = "critical"

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"failed to persist parameter `{name}`: {reason}")


class CoordinationTimeoutError(VaultOperatorError):
    """
    Raised when the run exceeds its deadline or retry budget.

    Attributes:
        attempts: Number of probe rounds completed
        elapsed_seconds: Time spent before giving up
        step: Phase the run was in when the budget ran out
    """

    retryable = True

    def __init__(
        self, attempts: int, elapsed_seconds: float, step: str = "probe"
    ) -> None:
        self.attempts = attempts
        self.elapsed_seconds = elapsed_seconds
        self.step = step
        if step == "probe":
            message = (
                f"no reachable nodes after {attempts} probe round(s) "
                f"({elapsed_seconds:.1f}s)"
            )
        else:
            message = (
                f"run deadline exceeded during {step} after {attempts} probe "
                f"round(s) ({elapsed_seconds:.1f}s)"
            )
        super().__init__(message)
