"""
Retry policy for probing a fully unreachable cluster.

When every replica fails a probe round the coordinator waits a fixed
interval and probes again. RetryPolicy bounds that loop with an attempt
budget and a deadline so a run never hangs its caller.
"""

from dataclasses import dataclass


@dataclass
class RetryPolicy:
    """
    Fixed-interval retry configuration.

    Attributes:
        interval_seconds: Wait between probe rounds (default 5.0)
        max_attempts: Maximum probe rounds, None for no attempt limit
        deadline_seconds: Maximum total time, None for no deadline

    Example:
        policy = RetryPolicy(interval_seconds=5.0, deadline_seconds=300.0)
        if policy.should_retry(attempt=3, elapsed_seconds=12.5):
            await asyncio.sleep(policy.interval_seconds)
    """

    interval_seconds: float = 5.0
    max_attempts: int | None = None
    deadline_seconds: float | None = None

    def should_retry(self, attempt: int, elapsed_seconds: float) -> bool:
        """
        Check if another probe round should be made.

        A round is only started if it can begin before the deadline, i.e.
        after sleeping one more interval.

        Args:
            attempt: Number of rounds completed so far
            elapsed_seconds: Time spent since the first round started

        Returns:
            True if another round fits within both budgets
        """
        if self.max_attempts is not None and attempt >= self.max_attempts:
            return False
        if self.deadline_seconds is not None:
            return elapsed_seconds + self.interval_seconds < self.deadline_seconds
        return True
