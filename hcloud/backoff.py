"""Backoff policies used when the API reports a reached rate limit."""

from typing import Callable

# A backoff function returns the number of seconds to wait before the next
# retry. It is called with the number of retries already performed, so the
# first call receives 0.
BackoffFunc = Callable[[int], float]


def constant_backoff(delay: float) -> BackoffFunc:
    """Return a backoff function that always waits ``delay`` seconds."""

    def backoff(retries: int) -> float:
        return delay

    return backoff


def exponential_backoff(base: float, unit: float) -> BackoffFunc:
    """Return a backoff function computing ``base ** retries * unit``.

    Args:
        base: Growth factor applied per retry
        unit: Wait in seconds for the first retry

    Returns:
        BackoffFunc: Stateless function safe to share between calls
    """

    def backoff(retries: int) -> float:
        return (base ** retries) * unit

    return backoff


DEFAULT_BACKOFF = exponential_backoff(2, 0.5)
