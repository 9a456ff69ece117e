"""Object store repository helpers for job results."""

from .results_repo import (
    ResultDecodeError,
    ResultNotFoundError,
    ResultStoreError,
    fetch_result,
    save_result,
)

__all__ = [
    "ResultDecodeError",
    "ResultNotFoundError",
    "ResultStoreError",
    "fetch_result",
    "save_result",
]
