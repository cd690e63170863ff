"""Complaint lifecycle, query and audit configuration.

Environment Variables:
- LIFECYCLE_ENFORCE_NOMINAL_TRANSITIONS: Only allow Reported -> Verified ->
  InProgress -> Resolved (default: false, any target status accepted)
- RECONCILIATION_CONCURRENCY: Parallel ledger lookups during an audit
  (default: 8)
- RECONCILIATION_INTERVAL_SECONDS: Period of the background audit, 0
  disables it (default: 3600)
- COMPLAINT_PAGE_LIMIT_MAX: Largest accepted page size (default: 100)
- NEARBY_DEFAULT_DISTANCE_M: Default radius for nearby search (default: 5000)
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _get_int_env(key: str, default: int) -> int:
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    value = os.environ.get(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ComplaintLifecycleConfig:
    """Lifecycle behaviour switches.

    Attributes:
        enforce_nominal_transitions: Reject status changes outside the
            nominal edge set with InvalidStatusTransitionError.
    """

    enforce_nominal_transitions: bool = False

    @classmethod
    def from_environment(cls) -> ComplaintLifecycleConfig:
        return cls(
            enforce_nominal_transitions=_get_bool_env(
                "LIFECYCLE_ENFORCE_NOMINAL_TRANSITIONS", False
            ),
        )


@dataclass(frozen=True)
class ReconciliationConfig:
    """Reconciliation audit settings.

    Attributes:
        concurrency: Maximum in-flight ledger existence checks.
        interval_seconds: Period of the background audit; 0 disables it.
        check_integrity: Whether the background audit also compares hashes.
    """

    concurrency: int = 8
    interval_seconds: float = 3600.0
    check_integrity: bool = False

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {self.concurrency}")
        if self.interval_seconds < 0:
            raise ValueError(
                f"interval_seconds must be non-negative, got {self.interval_seconds}"
            )

    @property
    def worker_enabled(self) -> bool:
        return self.interval_seconds > 0

    @classmethod
    def from_environment(cls) -> ReconciliationConfig:
        return cls(
            concurrency=_get_int_env("RECONCILIATION_CONCURRENCY", 8),
            interval_seconds=_get_float_env("RECONCILIATION_INTERVAL_SECONDS", 3600.0),
            check_integrity=_get_bool_env("RECONCILIATION_CHECK_INTEGRITY", False),
        )


@dataclass(frozen=True)
class ComplaintQueryConfig:
    """Listing and geo-search limits.

    Attributes:
        default_page_limit: Page size when none is given.
        max_page_limit: Largest page size accepted.
        nearby_default_distance_m: Default nearby-search radius.
        duplicate_radius_m: Radius for duplicate candidates.
        duplicate_candidate_limit: Newest candidates compared for duplicates.
        duplicate_min_similarity_percent: Threshold to report a duplicate.
        duplicate_max_results: Duplicates returned.
    """

    default_page_limit: int = 20
    max_page_limit: int = 100
    nearby_default_distance_m: float = 5000.0
    duplicate_radius_m: float = 2000.0
    duplicate_candidate_limit: int = 50
    duplicate_min_similarity_percent: int = 25
    duplicate_max_results: int = 5

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not 1 <= self.default_page_limit <= self.max_page_limit:
            raise ValueError(
                f"default_page_limit ({self.default_page_limit}) must be between 1 "
                f"and max_page_limit ({self.max_page_limit})"
            )
        if self.nearby_default_distance_m <= 0 or self.duplicate_radius_m <= 0:
            raise ValueError("search radii must be positive")
        if not 0 <= self.duplicate_min_similarity_percent <= 100:
            raise ValueError("duplicate_min_similarity_percent must be within 0..100")

    @classmethod
    def from_environment(cls) -> ComplaintQueryConfig:
        return cls(
            max_page_limit=_get_int_env("COMPLAINT_PAGE_LIMIT_MAX", 100),
            nearby_default_distance_m=_get_float_env("NEARBY_DEFAULT_DISTANCE_M", 5000.0),
        )


DEFAULT_LIFECYCLE_CONFIG = ComplaintLifecycleConfig()
STRICT_LIFECYCLE_CONFIG = ComplaintLifecycleConfig(enforce_nominal_transitions=True)
DEFAULT_RECONCILIATION_CONFIG = ReconciliationConfig()
TEST_RECONCILIATION_CONFIG = ReconciliationConfig(concurrency=4, interval_seconds=0.05)
DEFAULT_QUERY_CONFIG = ComplaintQueryConfig()
