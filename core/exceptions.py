"""
Exceptions raised by the adaptive learning core.

The engine never swallows these; callers decide how to recover
(fallback content, wider band, rejecting a bad record, ...).
"""

from typing import Optional


class AdaptiveLearningError(Exception):
    """Base class for all adaptive learning errors."""


class NoEligibleContentError(AdaptiveLearningError):
    """No content item survived ZPD, prerequisite and age filtering."""

    def __init__(self, lower_bound: float, upper_bound: float, catalog_size: int,
                 ability: Optional[float] = None):
        self.lower_bound = lower_bound
        self.upper_bound = upper_bound
        self.catalog_size = catalog_size
        self.ability = ability
        super().__init__(
            f"No eligible content among {catalog_size} item(s) "
            f"for difficulty band [{lower_bound:.1f}, {upper_bound:.1f}]"
        )


class InvalidPerformanceError(AdaptiveLearningError, ValueError):
    """A performance record violates the input contract."""


class CatalogError(AdaptiveLearningError):
    """The content catalog is malformed (bad file, cyclic prerequisites)."""
