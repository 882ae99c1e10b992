"""Domain exceptions."""
from queuelens.domain.exceptions.domain_errors import (
    DomainError,
    AnalyticsError,
    AnalyticsErrorType,
    AnalyticsValidationError,
    AnalyticsNotFoundError,
    AnalyticsOperationError,
)

__all__ = [
    "DomainError",
    "AnalyticsError",
    "AnalyticsErrorType",
    "AnalyticsValidationError",
    "AnalyticsNotFoundError",
    "AnalyticsOperationError",
]
