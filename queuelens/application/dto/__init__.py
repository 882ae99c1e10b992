"""Application DTOs - Data Transfer Objects for the analytics service."""
from queuelens.application.dto.analytics_dto import (
    AnalyticsSummaryDTO,
    PaginatedAnalyticsDTO,
    PaginationDTO,
    present,
    rounded,
)

__all__ = [
    "AnalyticsSummaryDTO",
    "PaginatedAnalyticsDTO",
    "PaginationDTO",
    "present",
    "rounded",
]
