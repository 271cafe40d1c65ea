# backend/gemhub/services/analytics/__init__.py
"""
Analytics Service Package.

Contribution, capital and income analytics for a portfolio.

Usage:
    from gemhub.services.analytics import AnalyticsService

    service = AnalyticsService(converter)
    result = service.get_analytics(portfolio, "BRL")
"""

from gemhub.services.analytics.service import AnalyticsService
from gemhub.services.analytics.types import (
    AnalyticsResult,
    CapitalMetrics,
    DividendBridge,
    MonthlyContribution,
)

__all__ = [
    "AnalyticsService",
    "AnalyticsResult",
    "CapitalMetrics",
    "DividendBridge",
    "MonthlyContribution",
]
