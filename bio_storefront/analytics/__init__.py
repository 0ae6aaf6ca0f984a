"""
Page Analytics

Event recording on the write side, windowed rollups on the read side.
"""

from bio_storefront.analytics.aggregator import AnalyticsAggregator, AnalyticsReport, AnalyticsSummary
from bio_storefront.analytics.devices import classify_device
from bio_storefront.analytics.recorder import EventRecorder
from bio_storefront.analytics.rollups import Period, parse_period

__all__ = [
    "AnalyticsAggregator",
    "AnalyticsReport",
    "AnalyticsSummary",
    "EventRecorder",
    "Period",
    "classify_device",
    "parse_period",
]
