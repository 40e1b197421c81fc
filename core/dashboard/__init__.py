"""
Dashboard metrics module: time windows, weekly pull request trends,
merge-time statistics, branch activity and per-repository fan-out
"""

from .aggregator import MetricsAggregator, PullRequestSummary, TrendPoint, BranchActivitySample, week_bucket
from .time_range import TimeRange, resolve_time_range
from .fanout import gather_per_repository, parse_repository_key, repository_key

__all__ = [
    'MetricsAggregator',
    'PullRequestSummary',
    'TrendPoint',
    'BranchActivitySample',
    'week_bucket',
    'TimeRange',
    'resolve_time_range',
    'gather_per_repository',
    'parse_repository_key',
    'repository_key'
]
