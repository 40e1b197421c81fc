"""
Metrics aggregator for the repository dashboard
Groups pull requests into weekly buckets and computes merge-time statistics
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from core.github.client import Branch, PullRequest
from .time_range import TimeRange
from utils.logger import get_logger

logger = get_logger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24

AverageMergeTime = Union[str, int]


def week_bucket(moment: datetime) -> str:
    """Bucket key ``<year>-W<n>`` where n is ceil(day_of_month / 7).

    This is not an ISO week: the same key is produced for the first days of
    every month in a year.
    """
    return f"{moment.year}-W{math.ceil(moment.day / 7)}"


def format_average(total_days: float, count: int) -> AverageMergeTime:
    """Mean in days rounded half-up to two decimals, or the integer 0"""
    if count == 0:
        return 0
    average = Decimal(total_days / count).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return str(average)


@dataclass(frozen=True)
class TrendPoint:
    week: str
    pr_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"week": self.week, "pr_count": self.pr_count}


@dataclass(frozen=True)
class BranchActivitySample:
    """Snapshot of the branch count at the start of the window"""
    date: str
    branches_created: int
    branches_deleted: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "branches_created": self.branches_created,
            "branches_deleted": self.branches_deleted
        }


@dataclass(frozen=True)
class PullRequestSummary:
    """Weekly trend plus average merge time for one aggregation pass"""
    trends: List[TrendPoint] = field(default_factory=list)
    avg_merge_time: AverageMergeTime = 0
    qualifying_count: int = 0


class MetricsAggregator:
    """Aggregates fetched pull requests and branches within a time window"""

    def __init__(self, time_range: TimeRange):
        self.time_range = time_range

    def _summarize(self, spans: Iterable[Tuple[datetime, Optional[datetime]]]) -> PullRequestSummary:
        # spans are (created_at, finished_at) pairs in input order
        counts: Dict[str, int] = {}
        total_days = 0.0
        qualifying = 0

        for created_at, finished_at in spans:
            if finished_at is None:
                continue

            finished_local = self.time_range.localize(finished_at)
            if finished_local < self.time_range.start:
                continue

            week = week_bucket(finished_local)
            counts[week] = counts.get(week, 0) + 1

            total_days += (finished_at - created_at).total_seconds() / SECONDS_PER_DAY
            qualifying += 1

        return PullRequestSummary(
            trends=[TrendPoint(week, count) for week, count in counts.items()],
            avg_merge_time=format_average(total_days, qualifying),
            qualifying_count=qualifying
        )

    def summarize_pull_requests(self, pull_requests: Iterable[PullRequest]) -> PullRequestSummary:
        """Repository-wide summary: only merged pull requests qualify"""
        return self._summarize((pr.created_at, pr.merged_at) for pr in pull_requests)

    def summarize_developer_pull_requests(self, pull_requests: Iterable[PullRequest],
                                          developer: str) -> PullRequestSummary:
        """
        Summary for a single author

        Unlike the repository-wide summary, a pull request closed without
        merging counts here, using its close time in place of a merge time.

        Args:
            pull_requests: Fetched pull requests
            developer: Author login, matched exactly (case-sensitive)
        """
        return self._summarize(
            (pr.created_at, pr.merged_at or pr.closed_at)
            for pr in pull_requests
            if pr.author is not None and pr.author == developer
        )

    def sample_branch_activity(self, branches: List[Branch]) -> List[BranchActivitySample]:
        """One sample per call; GitHub keeps no branch deletion history"""
        return [BranchActivitySample(
            date=self.time_range.start_date,
            branches_created=len(branches),
            branches_deleted=0
        )]

    def repository_metrics(self, pull_requests: List[PullRequest],
                           branches: List[Branch]) -> Dict[str, Any]:
        summary = self.summarize_pull_requests(pull_requests)
        logger.debug(
            f"Aggregated {summary.qualifying_count} of {len(pull_requests)} pull requests "
            f"into {len(summary.trends)} weekly buckets"
        )
        return {
            "pr_trends": [point.to_dict() for point in summary.trends],
            "avg_merge_time": summary.avg_merge_time,
            "branch_activity": [sample.to_dict() for sample in self.sample_branch_activity(branches)]
        }

    def developer_metrics(self, pull_requests: List[PullRequest], developer: str) -> Dict[str, Any]:
        summary = self.summarize_developer_pull_requests(pull_requests, developer)
        return {
            "individual_pr_trends": [point.to_dict() for point in summary.trends],
            "avg_merge_time": summary.avg_merge_time
        }
