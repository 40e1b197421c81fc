from datetime import datetime, timedelta, timezone

from core.github import RateLimitExceededError

from conftest import make_branch, make_pr, upstream_error, utc


def recent(days_ago):
    return datetime.now(timezone.utc) - timedelta(days=days_ago)


class TestRepositoryRoutes:

    def test_list_repositories_passes_through(self, client, fake_github):
        """Test /repos returns the upstream list"""
        fake_github.repositories = [{"id": 1, "name": "repo", "owner": {"login": "octo"}}]

        response = client.get("/repos", params={"token": "t"})

        assert response.status_code == 200
        assert response.json() == [{"id": 1, "name": "repo", "owner": {"login": "octo"}}]

    def test_branches(self, client, fake_github):
        """Test /branches returns mapped branches"""
        fake_github.branches["octo/repo"] = [make_branch("main"), make_branch("dev")]

        response = client.get("/branches/octo/repo", params={"token": "t"})

        assert response.status_code == 200
        assert response.json() == {"branches": [
            {"name": "main", "commit_sha": "sha-main",
             "commit_url": "https://api.github.com/repos/octo/repo/commits/sha-main"},
            {"name": "dev", "commit_sha": "sha-dev",
             "commit_url": "https://api.github.com/repos/octo/repo/commits/sha-dev"},
        ]}

    def test_pull_requests_fetch_all_states(self, client, fake_github):
        """Test /pulls requests every state"""
        fake_github.pull_requests["octo/repo"] = [
            make_pr(1, created_at=utc(2024, 4, 28), merged_at=utc(2024, 5, 2), user="alice"),
            make_pr(2, created_at=utc(2024, 5, 5), state="open"),
        ]

        response = client.get("/pulls/octo/repo", params={"token": "t"})

        assert response.status_code == 200
        pulls = response.json()["pullRequests"]
        assert pulls[0] == {
            "id": 1,
            "title": "PR 1",
            "state": "closed",
            "created_at": "2024-04-28T12:00:00Z",
            "merged_at": "2024-05-02T12:00:00Z",
            "user": "alice",
            "url": "https://github.com/octo/repo/pull/1",
        }
        assert pulls[1]["merged_at"] is None
        assert ("pulls", "octo/repo", "all") in fake_github.calls

    def test_upstream_error_is_500(self, client, fake_github):
        """Test an upstream failure becomes a 500 with an error body"""
        fake_github.failures["octo/missing"] = upstream_error()

        response = client.get("/branches/octo/missing", params={"token": "t"})

        assert response.status_code == 500
        assert response.json() == {"error": "Request failed with status code 404: Not Found"}

    def test_rate_limit_is_403(self, client, fake_github):
        """Test a rate limit becomes a 403 with the fixed message"""
        fake_github.failures["octo/repo"] = RateLimitExceededError()

        response = client.get("/pulls/octo/repo", params={"token": "t"})

        assert response.status_code == 403
        assert response.json() == {"error": "GitHub API rate limit exceeded. Try again later."}

    def test_repo_data_batch_isolates_failures(self, client, fake_github):
        """Test /repo-data reports failures per repository"""
        fake_github.failures["octo/a"] = upstream_error()
        fake_github.branches["octo/b"] = [make_branch()]
        fake_github.pull_requests["octo/b"] = [make_pr()]

        response = client.get("/repo-data", params=[("repos", "octo/a"), ("repos", "octo/b"), ("token", "t")])

        assert response.status_code == 200
        data = response.json()
        assert data["octo/a"]["error"] == "Request failed with status code 404: Not Found"
        assert data["octo/a"]["status"] == 404
        assert [b["name"] for b in data["octo/b"]["branches"]] == ["main"]
        assert len(data["octo/b"]["pullRequests"]) == 1

    def test_repo_data_accepts_comma_separated_keys(self, client, fake_github):
        """Test /repo-data accepts comma-separated keys"""
        response = client.get("/repo-data", params={"repos": "octo/a,octo/b,broken"})

        data = response.json()
        assert data["octo/a"] == {"branches": [], "pullRequests": []}
        assert data["octo/b"] == {"branches": [], "pullRequests": []}
        assert "error" in data["broken"]


class TestMetricsRoutes:

    def test_metrics_for_recent_merges(self, client, fake_github):
        """Test /metrics for recently merged pull requests"""
        fake_github.pull_requests["octo/repo"] = [
            make_pr(1, created_at=recent(3), merged_at=recent(1)),
            make_pr(2, created_at=recent(5), merged_at=None, closed_at=recent(4)),
        ]
        fake_github.branches["octo/repo"] = [make_branch("main"), make_branch("dev")]

        response = client.get("/metrics/octo/repo", params={"token": "t", "range": "6months"})

        assert response.status_code == 200
        data = response.json()
        assert sum(item["pr_count"] for item in data["pr_trends"]) == 1
        assert data["avg_merge_time"] == "2.00"
        assert len(data["branch_activity"]) == 1
        assert data["branch_activity"][0]["branches_created"] == 2
        assert data["branch_activity"][0]["branches_deleted"] == 0
        assert ("pulls", "octo/repo", "closed") in fake_github.calls

    def test_metrics_without_qualifying_prs(self, client, fake_github):
        """Test /metrics with nothing qualifying"""
        fake_github.pull_requests["octo/repo"] = [
            make_pr(1, merged_at=None, closed_at=recent(2)),
            make_pr(2, created_at=utc(2022, 12, 20), merged_at=utc(2023, 1, 1)),
        ]

        response = client.get("/metrics/octo/repo", params={"token": "t", "range": "3months"})

        data = response.json()
        assert data["pr_trends"] == []
        assert data["avg_merge_time"] == 0

    def test_metrics_default_range_is_three_months(self, client, fake_github):
        """Test /metrics defaults to a three month window"""
        fake_github.pull_requests["octo/repo"] = [make_pr(1, created_at=recent(130), merged_at=recent(120))]

        default = client.get("/metrics/octo/repo", params={"token": "t"}).json()
        unknown = client.get("/metrics/octo/repo", params={"token": "t", "range": "1year"}).json()
        six = client.get("/metrics/octo/repo", params={"token": "t", "range": "6months"}).json()

        assert default["pr_trends"] == []
        assert unknown["pr_trends"] == []
        assert sum(item["pr_count"] for item in six["pr_trends"]) == 1

    def test_metrics_upstream_error(self, client, fake_github):
        """Test /metrics surfaces upstream errors as 500"""
        fake_github.failures["octo/repo"] = upstream_error("Request failed with status code 401: Bad credentials", 401)

        response = client.get("/metrics/octo/repo")

        assert response.status_code == 500
        assert response.json() == {"error": "Request failed with status code 401: Bad credentials"}

    def test_developer_metrics_count_closed_prs(self, client, fake_github):
        """Test /developer-metrics counts closed pull requests"""
        fake_github.pull_requests["octo/repo"] = [
            make_pr(1, created_at=recent(4), merged_at=None, closed_at=recent(1), user="alice"),
            make_pr(2, created_at=recent(4), merged_at=recent(2), user="bob"),
        ]

        response = client.get("/developer-metrics/octo/repo/alice", params={"token": "t"})

        assert response.status_code == 200
        data = response.json()
        assert sum(item["pr_count"] for item in data["individual_pr_trends"]) == 1
        assert data["avg_merge_time"] == "3.00"

    def test_developer_metrics_rate_limit(self, client, fake_github):
        """Test /developer-metrics maps rate limits to 403"""
        fake_github.failures["octo/repo"] = RateLimitExceededError()

        response = client.get("/developer-metrics/octo/repo/alice", params={"token": "t"})

        assert response.status_code == 403

    def test_metrics_batch_reports_failures_per_repository(self, client, fake_github):
        """Test /metrics-batch reports failures per repository"""
        fake_github.failures["octo/a"] = upstream_error()
        fake_github.pull_requests["octo/b"] = [make_pr(1, created_at=recent(3), merged_at=recent(1))]
        fake_github.branches["octo/b"] = [make_branch()]

        response = client.get("/metrics-batch", params=[("repos", "octo/a"), ("repos", "octo/b")])

        assert response.status_code == 200
        data = response.json()
        assert data["octo/a"] == {"error": "Request failed with status code 404: Not Found", "status": 404}
        assert data["octo/b"]["avg_merge_time"] == "2.00"
        assert data["octo/b"]["branch_activity"][0]["branches_created"] == 1


class TestAccessToken:

    def test_bearer_header_preferred_over_query(self):
        """Test the Bearer header wins over the token query parameter"""
        from api.dependencies import get_access_token

        assert get_access_token(authorization="Bearer header-token", token="query-token") == "header-token"
        assert get_access_token(authorization=None, token="query-token") == "query-token"
        assert get_access_token(authorization="Basic abc", token=None) is None
        assert get_access_token(authorization=None, token="") is None
