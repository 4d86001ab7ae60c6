import pytest

from src.utils.jira.cache import BulkCache
from tests.factories import ALICE, BOB, FakeClock, FakeIssueSource, make_issue

pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    """An isolated cache per test, driven by a fake clock"""
    return BulkCache(ttl=600, max_entries=100, clock=clock)


@pytest.fixture
def sample_issues():
    """Two users across two projects, with a mix of statuses"""
    return [
        make_issue(
            "PRJ-1",
            ALICE,
            "done",
            created="2024-01-01T09:00:00.000+0000",
            resolutiondate="2024-01-03T09:00:00.000+0000",
            story_points=5,
        ),
        make_issue(
            "PRJ-2",
            ALICE,
            "indeterminate",
            created="2024-01-05T09:00:00.000+0000",
            priority="High",
        ),
        make_issue(
            "OPS-1",
            ALICE,
            "new",
            created="2024-01-06T09:00:00.000+0000",
            project_key="OPS",
            project_name="Operations",
        ),
        make_issue(
            "PRJ-3",
            BOB,
            "done",
            created="2024-01-02T09:00:00.000+0000",
            resolutiondate="2024-01-06T09:00:00.000+0000",
            story_points=3,
        ),
        make_issue("PRJ-4", None, "new", created="2024-01-07T09:00:00.000+0000"),
    ]


@pytest.fixture
def issue_source(sample_issues):
    return FakeIssueSource(sample_issues)
