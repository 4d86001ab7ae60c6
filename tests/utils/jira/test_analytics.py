import copy
from datetime import datetime

from src.utils.jira.analytics import (
    assemble_team_summary,
    avg_resolution_days,
    build_user_report,
    derive_project_metrics,
    derive_user_metrics,
    generate_team_insights,
    generate_team_recommendations,
    identify_risk_factors,
    parse_jira_date,
    round2,
)
from tests.factories import ALICE, BOB, make_issue

NOW = datetime(2024, 3, 1, 12, 0, 0)


def user_entry(name, rate, total=1, completed=1, points=0, risks=None):
    return {
        "userId": name,
        "userInfo": {"accountId": name, "displayName": name, "email": None},
        "metrics": {
            "totalIssues": total,
            "completedIssues": completed,
            "inProgressIssues": 0,
            "completionRate": rate,
            "storyPointsCompleted": points,
            "avgResolutionTime": 0,
        },
        "riskFactors": risks or [],
        "correlationData": None,
    }


class TestDeriveUserMetrics:
    """Tests for per-user aggregation"""

    def test_end_to_end_scenario(self):
        issues = [
            make_issue("A-1", ALICE, "done", "2024-01-01", resolutiondate="2024-01-03"),
            make_issue("A-2", ALICE, "new", "2024-01-05"),
        ]

        result = derive_user_metrics(issues, "acc-alice", now=NOW)

        metrics = result["metrics"]
        assert metrics["totalIssues"] == 2
        assert metrics["completedIssues"] == 1
        assert metrics["inProgressIssues"] == 0
        assert metrics["completionRate"] == 50
        assert metrics["avgResolutionTime"] == 2

    def test_completion_rate_rounds_to_two_decimals(self):
        issues = [
            make_issue("A-1", ALICE, "done"),
            make_issue("A-2", ALICE, "new"),
            make_issue("A-3", ALICE, "indeterminate"),
        ]

        result = derive_user_metrics(issues, "acc-alice", now=NOW)

        assert result["metrics"]["completionRate"] == 33.33
        assert result["metrics"]["inProgressIssues"] == 1

    def test_unmatched_user_returns_none(self, sample_issues):
        assert derive_user_metrics(sample_issues, "nobody", now=NOW) is None

    def test_matches_display_name_and_email(self, sample_issues):
        by_name = derive_user_metrics(sample_issues, "Alice Smith", now=NOW)
        by_email = derive_user_metrics(sample_issues, "alice@example.com", now=NOW)

        assert by_name["metrics"]["totalIssues"] == 3
        assert by_email["metrics"]["totalIssues"] == 3
        assert by_name["userId"] == "Alice Smith"

    def test_matching_is_case_sensitive(self, sample_issues):
        assert derive_user_metrics(sample_issues, "alice smith", now=NOW) is None

    def test_unassigned_issues_never_match(self):
        issues = [make_issue("X-1", None, "done")]

        assert derive_user_metrics(issues, "Unassigned", now=NOW) is None

    def test_identity_comes_from_first_match(self):
        renamed = dict(ALICE, displayName="Alice S.", emailAddress=None)
        issues = [
            make_issue("A-1", renamed, "new"),
            make_issue("A-2", ALICE, "done"),
        ]

        result = derive_user_metrics(issues, "acc-alice", now=NOW)

        assert result["userInfo"] == {
            "accountId": "acc-alice",
            "displayName": "Alice S.",
            "email": None,
        }

    def test_story_points_only_from_completed(self):
        issues = [
            make_issue("A-1", ALICE, "done", story_points=5),
            make_issue("A-2", ALICE, "done", story_points=None),
            make_issue("A-3", ALICE, "indeterminate", story_points=8),
            make_issue("A-4", ALICE, "done", story_points="13"),
        ]

        result = derive_user_metrics(issues, "acc-alice", now=NOW)

        assert result["metrics"]["storyPointsCompleted"] == 5

    def test_custom_story_points_field(self):
        issue = make_issue("A-1", ALICE, "done")
        issue["fields"]["customfield_20000"] = 2.5

        result = derive_user_metrics(
            [issue], "acc-alice", story_points_field="customfield_20000", now=NOW
        )

        assert result["metrics"]["storyPointsCompleted"] == 2.5

    def test_correlation_block(self, sample_issues):
        result = derive_user_metrics(
            sample_issues, "acc-alice", include_correlation=True, now=NOW
        )

        assert result["correlationData"] == {
            "jiraAccountId": "acc-alice",
            "jiraDisplayName": "Alice Smith",
            "jiraEmail": "alice@example.com",
            "projectKeys": ["PRJ", "OPS"],
        }

    def test_correlation_omitted_by_default(self, sample_issues):
        result = derive_user_metrics(sample_issues, "acc-alice", now=NOW)

        assert result["correlationData"] is None

    def test_input_issues_are_not_modified(self, sample_issues):
        before = copy.deepcopy(sample_issues)

        derive_user_metrics(sample_issues, "acc-alice", include_correlation=True)

        assert sample_issues == before


class TestResolutionTime:
    """Tests for average resolution time"""

    def test_no_resolved_issues(self):
        assert avg_resolution_days([make_issue("A-1", ALICE, "done")]) == 0

    def test_half_day_rounds_up(self):
        issues = [
            make_issue(
                "A-1",
                ALICE,
                "done",
                created="2024-01-01T00:00:00.000+0000",
                resolutiondate="2024-01-02T12:00:00.000+0000",
            )
        ]

        assert avg_resolution_days(issues) == 2

    def test_mean_across_issues(self):
        issues = [
            make_issue("A-1", ALICE, "done", "2024-01-01", resolutiondate="2024-01-02"),
            make_issue("A-2", ALICE, "done", "2024-01-01", resolutiondate="2024-01-05"),
        ]

        # (1 + 4) / 2 = 2.5
        assert avg_resolution_days(issues) == 3

    def test_timezone_offsets_are_respected(self):
        issues = [
            make_issue(
                "A-1",
                ALICE,
                "done",
                created="2024-01-01T20:00:00.000-0400",
                resolutiondate="2024-01-03T00:00:00.000+0000",
            )
        ]

        # created is 2024-01-02T00:00Z, so exactly one day
        assert avg_resolution_days(issues) == 1

    def test_unparseable_dates_are_skipped(self):
        issues = [
            make_issue("A-1", ALICE, "done", "not-a-date", resolutiondate="2024-01-02"),
            make_issue("A-2", ALICE, "done", "2024-01-01", resolutiondate="2024-01-04"),
        ]

        assert avg_resolution_days(issues) == 3


class TestParseJiraDate:
    def test_formats(self):
        assert parse_jira_date("2024-01-02") == datetime(2024, 1, 2)
        assert parse_jira_date("2024-01-02T03:04:05") == datetime(2024, 1, 2, 3, 4, 5)
        assert parse_jira_date("2024-01-02T03:04:05.000+0000") == datetime(
            2024, 1, 2, 3, 4, 5
        )

    def test_invalid(self):
        assert parse_jira_date(None) is None
        assert parse_jira_date("") is None
        assert parse_jira_date("yesterday") is None


class TestRiskFactors:
    def test_open_issue_risks(self):
        issues = [
            make_issue("A-1", ALICE, "indeterminate", "2024-01-05", duedate="2024-02-01"),
            make_issue("A-2", ALICE, "new", "2024-02-25", priority="Highest"),
            make_issue("A-3", ALICE, "new", "2024-02-25", priority="Critical"),
        ]

        assert identify_risk_factors(issues, NOW) == [
            "1 overdue issues",
            "2 high priority issues open",
            "1 issues running longer than 30 days",
        ]

    def test_done_issues_are_ignored(self):
        issues = [
            make_issue(
                "A-1", ALICE, "done", "2023-01-01", priority="High", duedate="2023-02-01"
            )
        ]

        assert identify_risk_factors(issues, NOW) == []

    def test_user_metrics_carry_risk_factors(self, sample_issues):
        result = derive_user_metrics(sample_issues, "acc-alice", now=NOW)

        assert "1 high priority issues open" in result["riskFactors"]


class TestDeriveProjectMetrics:
    def test_project_listing(self, sample_issues):
        result = derive_project_metrics(sample_issues, "PRJ")

        assert result["projectKey"] == "PRJ"
        assert result["projectName"] == "Project"
        assert result["issueCount"] == 4
        assert result["issues"][0] == {
            "id": "id-PRJ-1",
            "key": "PRJ-1",
            "summary": "Summary of PRJ-1",
            "status": "Done",
            "assignee": "Alice Smith",
            "created": "2024-01-01T09:00:00.000+0000",
            "updated": "2024-01-01T09:00:00.000+0000",
        }
        assert result["issues"][-1]["assignee"] == "Unassigned"

    def test_unknown_project_returns_none(self, sample_issues):
        assert derive_project_metrics(sample_issues, "NOPE") is None


class TestTeamSummary:
    def test_empty_list(self):
        assert assemble_team_summary([]) == {
            "totalUsers": 0,
            "totalIssues": 0,
            "totalCompleted": 0,
            "totalStoryPoints": 0,
            "avgCompletionRate": 0,
        }

    def test_sums_and_mean(self):
        users = [
            user_entry("a", 50.0, total=4, completed=2, points=3),
            user_entry("b", 100.0, total=1, completed=1, points=5),
        ]

        summary = assemble_team_summary(users)

        assert summary == {
            "totalUsers": 2,
            "totalIssues": 5,
            "totalCompleted": 3,
            "totalStoryPoints": 8,
            "avgCompletionRate": 75.0,
        }

    def test_none_entries_are_ignored(self):
        summary = assemble_team_summary([None, user_entry("a", 40.0)])

        assert summary["totalUsers"] == 1


class TestInsightsAndRecommendations:
    def test_no_users(self):
        summary = assemble_team_summary([])

        assert generate_team_insights(summary, []) == []
        assert generate_team_recommendations(summary, []) == []

    def test_insights(self):
        users = [
            user_entry("a", 100.0, points=5),
            user_entry("b", 20.0),
        ]
        summary = assemble_team_summary(users)

        assert generate_team_insights(summary, users) == [
            "Team average completion rate: 60.0%",
            "Top performer: a (100.0% completion rate)",
            "Team completed 5 story points",
            "1 team members below 70% of average completion rate",
        ]

    def test_recommendations(self):
        users = [
            user_entry("a", 50.0, risks=["1 overdue issues"]),
            user_entry("b", 60.0),
        ]
        summary = assemble_team_summary(users)

        assert generate_team_recommendations(summary, users) == [
            "1 team members have open risk factors - review overdue and high priority work",
            "Team completion rate is below 70% - consider reviewing blockers",
        ]

    def test_healthy_team_gets_no_recommendations(self):
        users = [user_entry("a", 90.0)]

        assert generate_team_recommendations(assemble_team_summary(users), users) == []


def test_build_user_report():
    users = [user_entry("a", 100.0)]

    report = build_user_report(
        users,
        total_issues_found=7,
        users_requested=3,
        generated_at=datetime(2024, 1, 1),
    )

    assert report["summary"]["totalUsers"] == 1
    assert report["users"] == users
    assert report["metadata"] == {
        "cached": False,
        "generatedAt": "2024-01-01T00:00:00",
        "totalIssuesFound": 7,
        "usersAnalyzed": 3,
    }
    assert report["insights"]


def test_round2_rounds_halves_up():
    assert round2(2.675) == 2.68
    assert round2(1 / 3 * 100) == 33.33
    assert round2(50.0) == 50.0
