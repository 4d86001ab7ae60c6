"""
Productivity metrics derived from raw Jira issue search results.

Every function here is a pure transformation: issue records are read, never
modified, and results are freshly built dicts ready for JSON serialization.
"""

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

DONE = "done"
IN_PROGRESS = "indeterminate"
LONG_RUNNING_DAYS = 30
SECONDS_PER_DAY = 60 * 60 * 24

# Jira formats: "2024-10-31T12:11:56.289-0400", "2024-10-31T12:11:56.289+0000"
DATE_FORMATS = [
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
]


def round2(value: float) -> float:
    """Round to two decimals, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _round_int(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_jira_date(date_str: Optional[str]) -> Optional[datetime]:
    """Parse a Jira date string into a naive UTC datetime, None if unparseable."""
    if not date_str or not isinstance(date_str, str):
        return None

    for fmt in DATE_FORMATS:
        try:
            parsed = datetime.strptime(date_str, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed

    return None


def _fields(issue: Dict[str, Any]) -> Dict[str, Any]:
    return issue.get("fields") or {}


def status_category(issue: Dict[str, Any]) -> Optional[str]:
    status = _fields(issue).get("status") or {}
    return (status.get("statusCategory") or {}).get("key")


def assignee_matches(issue: Dict[str, Any], user_id: str) -> bool:
    assignee = _fields(issue).get("assignee")
    if not assignee:
        return False
    return user_id in (
        assignee.get("accountId"),
        assignee.get("displayName"),
        assignee.get("emailAddress"),
    )


def story_points(issue: Dict[str, Any], field: str) -> float:
    value = _fields(issue).get(field)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def avg_resolution_days(issues: List[Dict[str, Any]]) -> int:
    """Mean days from creation to resolution, rounded; 0 with nothing resolved."""
    durations = []
    for issue in issues:
        fields = _fields(issue)
        resolved = parse_jira_date(fields.get("resolutiondate"))
        created = parse_jira_date(fields.get("created"))
        if resolved is None or created is None:
            continue
        durations.append((resolved - created).total_seconds() / SECONDS_PER_DAY)

    if not durations:
        return 0
    return _round_int(sum(durations) / len(durations))


def identify_risk_factors(
    issues: List[Dict[str, Any]], now: Optional[datetime] = None
) -> List[str]:
    """Describe open work that needs attention: overdue, high priority, long running."""
    now = now or datetime.now(timezone.utc).replace(tzinfo=None)
    open_issues = [issue for issue in issues if status_category(issue) != DONE]

    overdue = 0
    high_priority = 0
    long_running = 0
    for issue in open_issues:
        fields = _fields(issue)

        due = parse_jira_date(fields.get("duedate"))
        if due is not None and due < now:
            overdue += 1

        priority = ((fields.get("priority") or {}).get("name") or "").lower()
        if "high" in priority or "critical" in priority:
            high_priority += 1

        created = parse_jira_date(fields.get("created"))
        if (
            created is not None
            and (now - created).total_seconds() / SECONDS_PER_DAY > LONG_RUNNING_DAYS
        ):
            long_running += 1

    risks = []
    if overdue:
        risks.append(f"{overdue} overdue issues")
    if high_priority:
        risks.append(f"{high_priority} high priority issues open")
    if long_running:
        risks.append(f"{long_running} issues running longer than {LONG_RUNNING_DAYS} days")
    return risks


def _distinct_project_keys(issues: List[Dict[str, Any]]) -> List[str]:
    keys = []
    for issue in issues:
        key = (_fields(issue).get("project") or {}).get("key")
        if key and key not in keys:
            keys.append(key)
    return keys


def derive_user_metrics(
    issues: List[Dict[str, Any]],
    user_id: str,
    include_correlation: bool = False,
    story_points_field: str = "customfield_10016",
    now: Optional[datetime] = None,
) -> Optional[Dict[str, Any]]:
    """
    Aggregate the issues assigned to one user.

    An issue belongs to ``user_id`` when its assignee's accountId, displayName
    or emailAddress equals it exactly. Identity fields come from the first
    matching issue.

    Returns:
        The user analytics dict, or None when no issue matched.
    """
    user_issues = [issue for issue in issues if assignee_matches(issue, user_id)]
    if not user_issues:
        return None

    completed = [i for i in user_issues if status_category(i) == DONE]
    in_progress = [i for i in user_issues if status_category(i) == IN_PROGRESS]

    assignee = _fields(user_issues[0])["assignee"]
    account_id = assignee.get("accountId")
    display_name = assignee.get("displayName")
    email = assignee.get("emailAddress") or None

    correlation = None
    if include_correlation:
        correlation = {
            "jiraAccountId": account_id,
            "jiraDisplayName": display_name,
            "jiraEmail": email,
            "projectKeys": _distinct_project_keys(user_issues),
        }

    return {
        "userId": user_id,
        "userInfo": {
            "accountId": account_id,
            "displayName": display_name,
            "email": email,
        },
        "metrics": {
            "totalIssues": len(user_issues),
            "completedIssues": len(completed),
            "inProgressIssues": len(in_progress),
            "completionRate": round2(len(completed) / len(user_issues) * 100),
            "storyPointsCompleted": sum(
                story_points(i, story_points_field) for i in completed
            ),
            "avgResolutionTime": avg_resolution_days(completed),
        },
        "riskFactors": identify_risk_factors(user_issues, now),
        "correlationData": correlation,
    }


def derive_project_metrics(
    issues: List[Dict[str, Any]], project_key: str
) -> Optional[Dict[str, Any]]:
    """Issue count and a lightweight listing for one project, None if it has no issues."""
    project_issues = [
        issue
        for issue in issues
        if (_fields(issue).get("project") or {}).get("key") == project_key
    ]
    if not project_issues:
        return None

    summaries = []
    for issue in project_issues:
        fields = _fields(issue)
        summaries.append(
            {
                "id": issue.get("id"),
                "key": issue.get("key"),
                "summary": fields.get("summary"),
                "status": (fields.get("status") or {}).get("name"),
                "assignee": (fields.get("assignee") or {}).get("displayName")
                or "Unassigned",
                "created": fields.get("created"),
                "updated": fields.get("updated"),
            }
        )

    return {
        "projectKey": project_key,
        "projectName": (_fields(project_issues[0]).get("project") or {}).get("name"),
        "issueCount": len(project_issues),
        "issues": summaries,
    }


def assemble_team_summary(user_analytics: List[Dict[str, Any]]) -> Dict[str, Any]:
    users = [u for u in user_analytics if u]
    rates = [u["metrics"]["completionRate"] for u in users]
    return {
        "totalUsers": len(users),
        "totalIssues": sum(u["metrics"]["totalIssues"] for u in users),
        "totalCompleted": sum(u["metrics"]["completedIssues"] for u in users),
        "totalStoryPoints": sum(u["metrics"]["storyPointsCompleted"] for u in users),
        "avgCompletionRate": sum(rates) / len(rates) if rates else 0,
    }


def generate_team_insights(
    summary: Dict[str, Any], user_analytics: List[Dict[str, Any]]
) -> List[str]:
    if not user_analytics:
        return []

    avg_rate = summary["avgCompletionRate"]
    top = user_analytics[0]
    for user in user_analytics[1:]:
        if user["metrics"]["completionRate"] > top["metrics"]["completionRate"]:
            top = user

    insights = [
        f"Team average completion rate: {avg_rate:.1f}%",
        f"Top performer: {top['userInfo']['displayName']} "
        f"({top['metrics']['completionRate']}% completion rate)",
    ]
    if summary["totalStoryPoints"] > 0:
        insights.append(f"Team completed {summary['totalStoryPoints']} story points")

    below = [
        u for u in user_analytics if u["metrics"]["completionRate"] < avg_rate * 0.7
    ]
    if below:
        insights.append(
            f"{len(below)} team members below 70% of average completion rate"
        )
    return insights


def generate_team_recommendations(
    summary: Dict[str, Any], user_analytics: List[Dict[str, Any]]
) -> List[str]:
    if not user_analytics:
        return []

    recommendations = []
    at_risk = [u for u in user_analytics if u.get("riskFactors")]
    if at_risk:
        recommendations.append(
            f"{len(at_risk)} team members have open risk factors - review overdue "
            f"and high priority work"
        )
    if summary["avgCompletionRate"] < 70:
        recommendations.append(
            "Team completion rate is below 70% - consider reviewing blockers"
        )
    return recommendations


def build_user_report(
    user_analytics: List[Dict[str, Any]],
    total_issues_found: int,
    users_requested: int,
    generated_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Assemble the full bulk user analytics payload."""
    generated_at = generated_at or datetime.now(timezone.utc)
    summary = assemble_team_summary(user_analytics)
    return {
        "summary": summary,
        "users": user_analytics,
        "insights": generate_team_insights(summary, user_analytics),
        "recommendations": generate_team_recommendations(summary, user_analytics),
        "metadata": {
            "cached": False,
            "generatedAt": generated_at.isoformat().replace("+00:00", "Z"),
            "totalIssuesFound": total_issues_found,
            "usersAnalyzed": users_requested,
        },
    }
