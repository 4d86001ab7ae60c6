from typing import Iterable, Optional


def _quoted_list(values: Iterable[str]) -> str:
    # Values are wrapped as-is; embedded double quotes are not escaped
    return ",".join(f'"{value}"' for value in values)


def _date_range_clause(start_date: str, end_date: str) -> str:
    return f'created >= "{start_date}" AND created <= "{end_date}"'


def _project_clause(project_keys: Optional[Iterable[str]]) -> str:
    if not project_keys:
        return ""
    return f" AND project IN ({_quoted_list(project_keys)})"


def build_user_query(
    user_ids: Iterable[str],
    start_date: str,
    end_date: str,
    project_keys: Optional[Iterable[str]] = None,
) -> str:
    """JQL for issues assigned to any of ``user_ids`` created inside the range."""
    return (
        f"assignee IN ({_quoted_list(user_ids)}) AND "
        f"{_date_range_clause(start_date, end_date)}"
        f"{_project_clause(project_keys)}"
    )


def build_project_query(
    start_date: str,
    end_date: str,
    project_keys: Optional[Iterable[str]] = None,
) -> str:
    """JQL for issues created inside the range, optionally limited to projects."""
    return f"{_date_range_clause(start_date, end_date)}{_project_clause(project_keys)}"
