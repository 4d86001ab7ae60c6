from src.utils.jira.jql import build_project_query, build_user_query


def test_user_query_without_projects():
    jql = build_user_query(["acc-1", "Bob Jones"], "2024-01-01", "2024-01-31")

    assert jql == (
        'assignee IN ("acc-1","Bob Jones") AND created >= "2024-01-01" '
        'AND created <= "2024-01-31"'
    )


def test_user_query_with_projects():
    jql = build_user_query(["acc-1"], "2024-01-01", "2024-01-31", ["PRJ", "OPS"])

    assert jql == (
        'assignee IN ("acc-1") AND created >= "2024-01-01" '
        'AND created <= "2024-01-31" AND project IN ("PRJ","OPS")'
    )


def test_empty_project_list_adds_no_clause():
    jql = build_user_query(["acc-1"], "2024-01-01", "2024-01-31", [])

    assert "project" not in jql


def test_project_query():
    jql = build_project_query("2024-01-01", "2024-01-31", ["PRJ"])

    assert jql == (
        'created >= "2024-01-01" AND created <= "2024-01-31" AND project IN ("PRJ")'
    )


def test_project_query_without_projects():
    assert build_project_query("2024-01-01", "2024-01-31") == (
        'created >= "2024-01-01" AND created <= "2024-01-31"'
    )


def test_identifiers_are_not_escaped():
    jql = build_user_query(['a"b'], "2024-01-01", "2024-01-31")

    assert jql.startswith('assignee IN ("a"b")')
