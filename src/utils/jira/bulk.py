import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from src.utils.jira.analytics import (
    build_user_report,
    derive_project_metrics,
    derive_user_metrics,
)
from src.utils.jira.cache import BulkCache, derive_cache_key
from src.utils.jira.jql import build_project_query, build_user_query

logger = logging.getLogger(__name__)

USER_ANALYTICS_OPERATION = "bulk_user_productivity"
PROJECT_ANALYTICS_OPERATION = "bulk_project_productivity"
# Single page fetched per analytics call; results beyond it are not analysed
SEARCH_PAGE_SIZE = 1000


def _cached_result(cache: BulkCache, cache_key: str) -> Optional[Any]:
    if not cache.is_valid(cache_key):
        logger.debug(f"Cache miss: {cache_key}")
        return None

    result = cache.get(cache_key)
    if isinstance(result, dict) and isinstance(result.get("metadata"), dict):
        result["metadata"]["cached"] = True
    logger.info(f"Serving analytics from cache: {cache_key}")
    return result


async def bulk_user_analytics(
    params: Dict[str, Any],
    connect: Callable[[], Awaitable[Any]],
    cache: BulkCache,
    story_points_field: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Productivity report for a list of users over a date range.

    Args:
        params (dict): users, startDate, endDate and optionally projectKeys,
            includeCorrelation, aggregateBy and cloudId.
        connect: Coroutine function returning the issue source, anything with
            an async ``search_issues(jql, page_size, minimal_fields, start_at)``.
            Only called on a cache miss.
        cache (BulkCache): Store for assembled reports.
        story_points_field (str, optional): Defaults to the client's field.

    Returns:
        dict: The report; errors from the issue search propagate and leave the
        cache untouched.
    """
    cache_key = derive_cache_key(USER_ANALYTICS_OPERATION, params)
    cached = _cached_result(cache, cache_key)
    if cached is not None:
        return cached

    users = params["users"]
    jql = build_user_query(
        users, params["startDate"], params["endDate"], params.get("projectKeys")
    )
    logger.info(f"Bulk user analytics JQL: {jql} (cloud id: {params.get('cloudId')})")

    client = await connect()
    search = await client.search_issues(jql, SEARCH_PAGE_SIZE, False, 0)
    issues = search.get("issues") or []
    logger.info(f"Total issues found: {search.get('total', 0)}")

    field = story_points_field or getattr(
        client, "story_points_field", "customfield_10016"
    )
    user_analytics = []
    for user_id in users:
        metrics = derive_user_metrics(
            issues,
            user_id,
            include_correlation=bool(params.get("includeCorrelation", False)),
            story_points_field=field,
        )
        if metrics is not None:
            user_analytics.append(metrics)

    result = build_user_report(
        user_analytics,
        total_issues_found=search.get("total", 0),
        users_requested=len(users),
    )
    cache.put(cache_key, result)
    return result


async def bulk_project_analytics(
    params: Dict[str, Any], connect: Callable[[], Awaitable[Any]], cache: BulkCache
) -> List[Dict[str, Any]]:
    """Per-project issue listings for the requested project keys."""
    cache_key = derive_cache_key(PROJECT_ANALYTICS_OPERATION, params)
    cached = _cached_result(cache, cache_key)
    if cached is not None:
        return cached

    project_keys = params.get("projectKeys") or []
    jql = build_project_query(params["startDate"], params["endDate"], project_keys)
    logger.info(
        f"Bulk project analytics JQL: {jql} (cloud id: {params.get('cloudId')})"
    )

    client = await connect()
    search = await client.search_issues(jql, SEARCH_PAGE_SIZE, True, 0)
    issues = search.get("issues") or []
    logger.info(f"Total issues found: {search.get('total', 0)}")

    result = []
    for project_key in project_keys:
        metrics = derive_project_metrics(issues, project_key)
        if metrics is not None:
            result.append(metrics)

    cache.put(cache_key, result)
    return result
