import logging
from typing import Any, Dict, List, Optional

import requests

from src.utils.jira.util import (
    JiraApiError,
    adf_to_text,
    build_agile_url,
    build_api_url,
    format_comment_body,
    format_issue_description,
)

logger = logging.getLogger(__name__)

MINIMAL_ISSUE_FIELDS = ["summary", "status", "created", "updated", "assignee", "project"]
FULL_ISSUE_FIELDS = MINIMAL_ISSUE_FIELDS + [
    "comment",
    "description",
    "timetracking",
    "worklog",
]
# Fields the productivity metrics read on top of the regular field sets
ANALYTICS_ISSUE_FIELDS = ["resolutiondate", "priority", "duedate", "labels"]


def _error_from_response(response) -> JiraApiError:
    """Build a JiraApiError from a failed response, preferring Jira's own messages."""
    message = response.reason
    details = None
    try:
        details = response.json()
    except ValueError:
        details = response.text or None

    if isinstance(details, dict):
        error_messages = details.get("errorMessages")
        if isinstance(error_messages, list) and error_messages:
            message = "; ".join(str(m) for m in error_messages)
        elif details.get("message"):
            message = details["message"]
        elif details.get("errorMessage"):
            message = details["errorMessage"]

    return JiraApiError(response.status_code, message, details)


class JiraClient:
    """A client for the Jira Cloud / Jira Server REST APIs."""

    def __init__(
        self,
        base_url,
        headers,
        write_headers=None,
        jira_type="cloud",
        timeout=30,
        story_points_field="customfield_10016",
        site_name=None,
        cloud_id=None,
        available_sites=None,
    ):
        """
        Initialize the Jira client.

        Args:
            base_url (str): Site base URL (e.g. https://api.atlassian.com/ex/jira/<cloud-id>).
            headers (dict): Headers for read requests.
            write_headers (dict, optional): Headers for POST/PUT/DELETE requests.
            jira_type (str): "cloud" or "server".
            timeout (float): Seconds before a request is abandoned.
            story_points_field (str): Custom field id holding story points.
            site_name (str, optional): Display name of the selected site.
            cloud_id (str, optional): Atlassian cloud id of the selected site.
            available_sites (list, optional): All sites the token can reach.
        """
        self.base_url = base_url.rstrip("/")
        self.headers = headers
        self.write_headers = write_headers or headers
        self.jira_type = jira_type
        self.timeout = timeout
        self.story_points_field = story_points_field
        self.site_name = site_name
        self.cloud_id = cloud_id
        self.available_sites = available_sites or []

    @property
    def is_server(self):
        return self.jira_type == "server"

    @property
    def has_multiple_sites(self):
        return len(self.available_sites) > 1

    def api_url(self, endpoint):
        return build_api_url(self.base_url, endpoint, self.jira_type)

    async def request(self, method, url, data=None, params=None):
        """
        Make a request to the Jira API.

        Args:
            method (str): HTTP method (GET, POST, PUT, DELETE).
            url (str): Fully built endpoint URL.
            data (dict, optional): JSON body for POST/PUT requests.
            params (dict, optional): Query parameters.

        Returns:
            Parsed JSON response, or None when Jira answers without a body.

        Raises:
            JiraApiError: If Jira answers with a non-success status.
            requests.exceptions.RequestException: On transport failures.
        """
        headers = self.headers if method.upper() == "GET" else self.write_headers

        try:
            response = requests.request(
                method=method,
                url=url,
                headers=headers,
                json=data,
                params=params,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"Jira request timed out: {method} {url}")
            raise requests.exceptions.Timeout(
                f"Request timeout after {self.timeout}s"
            ) from e

        if not response.ok:
            error = _error_from_response(response)
            logger.error(f"{error} for {method} {url}")
            raise error

        if response.status_code == 204 or not response.content:
            return None

        return response.json()

    # Issues

    def issue_fields(self, minimal_fields=False):
        fields = MINIMAL_ISSUE_FIELDS if minimal_fields else FULL_ISSUE_FIELDS
        return fields + ANALYTICS_ISSUE_FIELDS + [self.story_points_field]

    async def search_issues(
        self, jql, page_size=100, minimal_fields=False, start_at=0
    ) -> Dict[str, Any]:
        """Run a JQL search and return one page of raw issues."""
        params = {
            "jql": jql,
            "maxResults": page_size,
            "startAt": start_at,
            "expand": "changelog",
            "fields": ",".join(self.issue_fields(minimal_fields)),
        }
        logger.debug(f"Searching issues: {jql}")
        response = await self.request("GET", self.api_url("search"), params=params)
        response = response or {}

        total = response.get("total", 0)
        return {
            "issues": response.get("issues", []),
            "total": total,
            "startAt": response.get("startAt", 0),
            "hasNextPage": total > start_at + page_size,
        }

    async def get_issue(self, issue_key, max_comments=50) -> Dict[str, Any]:
        params = {
            "expand": "changelog",
            "fields": "*all",
            "maxResults": max_comments,
        }
        issue = await self.request(
            "GET", self.api_url(f"issue/{issue_key}"), params=params
        )
        return clean_issue(issue)

    async def create_issue(
        self, project_key, issue_type, summary, description=None, fields=None
    ):
        issue_fields = {
            "project": {"key": project_key},
            "issuetype": {"name": issue_type},
            "summary": summary,
            **(fields or {}),
        }
        if description:
            issue_fields["description"] = format_issue_description(
                description, self.jira_type
            )
        return await self.request(
            "POST", self.api_url("issue"), data={"fields": issue_fields}
        )

    async def update_issue(self, issue_key, fields):
        fields = dict(fields)
        if fields.get("description") is not None:
            fields["description"] = format_issue_description(
                fields["description"], self.jira_type
            )
        await self.request(
            "PUT", self.api_url(f"issue/{issue_key}"), data={"fields": fields}
        )

    async def delete_issue(self, issue_key):
        await self.request("DELETE", self.api_url(f"issue/{issue_key}"))

    async def get_transitions(self, issue_key) -> List[Dict[str, Any]]:
        response = await self.request(
            "GET", self.api_url(f"issue/{issue_key}/transitions")
        )
        return (response or {}).get("transitions", [])

    async def transition_issue(self, issue_key, transition_id, comment=None):
        payload = {"transition": {"id": transition_id}}
        if comment:
            payload["update"] = {
                "comment": [{"add": format_comment_body(comment, self.jira_type)}]
            }
        await self.request(
            "POST", self.api_url(f"issue/{issue_key}/transitions"), data=payload
        )

    async def assign_issue(self, issue_key, account_id):
        # Server identifies users by name, Cloud by accountId
        payload = {"name": account_id} if self.is_server else {"accountId": account_id}
        await self.request(
            "PUT", self.api_url(f"issue/{issue_key}/assignee"), data=payload
        )

    async def add_comment(self, issue_key, body):
        return await self.request(
            "POST",
            self.api_url(f"issue/{issue_key}/comment"),
            data=format_comment_body(body, self.jira_type),
        )

    # Projects

    async def list_projects(self, max_results=50) -> List[Dict[str, Any]]:
        response = await self.request(
            "GET", self.api_url("project/search"), params={"maxResults": max_results}
        )
        return [
            {
                "id": project.get("id"),
                "key": project.get("key"),
                "name": project.get("name"),
                "projectTypeKey": project.get("projectTypeKey"),
                "simplified": project.get("simplified", False),
                "style": project.get("style", "classic"),
                "isPrivate": project.get("isPrivate", False),
            }
            for project in (response or {}).get("values", [])
        ]

    async def get_project(self, project_key) -> Dict[str, Any]:
        project = await self.request(
            "GET",
            self.api_url(f"project/{project_key}"),
            params={"expand": "description,lead,issueTypes,versions,components"},
        )
        lead = project.get("lead")
        return {
            "id": project.get("id"),
            "key": project.get("key"),
            "name": project.get("name"),
            "description": project.get("description"),
            "lead": (
                {
                    "displayName": lead.get("displayName"),
                    "accountId": lead.get("accountId"),
                }
                if lead
                else None
            ),
            "components": [
                {"id": c.get("id"), "name": c.get("name")}
                for c in project.get("components", [])
            ],
            "versions": [
                {
                    "id": v.get("id"),
                    "name": v.get("name"),
                    "released": v.get("released", False),
                }
                for v in project.get("versions", [])
            ],
            "issueTypes": [
                {
                    "id": t.get("id"),
                    "name": t.get("name"),
                    "subtask": t.get("subtask", False),
                }
                for t in project.get("issueTypes", [])
            ],
        }

    async def get_project_users(self, project_key, max_results=100):
        params = {
            "query": f"is assignee of ({project_key})",
            "maxResults": min(max_results, 100),
        }
        response = await self.request(
            "GET", self.api_url("user/search/query"), params=params
        )
        return [_user_summary(user) for user in (response or {}).get("values", [])]

    # Users

    async def get_current_user(self) -> Dict[str, Any]:
        user = await self.request("GET", self.api_url("myself"))
        return _user_profile(user)

    async def get_user_profile(self, account_id) -> Dict[str, Any]:
        user = await self.request(
            "GET", self.api_url("user"), params={"accountId": account_id}
        )
        return _user_profile(user)

    async def lookup_account_id(self, search_string, max_results=10):
        users = await self.request(
            "GET",
            self.api_url("user/search"),
            params={"query": search_string, "maxResults": max_results},
        )
        return [
            {
                **_user_summary(user),
                "accountType": user.get("accountType", "atlassian"),
            }
            for user in users or []
        ]

    # Metadata

    async def get_issue_types(self, project_id=None):
        params = None
        if not self.is_server and project_id:
            params = {"projectId": project_id}
        issue_types = await self.request(
            "GET", self.api_url("issuetype"), params=params
        )
        return [
            {
                "id": t.get("id"),
                "name": t.get("name"),
                "description": t.get("description", ""),
                "subtask": t.get("subtask", False),
                "iconUrl": t.get("iconUrl", ""),
            }
            for t in issue_types or []
        ]

    async def get_priorities(self):
        priorities = await self.request("GET", self.api_url("priority"))
        return [
            {
                "id": p.get("id"),
                "name": p.get("name"),
                "description": p.get("description"),
                "iconUrl": p.get("iconUrl", ""),
                "statusColor": p.get("statusColor", "#42526E"),
            }
            for p in priorities or []
        ]

    async def get_statuses(self):
        statuses = await self.request("GET", self.api_url("status"))
        result = []
        for status in statuses or []:
            category = status.get("statusCategory") or {}
            result.append(
                {
                    "id": status.get("id"),
                    "name": status.get("name"),
                    "description": status.get("description", ""),
                    "statusCategory": {
                        "id": category.get("id", 0),
                        "key": category.get("key", "new"),
                        "colorName": category.get("colorName", "blue-gray"),
                        "name": category.get("name", "To Do"),
                    },
                }
            )
        return result

    # Boards

    async def get_boards(self, project_key_or_id=None, board_type=None, max_results=50):
        params = {"maxResults": max_results}
        if project_key_or_id:
            params["projectKeyOrId"] = project_key_or_id
        if board_type:
            params["type"] = board_type
        response = await self.request(
            "GET", build_agile_url(self.base_url, "board"), params=params
        )
        return [
            {
                "id": board.get("id"),
                "name": board.get("name"),
                "type": board.get("type", "simple"),
                "projectKey": (board.get("location") or {}).get("projectKey"),
            }
            for board in (response or {}).get("values", [])
        ]

    async def get_sprints(self, board_id, state=None, max_results=50):
        params = {"maxResults": max_results}
        if state:
            params["state"] = state
        response = await self.request(
            "GET",
            build_agile_url(self.base_url, f"board/{board_id}/sprint"),
            params=params,
        )
        return [
            {
                "id": sprint.get("id"),
                "name": sprint.get("name"),
                "state": sprint.get("state", "active"),
                "startDate": sprint.get("startDate"),
                "endDate": sprint.get("endDate"),
                "goal": sprint.get("goal"),
            }
            for sprint in (response or {}).get("values", [])
        ]

    # Resources

    async def get_accessible_resources(self):
        if self.is_server:
            return [
                {
                    "id": "server",
                    "name": "Jira Server",
                    "url": self.base_url,
                    "scopes": [],
                    "avatarUrl": "",
                    "note": "Jira Server does not use cloudId. You can skip the cloudId parameter for other API calls.",
                }
            ]
        return [
            {
                "id": site.get("id"),
                "name": site.get("name"),
                "url": site.get("url"),
                "scopes": site.get("scopes", []),
                "avatarUrl": site.get("avatarUrl", ""),
            }
            for site in self.available_sites
        ]


def _user_summary(user):
    return {
        "accountId": user.get("accountId"),
        "displayName": user.get("displayName"),
        "emailAddress": user.get("emailAddress"),
        "active": user.get("active") is not False,
    }


def _user_profile(user):
    return {
        **_user_summary(user),
        "timeZone": user.get("timeZone"),
        "locale": user.get("locale"),
    }


def clean_issue(issue):
    """Reduce a full issue payload to the fields worth showing to a model."""
    fields = issue.get("fields") or {}
    return {
        "id": issue.get("id"),
        "key": issue.get("key"),
        "summary": fields.get("summary"),
        "status": (fields.get("status") or {}).get("name"),
        "created": fields.get("created"),
        "updated": fields.get("updated"),
        "description": adf_to_text(fields.get("description")).strip(),
        "timetracking": fields.get("timetracking"),
        "worklogs": fields.get("worklog"),
        "assignee": (fields.get("assignee") or {}).get("displayName"),
    }
