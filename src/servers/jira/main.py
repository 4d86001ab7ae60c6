import os
import sys

# Add both project root and src directory to Python path
project_root = os.path.abspath(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(__file__))))
)
sys.path.insert(0, project_root)
sys.path.insert(0, os.path.join(project_root, "src"))

import logging
from pathlib import Path
import json
import requests
from typing import Optional, Iterable

from mcp.types import (
    TextContent,
    Tool,
    ImageContent,
    EmbeddedResource,
    AnyUrl,
    Resource,
)
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.lowlevel.helper_types import ReadResourceContents

from src.auth.clients.LocalAuthClient import LocalAuthClient
from src.utils.jira.bulk import bulk_project_analytics, bulk_user_analytics
from src.utils.jira.cache import BulkCache
from src.utils.jira.client import JiraClient
from src.utils.jira.config import load_settings
from src.utils.jira.util import (
    JiraApiError,
    build_auth_headers,
    build_external_base_url,
    extract_error_message,
    fetch_accessible_resources,
    get_credentials,
    parse_credentials,
    select_site,
)

SERVICE_NAME = Path(__file__).parent.name

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(SERVICE_NAME)

settings = load_settings()

# Shared by every server instance in this process
bulk_cache = BulkCache(
    ttl=settings.cache_ttl_seconds, max_entries=settings.cache_max_entries
)

BULK_USER_TOOL = "jira_bulk_user_analytics"
BULK_PROJECT_TOOL = "jira_bulk_project_analytics"

BULK_TOOL_DEFAULTS = {
    BULK_USER_TOOL: {"includeCorrelation": True, "aggregateBy": "user"},
    BULK_PROJECT_TOOL: {"includeCorrelation": True, "aggregateBy": "project"},
}

BULK_ERROR_LABELS = {
    BULK_USER_TOOL: "Error in bulk user productivity analysis: ",
    BULK_PROJECT_TOOL: "Error in bulk project productivity analysis: ",
}


async def create_jira_client(
    user_id,
    api_key=None,
    selected_site_index=None,
    target_cloud_id=None,
    target_site_name=None,
):
    """
    Create a new authenticated client for JIRA API calls.

    Args:
        user_id (str): The user ID for which to retrieve credentials.
        api_key (str, optional): A token to use instead of stored credentials.
        selected_site_index (int, optional): Index of the site to use if multiple are available.
        target_cloud_id (str, optional): Specific cloud ID to use.
        target_site_name (str, optional): Specific site name to use.

    Returns:
        JiraClient: A client bound to one Jira site.
    """
    try:
        token = await get_credentials(user_id, SERVICE_NAME, api_key=api_key)
        credentials = parse_credentials(token)

        read_headers = build_auth_headers(credentials)
        write_headers = build_auth_headers(credentials, write=True)

        # Basic auth and Jira Server talk to the configured site directly
        if settings.is_server or not credentials["is_oauth"]:
            return JiraClient(
                settings.base_url,
                read_headers,
                write_headers=write_headers,
                jira_type=settings.jira_type,
                timeout=settings.request_timeout,
                story_points_field=settings.story_points_field,
                cloud_id=target_cloud_id,
            )

        resources = fetch_accessible_resources(
            read_headers, timeout=settings.request_timeout
        )
        selected_site = select_site(
            resources,
            target_cloud_id=target_cloud_id,
            target_site_name=target_site_name,
            selected_site_index=selected_site_index,
        )
        cloud_id = selected_site.get("id")

        return JiraClient(
            build_external_base_url(cloud_id),
            read_headers,
            write_headers=write_headers,
            jira_type=settings.jira_type,
            timeout=settings.request_timeout,
            story_points_field=settings.story_points_field,
            site_name=selected_site.get("name"),
            cloud_id=cloud_id,
            available_sites=resources,
        )

    except Exception as e:
        logger.error(f"Error creating JIRA client: {str(e)}")
        raise


def _text(result):
    return [TextContent(type="text", text=json.dumps(result, indent=2))]


def create_server(user_id, api_key=None, cache=None, client_factory=None):
    """
    Initialize and configure the JIRA MCP server.

    Args:
        user_id (str): The user ID associated with the current session.
        api_key (str, optional): Optional token override.
        cache (BulkCache, optional): Store for bulk analytics reports.
        client_factory (callable, optional): Coroutine building a JiraClient.

    Returns:
        Server: Configured MCP server instance with registered tools.
    """
    server = Server(settings.server_name)

    server.user_id = user_id
    server.api_key = api_key

    analytics_cache = cache if cache is not None else bulk_cache
    make_client = client_factory or create_jira_client

    async def connect(cloud_id=None, site_name=None):
        return await make_client(
            server.user_id,
            api_key=server.api_key,
            target_cloud_id=cloud_id,
            target_site_name=site_name,
        )

    @server.list_tools()
    async def handle_list_tools() -> list[Tool]:
        """Return a list of available JIRA tools."""

        site_selection_properties = {
            "cloudId": {
                "type": "string",
                "description": "valid jira cloud id. get it using jira_get_cloud_id tool",
            },
            "siteName": {
                "type": "string",
                "description": "Atlassian site name to use (required only if you have multiple sites)",
            },
        }

        issue_tools = [
            Tool(
                name="jira_search_issues",
                description="Search for Jira issues or tasks or tickets using a JQL query string",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "searchString": {
                            "type": "string",
                            "description": "JQL query string, e.g. project = PRJ AND status = 'In Progress'",
                        },
                        "minimalFields": {
                            "type": "boolean",
                            "description": "Only fetch summary, status, dates, assignee and project",
                            "default": False,
                        },
                        "startAt": {
                            "type": "integer",
                            "description": "Index of the first issue to return",
                            "default": 0,
                        },
                        "pageSize": {
                            "type": "integer",
                            "description": "Number of issues to return per page",
                            "default": 50,
                        },
                        **site_selection_properties,
                    },
                    "required": ["searchString"],
                },
            ),
            Tool(
                name="jira_get_issue_info",
                description="Get detailed information about a specific Jira issue or task or ticket by key or ID",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issueKey": {
                            "type": "string",
                            "description": "JIRA issue key (e.g., 'TEST-123')",
                        },
                        **site_selection_properties,
                    },
                    "required": ["issueKey"],
                },
            ),
            Tool(
                name="jira_create_issue",
                description="Create a new Jira issue in a specified project",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "projectKey": {
                            "type": "string",
                            "description": "Project key where the issue will be created",
                        },
                        "summary": {
                            "type": "string",
                            "description": "Issue summary/title",
                        },
                        "description": {
                            "type": "string",
                            "description": "Issue description",
                        },
                        "issueType": {
                            "type": "string",
                            "description": "Issue type (e.g., 'Task', 'Bug', 'Story')",
                        },
                        "priority": {
                            "type": "string",
                            "description": "Issue priority",
                        },
                        "assigneeAccountId": {
                            "type": "string",
                            "description": "Account ID (Cloud) or username (Server) of the assignee",
                        },
                        **site_selection_properties,
                    },
                    "required": ["projectKey", "summary", "issueType"],
                },
            ),
            Tool(
                name="jira_update_issue",
                description="Update an existing Jira issue with new field values",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issueKey": {
                            "type": "string",
                            "description": "JIRA issue key to update",
                        },
                        "fields": {
                            "type": "object",
                            "description": "Fields to update in the issue",
                        },
                        **site_selection_properties,
                    },
                    "required": ["issueKey", "fields"],
                },
            ),
            Tool(
                name="jira_delete_issue",
                description="Delete a Jira issue (if permissions allow)",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issueKey": {
                            "type": "string",
                            "description": "JIRA issue key to delete",
                        },
                        **site_selection_properties,
                    },
                    "required": ["issueKey"],
                },
            ),
            Tool(
                name="jira_assign_issue",
                description="Assign a Jira issue to a user",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issueKey": {
                            "type": "string",
                            "description": "JIRA issue key to assign",
                        },
                        "accountId": {
                            "type": "string",
                            "description": "Account ID of the user to assign the issue to",
                        },
                        **site_selection_properties,
                    },
                    "required": ["issueKey", "accountId"],
                },
            ),
            Tool(
                name="jira_add_comment_to_issue",
                description="Add a comment to a Jira issue",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issueKey": {
                            "type": "string",
                            "description": "JIRA issue key to add comment to",
                        },
                        "comment": {
                            "type": "string",
                            "description": "Comment text to add",
                        },
                        **site_selection_properties,
                    },
                    "required": ["issueKey", "comment"],
                },
            ),
            Tool(
                name="jira_get_transitions",
                description="List the workflow transitions currently available for an issue",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issueKey": {
                            "type": "string",
                            "description": "JIRA issue key",
                        },
                        **site_selection_properties,
                    },
                    "required": ["issueKey"],
                },
            ),
            Tool(
                name="jira_transition_issue",
                description="Move an issue through its workflow, optionally adding a comment",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "issueKey": {
                            "type": "string",
                            "description": "JIRA issue key",
                        },
                        "transitionId": {
                            "type": "string",
                            "description": "ID of the transition (see jira_get_transitions)",
                        },
                        "comment": {
                            "type": "string",
                            "description": "Optional comment to add with the transition",
                        },
                        **site_selection_properties,
                    },
                    "required": ["issueKey", "transitionId"],
                },
            ),
        ]

        project_tools = [
            Tool(
                name="jira_get_all_projects",
                description="Get all accessible Jira projects or teams. returns always a list of projects",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "maxResults": {
                            "type": "integer",
                            "description": "Maximum number of projects to return",
                            "default": 50,
                        },
                        **site_selection_properties,
                    },
                },
            ),
            Tool(
                name="jira_get_project_details",
                description="Get detailed information about a specific Jira project or team",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "projectKey": {
                            "type": "string",
                            "description": "Project key (e.g., 'COS')",
                        },
                        **site_selection_properties,
                    },
                    "required": ["projectKey"],
                },
            ),
            Tool(
                name="jira_get_project_users",
                description="Get users who have access to a specific Jira project or team",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "projectKey": {
                            "type": "string",
                            "description": "comma separated list of project keys to get users for",
                        },
                        "maxResults": {
                            "type": "integer",
                            "description": "Maximum number of results to return (default: 50, max: 100)",
                            "default": 50,
                        },
                        **site_selection_properties,
                    },
                    "required": ["projectKey"],
                },
            ),
        ]

        user_tools = [
            Tool(
                name="jira_get_current_user",
                description="Get current user information",
                inputSchema={
                    "type": "object",
                    "properties": {**site_selection_properties},
                },
            ),
            Tool(
                name="jira_get_user_profile",
                description="Get user profile information by account ID",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "accountId": {
                            "type": "string",
                            "description": "Account ID of the user",
                        },
                        **site_selection_properties,
                    },
                    "required": ["accountId"],
                },
            ),
            Tool(
                name="jira_lookup_account_id",
                description="Look up Jira account ID by email or display name",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "searchString": {
                            "type": "string",
                            "description": "The display name or email address of the user to lookup",
                        },
                        **site_selection_properties,
                    },
                    "required": ["searchString"],
                },
            ),
        ]

        metadata_tools = [
            Tool(
                name="jira_get_issue_types",
                description="Get the issue types available in a project",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "projectId": {
                            "type": "string",
                            "description": "Project numeric id to get issue types for (e.g., 123)",
                        },
                        **site_selection_properties,
                    },
                },
            ),
            Tool(
                name="jira_get_priorities",
                description="Get all issue priorities",
                inputSchema={
                    "type": "object",
                    "properties": {**site_selection_properties},
                },
            ),
            Tool(
                name="jira_get_statuses",
                description="Get all issue statuses with their status categories",
                inputSchema={
                    "type": "object",
                    "properties": {**site_selection_properties},
                },
            ),
        ]

        board_tools = [
            Tool(
                name="jira_get_boards",
                description="Get agile boards, optionally filtered by project or type",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "projectKeyOrId": {
                            "type": "string",
                            "description": "Project key or ID to filter boards by",
                        },
                        "type": {
                            "type": "string",
                            "description": "Board type",
                            "enum": ["scrum", "kanban", "simple"],
                        },
                        **site_selection_properties,
                    },
                },
            ),
            Tool(
                name="jira_get_sprints",
                description="Get the sprints of a board",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "boardId": {
                            "type": "integer",
                            "description": "Board ID to get sprints for",
                        },
                        "state": {
                            "type": "string",
                            "description": "Filter sprints by state",
                            "enum": ["active", "closed", "future"],
                        },
                        **site_selection_properties,
                    },
                    "required": ["boardId"],
                },
            ),
        ]

        resource_tools = [
            Tool(
                name="jira_get_cloud_id",
                description="List the Atlassian sites (and their cloud ids) the current token can access",
                inputSchema={"type": "object", "properties": {}},
            ),
        ]

        bulk_tools = [
            Tool(
                name=BULK_USER_TOOL,
                description="Get comprehensive productivity analytics for multiple users by accountId in one call. Ideal for team performance analysis, ranking, and cross-platform correlation.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "users": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Array of user IDs (account id, display name or email)",
                        },
                        "startDate": {
                            "type": "string",
                            "description": "Start date in YYYY-MM-DD format",
                        },
                        "endDate": {
                            "type": "string",
                            "description": "End date in YYYY-MM-DD format",
                        },
                        "includeCorrelation": {
                            "type": "boolean",
                            "description": "Include correlation data for cross-platform analysis",
                            "default": True,
                        },
                        "aggregateBy": {
                            "type": "string",
                            "description": "How to aggregate the results",
                            "enum": ["user", "project", "sprint"],
                            "default": "user",
                        },
                        "projectKeys": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Optional project keys to restrict the analysis to",
                        },
                        "cloudId": {
                            "type": "string",
                            "description": "valid jira cloud id.",
                        },
                    },
                    "required": ["users", "startDate", "endDate", "cloudId"],
                },
            ),
            Tool(
                name=BULK_PROJECT_TOOL,
                description="Get comprehensive productivity analytics for multiple projects by projectKey in one call. Ideal for team performance analysis, ranking, and cross-platform correlation.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "startDate": {
                            "type": "string",
                            "description": "Start date in YYYY-MM-DD format",
                        },
                        "endDate": {
                            "type": "string",
                            "description": "End date in YYYY-MM-DD format",
                        },
                        "includeCorrelation": {
                            "type": "boolean",
                            "description": "Include correlation data for cross-platform analysis",
                            "default": True,
                        },
                        "projectKeys": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "array of project keys to filter by",
                        },
                        "aggregateBy": {
                            "type": "string",
                            "description": "How to aggregate the results",
                            "enum": ["user", "project", "sprint"],
                            "default": "project",
                        },
                        "cloudId": {
                            "type": "string",
                            "description": "valid jira cloud id.",
                        },
                    },
                    "required": ["startDate", "endDate", "projectKeys", "cloudId"],
                },
            ),
        ]

        return (
            issue_tools
            + project_tools
            + user_tools
            + metadata_tools
            + board_tools
            + resource_tools
            + bulk_tools
        )

    async def handle_bulk_tool(name, arguments):
        params = {**BULK_TOOL_DEFAULTS[name], **arguments}

        async def connect_for_cloud():
            return await connect(cloud_id=params.get("cloudId"))

        try:
            if name == BULK_USER_TOOL:
                result = await bulk_user_analytics(
                    params, connect_for_cloud, analytics_cache
                )
            else:
                result = await bulk_project_analytics(
                    params, connect_for_cloud, analytics_cache
                )
            return _text(result)
        except Exception as e:
            logger.error(f"{name} failed: {e}")
            return [
                TextContent(
                    type="text",
                    text=f"{BULK_ERROR_LABELS[name]}{extract_error_message(e)}",
                )
            ]

    @server.call_tool()
    async def handle_call_tool(
        name: str, arguments: dict | None
    ) -> list[TextContent | ImageContent | EmbeddedResource]:
        """
        Handle JIRA tool invocation from the MCP system.

        Args:
            name (str): The name of the tool being called.
            arguments (dict | None): Parameters passed to the tool.

        Returns:
            list[Union[TextContent, ImageContent, EmbeddedResource]]:
                Output content from tool execution.
        """
        if arguments is None:
            arguments = {}

        logger.info(f"User {server.user_id} calling tool: {name}")

        if name in BULK_TOOL_DEFAULTS:
            return await handle_bulk_tool(name, arguments)

        target_cloud_id = arguments.get("cloudId")
        target_site_name = arguments.get("siteName")

        try:
            jira_client = await connect(target_cloud_id, target_site_name)

            # For site-bound tools, validate that site info is provided if needed
            if (
                name != "jira_get_cloud_id"
                and jira_client.has_multiple_sites
                and not (target_cloud_id or target_site_name)
            ):
                available_site_names = [
                    site.get("name", "") for site in jira_client.available_sites
                ]
                return _text(
                    {
                        "error": "Multiple Jira sites available. You must specify either 'cloudId' or 'siteName' for this operation.",
                        "available_sites": available_site_names,
                    }
                )

            if name == "jira_search_issues":
                result = await jira_client.search_issues(
                    arguments["searchString"],
                    page_size=arguments.get("pageSize", 50),
                    minimal_fields=arguments.get("minimalFields", False),
                    start_at=arguments.get("startAt", 0),
                )

            elif name == "jira_get_issue_info":
                result = await jira_client.get_issue(arguments["issueKey"])

            elif name == "jira_create_issue":
                extra_fields = {}
                if arguments.get("priority"):
                    extra_fields["priority"] = {"name": arguments["priority"]}
                if arguments.get("assigneeAccountId"):
                    key = "name" if jira_client.is_server else "accountId"
                    extra_fields["assignee"] = {key: arguments["assigneeAccountId"]}

                result = await jira_client.create_issue(
                    arguments["projectKey"],
                    arguments["issueType"],
                    arguments["summary"],
                    description=arguments.get("description"),
                    fields=extra_fields,
                )

            elif name == "jira_update_issue":
                await jira_client.update_issue(
                    arguments["issueKey"], arguments.get("fields", {})
                )
                result = {
                    "success": True,
                    "message": f"Issue {arguments['issueKey']} updated successfully",
                }

            elif name == "jira_delete_issue":
                await jira_client.delete_issue(arguments["issueKey"])
                result = {
                    "success": True,
                    "message": f"Issue {arguments['issueKey']} successfully deleted",
                }

            elif name == "jira_assign_issue":
                await jira_client.assign_issue(
                    arguments["issueKey"], arguments["accountId"]
                )
                result = {
                    "success": True,
                    "message": f"Issue {arguments['issueKey']} assigned to {arguments['accountId']}",
                }

            elif name == "jira_add_comment_to_issue":
                result = await jira_client.add_comment(
                    arguments["issueKey"], arguments["comment"]
                )

            elif name == "jira_get_transitions":
                result = await jira_client.get_transitions(arguments["issueKey"])

            elif name == "jira_transition_issue":
                await jira_client.transition_issue(
                    arguments["issueKey"],
                    arguments["transitionId"],
                    comment=arguments.get("comment"),
                )
                result = {
                    "success": True,
                    "message": f"Issue {arguments['issueKey']} transitioned",
                }

            elif name == "jira_get_all_projects":
                result = await jira_client.list_projects(
                    max_results=arguments.get("maxResults", 50)
                )

            elif name == "jira_get_project_details":
                result = await jira_client.get_project(arguments["projectKey"])

            elif name == "jira_get_project_users":
                result = await jira_client.get_project_users(
                    arguments["projectKey"],
                    max_results=arguments.get("maxResults", 50),
                )

            elif name == "jira_get_current_user":
                result = await jira_client.get_current_user()

            elif name == "jira_get_user_profile":
                result = await jira_client.get_user_profile(arguments["accountId"])

            elif name == "jira_lookup_account_id":
                result = await jira_client.lookup_account_id(
                    arguments["searchString"]
                )

            elif name == "jira_get_issue_types":
                result = await jira_client.get_issue_types(arguments.get("projectId"))

            elif name == "jira_get_priorities":
                result = await jira_client.get_priorities()

            elif name == "jira_get_statuses":
                result = await jira_client.get_statuses()

            elif name == "jira_get_boards":
                result = await jira_client.get_boards(
                    arguments.get("projectKeyOrId"), arguments.get("type")
                )

            elif name == "jira_get_sprints":
                result = await jira_client.get_sprints(
                    arguments["boardId"], arguments.get("state")
                )

            elif name == "jira_get_cloud_id":
                result = await jira_client.get_accessible_resources()

            else:
                return _text({"error": f"Unknown tool: {name}"})

            return _text(result)

        except JiraApiError as e:
            error_message = {"error": str(e)}
            if e.details:
                error_message["details"] = e.details
            return _text(error_message)
        except requests.exceptions.RequestException as e:
            return _text({"error": f"JIRA API error: {extract_error_message(e)}"})
        except Exception as e:
            return _text({"error": str(e)})

    @server.list_resources()
    async def handle_list_resources(
        cursor: Optional[str] = None,
    ) -> list[Resource]:
        """List JIRA organization resources (sites)"""
        logger.info(
            f"Listing organization resources for user: {server.user_id} with cursor: {cursor}"
        )

        try:
            jira_client = await connect()

            resources = []
            for site in await jira_client.get_accessible_resources():
                site_id = site.get("id")
                site_name = site.get("name")
                is_current = site_id == jira_client.cloud_id

                resources.append(
                    Resource(
                        uri=f"jira://site/{site_id}",
                        mimeType="application/json",
                        name=f"{site_name}{' (current)' if is_current else ''}",
                        description=f"Jira site: {site_name} - {site.get('url', '')}",
                    )
                )

            return resources

        except Exception as e:
            logger.error(f"Error listing JIRA resources: {e}")
            return []

    @server.read_resource()
    async def handle_read_resource(uri: AnyUrl) -> Iterable[ReadResourceContents]:
        """Read a JIRA organization resource"""
        logger.info(f"Reading resource: {uri} for user: {server.user_id}")

        uri_str = str(uri)
        if not uri_str.startswith("jira://"):
            raise ValueError(f"Invalid JIRA URI: {uri_str}")

        parts = uri_str.replace("jira://", "").split("/")
        if len(parts) != 2:
            raise ValueError(f"Invalid JIRA URI format: {uri_str}")

        resource_type, resource_id = parts
        if resource_type != "site":
            raise ValueError(f"Unknown resource type: {resource_type}")

        try:
            jira_client = await connect()
            for site in await jira_client.get_accessible_resources():
                if site.get("id") == resource_id:
                    return [
                        ReadResourceContents(
                            content=json.dumps(site, indent=2),
                            mime_type="application/json",
                        )
                    ]

            return [
                ReadResourceContents(
                    content=f"Error: Site with ID {resource_id} not found",
                    mime_type="text/plain",
                )
            ]

        except Exception as e:
            logger.error(f"Error reading JIRA resource: {e}")
            return [
                ReadResourceContents(content=f"Error: {str(e)}", mime_type="text/plain")
            ]

    return server


server = create_server


def get_initialization_options(server_instance: Server) -> InitializationOptions:
    """
    Define the initialization options for the JIRA MCP server.

    Args:
        server_instance (Server): The server instance to describe.

    Returns:
        InitializationOptions: MCP-compatible initialization configuration.
    """
    return InitializationOptions(
        server_name=settings.server_name,
        server_version=settings.server_version,
        capabilities=server_instance.get_capabilities(
            notification_options=NotificationOptions(),
            experimental_capabilities={},
        ),
    )


if __name__ == "__main__":
    if len(sys.argv) > 2 and sys.argv[1].lower() == "auth":
        # Store a token for the local user (used with ENVIRONMENT=local)
        LocalAuthClient().save_user_credentials(SERVICE_NAME, "local", sys.argv[2])
    else:
        print("Usage:")
        print("  python main.py auth <token> - Save a Jira token for the local user")
