import argparse
import logging
import sys

# Configure logging for the main script
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("jira-mcp-server")


def main():
    """Parse arguments and launch the Jira MCP server over stdio or SSE"""
    parser = argparse.ArgumentParser(description="Jira MCP Server")
    parser.add_argument(
        "--transport",
        choices=["sse", "stdio"],
        default="sse",
        help="Transport to serve on (default: sse)",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Host for server")
    parser.add_argument("--port", type=int, default=8000, help="Port for server")
    parser.add_argument(
        "--user-id", default="local", help="User ID for stdio sessions"
    )

    args = parser.parse_args()

    if args.transport == "stdio":
        from src.servers.local import run as local_run

        sys.argv = [sys.argv[0], "--server", "jira", "--user-id", args.user_id]
        local_run()
        return

    logger.info(f"Starting Jira MCP server on {args.host}:{args.port}")
    from src.servers.remote import main as remote_main

    # Pass the CLI arguments to the remote server
    sys.argv = [sys.argv[0], "--host", args.host, "--port", str(args.port)]
    remote_main()


if __name__ == "__main__":
    main()
