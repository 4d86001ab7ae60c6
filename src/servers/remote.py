import logging
import uvicorn
import argparse
import threading
from urllib.parse import unquote

from starlette.routing import Route
from starlette.applications import Starlette
from starlette.responses import JSONResponse, Response
from prometheus_client import Counter, Gauge, generate_latest, CONTENT_TYPE_LATEST

from mcp.server.sse import SseServerTransport

from src.servers.local import load_server

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("jira-mcp-server")

# Prometheus metrics
active_connections = Gauge(
    "jira_mcp_active_connections", "Number of active SSE connections", ["server"]
)
connection_total = Counter(
    "jira_mcp_connection_total", "Total number of SSE connections", ["server"]
)

# Default metrics port
METRICS_PORT = 9091


def parse_session_key(session_key_encoded):
    """
    Split a session key of the form "{user_id}:{api_key}".

    The api_key part is the Jira token for this session and may itself
    contain colons ("email:api_token").
    """
    session_key = unquote(session_key_encoded)
    if ":" in session_key:
        user_id, api_key = session_key.split(":", 1)
        return user_id, api_key or None
    return session_key, None


def create_metrics_app():
    """Create a separate Starlette app just for metrics"""

    async def metrics_endpoint(request):
        """Prometheus metrics endpoint"""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return Starlette(routes=[Route("/metrics", endpoint=metrics_endpoint)])


def create_starlette_app(server_name="jira", server_factory=None, get_init_options=None):
    """
    Create a Starlette app serving one MCP server over SSE, one session per
    connection path.
    """
    if server_factory is None or get_init_options is None:
        server_factory, get_init_options = load_server(server_name)

    # SSE transports and server instances keyed by session
    session_transports = {}
    server_instances = {}

    async def handle_sse(request):
        """Handle SSE connection requests for a session"""
        session_key_encoded = request.path_params["session_key"]
        user_id, api_key = parse_session_key(session_key_encoded)

        logger.info(
            f"New SSE connection requested for {server_name} with session: {user_id}"
        )

        sse_transport = SseServerTransport(
            f"/{server_name}/{session_key_encoded}/messages/"
        )
        session_transports[session_key_encoded] = sse_transport

        # Reuse the server instance across reconnections of the same session
        if session_key_encoded not in server_instances:
            server_instances[session_key_encoded] = server_factory(user_id, api_key)
        server_instance = server_instances[session_key_encoded]

        init_options = get_init_options(server_instance)

        active_connections.labels(server=server_name).inc()
        connection_total.labels(server=server_name).inc()
        try:
            async with sse_transport.connect_sse(
                request.scope, request.receive, request._send
            ) as streams:
                logger.info(
                    f"SSE connection established for {server_name} session: {user_id}"
                )
                await server_instance.run(streams[0], streams[1], init_options)
        finally:
            session_transports.pop(session_key_encoded, None)
            active_connections.labels(server=server_name).dec()
            logger.info(f"Closed SSE connection for {server_name} session: {user_id}")
        return Response()

    async def handle_message(request):
        """Route a client message to the session's SSE transport"""
        session_key_encoded = request.path_params["session_key"]
        transport = session_transports.get(session_key_encoded)

        if transport is None:
            return Response("Session not found or expired", status_code=404)

        # The transport is itself an ASGI app; Starlette invokes it as the response
        return transport.handle_post_message

    async def root_handler(request):
        """Root endpoint that returns a simple 200 OK response"""
        return JSONResponse(
            {
                "status": "ok",
                "message": "Jira MCP server running",
                "servers": [server_name],
            }
        )

    async def health_check(request):
        """Health check endpoint"""
        return JSONResponse(
            {
                "status": "ok",
                "servers": [server_name],
                "activeSessions": len(session_transports),
            }
        )

    routes = [
        Route("/", endpoint=root_handler),
        Route("/health_check", endpoint=health_check),
        Route(f"/{server_name}/{{session_key}}", endpoint=handle_sse),
        Route(
            f"/{server_name}/{{session_key}}/messages/",
            endpoint=handle_message,
            methods=["POST"],
        ),
    ]

    return Starlette(routes=routes)


def run_metrics_server(host, port):
    """Run a separate metrics server on the specified port"""
    metrics_app = create_metrics_app()
    logger.info(f"Starting metrics server on {host}:{port}")
    uvicorn.run(metrics_app, host=host, port=port)


def main():
    """Main entry point for the Starlette server"""
    parser = argparse.ArgumentParser(description="Jira MCP Server")
    parser.add_argument("--host", default="0.0.0.0", help="Host for Starlette server")
    parser.add_argument(
        "--port", type=int, default=8000, help="Port for Starlette server"
    )
    parser.add_argument(
        "--metrics-port", type=int, default=METRICS_PORT, help="Port for metrics"
    )

    args = parser.parse_args()

    metrics_thread = threading.Thread(
        target=run_metrics_server, args=(args.host, args.metrics_port), daemon=True
    )
    metrics_thread.start()
    logger.info(
        f"Starting Metrics server on http://{args.host}:{args.metrics_port}/metrics"
    )

    app = create_starlette_app()
    logger.info(f"Starting Starlette server on {args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
