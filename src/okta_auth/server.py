"""MCP stdio server exposing the session operations as tools.

Pattern: Registered Tool Table
------------------------------
Each tool is registered once with its JSON schema and a synchronous handler
that takes the raw argument dict and returns a JSON-serialisable payload.
:meth:`AuthMCPServer.dispatch` is the single boundary where failures are
converted: typed :class:`~okta_auth.exceptions.OktaAuthError` faults,
argument validation errors, unknown tool names, and unexpected exceptions all
come back as ``{"error": true, "message": ..., "code": ...}`` instead of a
transport-level fault, so one bad call never takes the server down.

Handlers run in a worker thread (``asyncio.to_thread``) because an
interactive login blocks for up to the login timeout while the human signs in.
The stdio transport serialises calls, so at most one operation runs at a time.

stdout carries the MCP protocol; all logging goes to stderr.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Callable, Optional

from mcp.server import Server
from mcp.types import TextContent, Tool
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from okta_auth.auth.manager import CLEAR_ALL, SessionManager
from okta_auth.exceptions import OktaAuthError
from okta_auth.exit_codes import EXIT_STARTUP_FAILURE, EXIT_SUCCESS

logger = logging.getLogger(__name__)

SERVER_NAME = "mcp-okta-auth"

Handler = Callable[[dict[str, Any]], Any]


# -- tool arguments ---------------------------------------------------------


class _ToolArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AuthenticateArgs(_ToolArgs):
    service: Optional[str] = None
    username: Optional[str] = None
    force_refresh: bool = Field(default=False, alias="forceRefresh")


class ServiceArgs(_ToolArgs):
    service: str


class CopySessionArgs(_ToolArgs):
    from_service: str = Field(alias="fromService")
    to_service: str = Field(alias="toService")


class ClearAuthArgs(_ToolArgs):
    service: Optional[str] = None


def error_payload(message: str, code: str = "error") -> dict[str, Any]:
    return {"error": True, "message": message, "code": code}


# -- server -----------------------------------------------------------------


class AuthMCPServer:
    """Exposes a :class:`~okta_auth.auth.manager.SessionManager` over MCP.

    Args:
        manager: The session manager every tool delegates to.
        server_name: Name announced during MCP initialisation.
    """

    def __init__(self, manager: SessionManager, server_name: str = SERVER_NAME) -> None:
        self._server = Server(server_name)
        self._manager = manager
        self._tools: dict[str, Tool] = {}
        self._handlers: dict[str, Handler] = {}
        self._register_all_tools()
        logger.info(
            "MCP server '%s' ready with tools: %s", server_name, ", ".join(self._tools)
        )

    # -- registration ------------------------------------------------------

    def _register_tool(
        self,
        name: str,
        description: str,
        input_schema: dict[str, Any],
        handler: Handler,
    ) -> None:
        self._tools[name] = Tool(name=name, description=description, inputSchema=input_schema)
        self._handlers[name] = handler

    def _register_all_tools(self) -> None:
        keys = self._manager.catalog.keys()
        names = ", ".join(keys)
        service_prop = {"type": "string", "enum": keys}

        self._register_tool(
            name="authenticate",
            description="Authenticate with Okta SSO, opening a browser only when no valid session exists.",
            input_schema={
                "type": "object",
                "properties": {
                    "service": {
                        **service_prop,
                        "description": f"Target service ({names}). If omitted, only Okta auth is performed.",
                    },
                    "username": {
                        "type": "string",
                        "description": "Okta username to pre-fill (password and MFA stay manual).",
                    },
                    "forceRefresh": {
                        "type": "boolean",
                        "description": "Force re-authentication even if a valid session exists.",
                        "default": False,
                    },
                },
            },
            handler=self._authenticate,
        )
        self._register_tool(
            name="check_auth_status",
            description="Check authentication status for Okta and every registered service.",
            input_schema={"type": "object", "properties": {}},
            handler=self._check_auth_status,
        )
        self._register_tool(
            name="get_service_token",
            description="Get stored authentication cookies (and token, if any) for a service.",
            input_schema={
                "type": "object",
                "properties": {"service": {**service_prop, "description": "Service name."}},
                "required": ["service"],
            },
            handler=self._get_service_token,
        )
        self._register_tool(
            name="refresh_session",
            description="Re-authenticate only if the stored Okta session is missing or expired.",
            input_schema={"type": "object", "properties": {}},
            handler=self._refresh_session,
        )
        self._register_tool(
            name="copy_session",
            description="Copy the Okta session into another service's legacy cookie file.",
            input_schema={
                "type": "object",
                "properties": {
                    "fromService": {**service_prop, "description": "Source service with valid auth."},
                    "toService": {**service_prop, "description": "Target service to copy auth to."},
                },
                "required": ["fromService", "toService"],
            },
            handler=self._copy_session,
        )
        self._register_tool(
            name="clear_auth",
            description="Clear stored authentication for one service, or everything.",
            input_schema={
                "type": "object",
                "properties": {
                    "service": {
                        "type": "string",
                        "enum": [*keys, CLEAR_ALL],
                        "description": "Service to clear (omit or 'all' to clear everything).",
                    },
                },
            },
            handler=self._clear_auth,
        )
        self._register_tool(
            name="list_services",
            description="List all registered services and their configuration.",
            input_schema={"type": "object", "properties": {}},
            handler=self._list_services,
        )

    def list_tools(self) -> list[Tool]:
        return list(self._tools.values())

    # -- dispatch ----------------------------------------------------------

    def dispatch(self, name: str, arguments: Optional[dict[str, Any]] = None) -> Any:
        """Run tool *name* and return its payload. Never raises."""
        handler = self._handlers.get(name)
        if handler is None:
            return error_payload(f"Unknown tool: {name}", code="unknown_tool")
        try:
            return handler(arguments or {})
        except OktaAuthError as exc:
            logger.warning("Tool %s failed: %s", name, exc)
            return error_payload(str(exc), code=exc.code)
        except ValidationError as exc:
            logger.warning("Tool %s called with invalid arguments: %s", name, exc)
            return error_payload(f"Invalid arguments for {name}: {exc}", code="invalid_arguments")
        except Exception as exc:
            logger.exception("Tool execution failed: %s", name)
            return error_payload(str(exc) or type(exc).__name__, code="internal_error")

    # -- handlers ----------------------------------------------------------

    def _authenticate(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = AuthenticateArgs.model_validate(arguments)
        return self._manager.authenticate(
            service=args.service,
            username=args.username,
            force_refresh=args.force_refresh,
        ).to_payload()

    def _check_auth_status(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return self._manager.check_auth_status().to_payload()

    def _get_service_token(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = ServiceArgs.model_validate(arguments)
        return self._manager.get_service_token(args.service).to_payload()

    def _refresh_session(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return self._manager.refresh_session().to_payload()

    def _copy_session(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = CopySessionArgs.model_validate(arguments)
        return self._manager.copy_session(args.from_service, args.to_service).to_payload()

    def _clear_auth(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = ClearAuthArgs.model_validate(arguments)
        return self._manager.clear_auth(args.service).to_payload()

    def _list_services(self, arguments: dict[str, Any]) -> list[dict[str, Any]]:
        return [descriptor.to_payload() for descriptor in self._manager.list_services()]

    # -- lifecycle ---------------------------------------------------------

    def setup_handlers(self) -> None:
        """Wire up MCP protocol handlers."""
        server = self._server

        @server.list_tools()
        async def list_tools() -> list[Tool]:
            return self.list_tools()

        # Argument checks happen in dispatch so every failure is a JSON error payload.
        @server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            payload = await asyncio.to_thread(self.dispatch, name, arguments)
            return [TextContent(type="text", text=json.dumps(payload, indent=2, default=str))]

    async def run(self) -> None:
        """Serve MCP on stdio until the client disconnects."""
        from mcp.server.stdio import stdio_server

        self.setup_handlers()
        async with stdio_server() as (read_stream, write_stream):
            await self._server.run(
                read_stream,
                write_stream,
                self._server.create_initialization_options(),
            )


def run_server(verbose: bool = False) -> int:
    """Configure logging, build the manager, and serve until disconnect.

    Returns:
        :data:`~okta_auth.exit_codes.EXIT_SUCCESS` after a clean shutdown,
        or :data:`~okta_auth.exit_codes.EXIT_STARTUP_FAILURE` if the
        server could not be constructed or the transport failed.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    from okta_auth.auth.manager import create_default_manager

    try:
        server = AuthMCPServer(create_default_manager())
    except OktaAuthError as exc:
        logger.error("Failed to start server: %s", exc)
        return EXIT_STARTUP_FAILURE

    logger.info("Starting MCP Okta Auth Server on stdio")
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("MCP server terminated")
        return EXIT_STARTUP_FAILURE
    return EXIT_SUCCESS


# Entry point when launched directly as an MCP stdio subprocess.
if __name__ == "__main__":
    sys.exit(run_server())
