"""
Cascade Thinking MCP Server - structured thinking for MCP clients.

Exposes the ``cascade_thinking`` tool over the Model Context Protocol. One
ThinkingEngine lives for the whole server process, so thoughts persist
across calls and across the tools that share the server.

Usage:
    cascade-thinking serve  # Start MCP server (stdio transport)
"""

import asyncio
import logging
from typing import Any, Dict, List

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from cascade_thinking.core import ThinkingEngine
from cascade_thinking.logging_config import setup_cascade_logging
from cascade_thinking.mcp.handlers import HANDLERS, VALIDATORS
from cascade_thinking.mcp.tool_definitions import TOOLS

logger = logging.getLogger(__name__)

SERVER_NAME = "cascade-thinking-mcp"
SERVER_VERSION = "1.0.0"

# Initialize MCP server
mcp = Server(SERVER_NAME, version=SERVER_VERSION)


class ThoughtRejected(Exception):
    """Raised from call_tool so the client receives an error result.

    The message is the JSON failure payload produced by the engine.
    """

    pass


def check_tool_schemas(tools: List[Tool]) -> None:
    """Fail fast if a tool ships an input schema that is not valid JSON Schema."""
    for tool in tools:
        schema = tool.inputSchema
        if not isinstance(schema, dict) or schema.get("type") != "object":
            raise ValueError(f"Tool '{tool.name}' must use an object input schema")
        try:
            Draft7Validator.check_schema(schema)
        except SchemaError as e:
            raise ValueError(f"Tool '{tool.name}' has invalid schema: {e.message}") from e


check_tool_schemas(TOOLS)


def get_engine() -> ThinkingEngine:
    """Get or create the ThinkingEngine shared by every call."""
    if not hasattr(get_engine, "_instance"):
        get_engine._instance = ThinkingEngine()  # type: ignore[attr-defined]
    return get_engine._instance  # type: ignore[attr-defined]


def reset_engine() -> None:
    """Drop the shared engine so the next call starts from empty state."""
    if hasattr(get_engine, "_instance"):
        delattr(get_engine, "_instance")


# =============================================================================
# INPUT VALIDATION & ERROR HANDLING
# =============================================================================


def validate_tool_input(name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
    """Validate MCP tool inputs at the transport level."""
    try:
        if not isinstance(name, str):
            raise ValueError(f"tool name must be a string, got {type(name).__name__}")
        if not name:
            raise ValueError("tool name must not be empty")
        if not isinstance(arguments, dict):
            raise ValueError(f"arguments must be an object, got {type(arguments).__name__}")

        validator = VALIDATORS.get(name)
        if validator is None:
            raise ValueError(f"Unknown tool: {name}")
        return validator(arguments)

    except (ValueError, TypeError) as e:
        logger.warning(f"Input validation failed for tool {name}: {e}")
        raise ValueError(f"Invalid input: {str(e)}")


def handle_tool_error(e: Exception, tool_name: str, arguments: Any) -> List[TextContent]:
    """Handle tool errors without leaking internals."""
    if isinstance(e, ValueError):
        logger.warning(f"Invalid input for tool {tool_name}: {e}")
        return [TextContent(type="text", text=f"Invalid input: {str(e)}")]

    argument_keys = list(arguments.keys()) if isinstance(arguments, dict) else []
    logger.error(
        f"Internal error in tool {tool_name}",
        extra={
            "tool_name": tool_name,
            "arguments_keys": argument_keys,
            "error_type": type(e).__name__,
            "error_message": str(e),
        },
        exc_info=True,
    )
    return [TextContent(type="text", text="Internal server error")]


# =============================================================================
# MCP PROTOCOL HANDLERS
# =============================================================================


@mcp.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return list(TOOLS)


# Field validation happens in the engine so rejections keep their payload shape
@mcp.call_tool(validate_input=False)
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Dispatch a tool call to the shared engine."""
    try:
        sanitized_args = validate_tool_input(name, arguments)
        handler = HANDLERS.get(name)
        if handler is None:
            logger.error(f"Unexpected tool name after validation: {name}")
            return [TextContent(type="text", text=f"Tool '{name}' is not available")]
        result = handler(sanitized_args, get_engine())
    except Exception as e:
        return handle_tool_error(e, name, arguments)

    if result.is_error:
        raise ThoughtRejected(result.text)
    return [TextContent(type="text", text=result.text)]


async def run_server():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        logger.info(f"{SERVER_NAME} running on stdio")
        await mcp.run(
            read_stream,
            write_stream,
            mcp.create_initialization_options(),
        )


def main(log_level: str = None):
    """Entry point for MCP server."""
    setup_cascade_logging(log_level)
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
