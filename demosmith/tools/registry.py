"""Tool registry: validation, dispatch, and structured errors."""

import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ValidationError

from demosmith.core.exceptions import ToolNotFoundError, ToolValidationError
from demosmith.session.store import SessionStore
from demosmith.tools.views import NoParams, ToolDefinition, ToolResult

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Registry for the tool surface.

    ``execute`` never raises: unknown tools, invalid input and handler
    exceptions all come back as a failed ToolResult. Calls against one
    store are serialized on its lock.
    """

    def __init__(self, exclude_tools: Optional[List[str]] = None):
        """
        Args:
            exclude_tools: Tool names to leave unregistered
        """
        self._tools: Dict[str, ToolDefinition] = {}
        self._exclude_tools = set(exclude_tools or [])

    def register(
        self,
        name: str,
        handler: Callable,
        description: str = "",
        param_model: Optional[Type[BaseModel]] = None,
    ) -> None:
        """
        Register a tool.

        Args:
            name: Tool name
            handler: Async function; receives ``params`` plus any context
                arguments its signature names (``store``, ...)
            description: Human-readable description
            param_model: Pydantic model for the input
        """
        if name in self._exclude_tools:
            logger.debug(f"Skipping excluded tool: {name}")
            return

        self._tools[name] = ToolDefinition(
            name=name,
            description=description or f"Execute {name}",
            param_model=param_model or NoParams,
            handler=handler,
        )
        logger.debug(f"Registered tool: {name}")

    def tool(
        self,
        description: str = "",
        param_model: Optional[Type[BaseModel]] = None,
        name: Optional[str] = None,
    ):
        """
        Decorator for registering tools.

        Usage:
            @registry.tool("Navigate to URL", param_model=NavigateParams)
            async def navigate(params: NavigateParams, store: SessionStore):
                ...
        """
        def decorator(func: Callable):
            self.register(
                name=name or func.__name__,
                handler=func,
                description=description,
                param_model=param_model,
            )
            return func
        return decorator

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def get_tool_names(self) -> List[str]:
        return list(self._tools.keys())

    def get_tools_schema(self) -> List[Dict[str, Any]]:
        """JSON schema for every tool, for protocol layers."""
        return [definition.get_schema() for definition in self._tools.values()]

    def get_tools_description(self) -> str:
        lines = ["Available tools:"]
        for name, definition in self._tools.items():
            lines.append(f"  - {name}: {definition.description}")
        return "\n".join(lines)

    async def execute(
        self,
        tool_name: str,
        params: Union[Dict[str, Any], BaseModel, None],
        store: SessionStore,
        **context
    ) -> ToolResult:
        """
        Execute a tool.

        Args:
            tool_name: Name of the tool to execute
            params: Tool input (dict or Pydantic model)
            store: Session store the tool operates on
            **context: Additional context passed to handlers that ask for it

        Returns:
            ToolResult with the payload or a structured error
        """
        definition = self._tools.get(tool_name)
        if not definition:
            return ToolResult.failure(ToolNotFoundError(tool_name))

        if not isinstance(params, BaseModel):
            try:
                params = definition.param_model.model_validate(params or {})
            except ValidationError as e:
                logger.warning(f"Invalid input for {tool_name}: {e}")
                return ToolResult.failure(ToolValidationError(tool_name, str(e)))

        handler_kwargs = {}
        for param_name in inspect.signature(definition.handler).parameters:
            if param_name == "params":
                handler_kwargs["params"] = params
            elif param_name == "store":
                handler_kwargs["store"] = store
            elif param_name in context:
                handler_kwargs[param_name] = context[param_name]

        async with store.lock:
            try:
                logger.debug(f"Executing tool: {tool_name}")
                result = definition.handler(**handler_kwargs)
                if asyncio.iscoroutine(result):
                    result = await result
            except Exception as e:
                logger.error(f"Tool {tool_name} failed: {e}")
                return ToolResult.failure(e)

        # Normalize result
        if result is None:
            return ToolResult.ok()
        if isinstance(result, ToolResult):
            return result
        if isinstance(result, BaseModel):
            return ToolResult.ok(result.model_dump(by_alias=True, mode="json"))
        return ToolResult.ok(result)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __iter__(self):
        return iter(self._tools.values())
