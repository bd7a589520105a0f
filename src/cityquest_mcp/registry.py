"""Widget registry: registers catalog entries and dispatches MCP requests.

Each catalog entry becomes one HTML resource, addressed by
``ui://widget/{name}-{build_id}.html``, and one tool of the same
version-qualified name. Tool results carry the structured payload plus an
embedded copy of the widget markup with the initial render data, so the
client can hydrate the widget without a second round-trip.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from mcp import types
from mcp.server import Server
from mcp.shared.exceptions import McpError

from .base_url import base_origin
from .catalog import ToolDefinition
from .errors import (
    BuilderError,
    CityQuestError,
    FieldViolation,
    NotFoundError,
    RegistrationError,
)
from .schema import object_schema, validate

logger = logging.getLogger(__name__)

WIDGET_MIME_TYPE = "text/html"
INITIAL_RENDER_DATA_KEY = "mcpui.dev/ui-initial-render-data"


def qualified_name(name: str, build_id: str) -> str:
    """Suffix a widget name with the deployment's build identifier."""
    return f"{name}-{build_id}"


def widget_uri(name: str) -> str:
    return f"ui://widget/{name}.html"


# =============================================================================
# Result types
# =============================================================================


@dataclass(frozen=True)
class RegisteredWidget:
    """A catalog entry after its markup has been materialized."""

    definition: ToolDefinition
    name: str
    uri: str
    html: str


@dataclass(frozen=True)
class UIResource:
    """Widget markup embedded in a tool result."""

    uri: str
    html: str
    initial_render_data: dict[str, Any]

    def to_mcp(self) -> types.EmbeddedResource:
        return types.EmbeddedResource(
            type="resource",
            resource=types.TextResourceContents(
                uri=self.uri,
                mimeType=WIDGET_MIME_TYPE,
                text=self.html,
                _meta={INITIAL_RENDER_DATA_KEY: self.initial_render_data},
            ),
        )


@dataclass(frozen=True)
class InvocationResult:
    text: str
    structured_content: dict[str, Any]
    ui_resource: UIResource

    def to_mcp(self) -> types.CallToolResult:
        return types.CallToolResult(
            content=[
                types.TextContent(type="text", text=self.text),
                self.ui_resource.to_mcp(),
            ],
            structuredContent=self.structured_content,
            isError=False,
        )


@dataclass(frozen=True)
class ResourceContent:
    uri: str
    mime_type: str
    text: str
    metadata: dict[str, Any]

    def to_mcp(self) -> types.TextResourceContents:
        return types.TextResourceContents(
            uri=self.uri,
            mimeType=self.mime_type,
            text=self.text,
            _meta=self.metadata,
        )


# =============================================================================
# Registry
# =============================================================================


class WidgetRegistry:
    """Holds the registered widgets of one process.

    Registration is write-once: after :meth:`register_all` completes the
    registry is only read, so concurrent invocations share no mutable state.
    """

    def __init__(self, build_id: str, base_url: str) -> None:
        """Initialize the registry.

        Args:
            build_id: Deployment build identifier used to qualify names.
            base_url: Resolved app base URL, used for widget domain metadata.
        """
        self.build_id = build_id
        self.base_url = base_url
        self._widgets: dict[str, RegisteredWidget] = {}
        self._by_uri: dict[str, RegisteredWidget] = {}
        self.failures: list[RegistrationError] = []

    def __len__(self) -> int:
        return len(self._widgets)

    def __contains__(self, name: object) -> bool:
        return name in self._widgets

    @property
    def widgets(self) -> list[RegisteredWidget]:
        return list(self._widgets.values())

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    async def register(self, definition: ToolDefinition) -> RegisteredWidget:
        """Materialize one definition's markup and register it.

        Raises:
            RegistrationError: The name is already registered or the template
                supplier failed.
        """
        name = qualified_name(definition.name, self.build_id)
        if name in self._widgets:
            raise RegistrationError(f"Widget {name} is already registered")

        try:
            html = await definition.html()
        except Exception as e:
            raise RegistrationError(
                f"Could not materialize markup for {name}: {e}"
            ) from e
        if not isinstance(html, str):
            raise RegistrationError(
                f"Template for {name} returned {type(html).__name__}, expected str"
            )

        uri = widget_uri(name)
        widget = RegisteredWidget(definition=definition, name=name, uri=uri, html=html)
        self._widgets[name] = widget
        self._by_uri[uri] = widget
        logger.info(f"Registered widget {name} ({len(html)} bytes) at {uri}")
        return widget

    async def register_all(self, catalog: Iterable[ToolDefinition]) -> list[RegisteredWidget]:
        """Register every catalog entry in order.

        A failing entry is logged and skipped; the rest still register.
        """
        registered: list[RegisteredWidget] = []
        for definition in catalog:
            try:
                registered.append(await self.register(definition))
            except RegistrationError as e:
                logger.error(f"Skipping widget {definition.name}: {e}")
                self.failures.append(e)
        logger.info(
            f"Registered {len(registered)} widgets"
            + (f", {len(self.failures)} failed" if self.failures else "")
        )
        return registered

    # -------------------------------------------------------------------------
    # Invocation
    # -------------------------------------------------------------------------

    def invoke(self, name: str, arguments: Mapping[str, Any] | None) -> InvocationResult:
        """Run a tool and package its result.

        Raises:
            NotFoundError: No tool is registered under ``name``.
            ValidationError: ``arguments`` violate the input schema.
            BuilderError: The builder raised or produced a non-conforming payload.
        """
        widget = self._widgets.get(name)
        if widget is None:
            raise NotFoundError(f"Unknown tool: {name}")
        definition = widget.definition

        accepted = validate(name, definition.input_schema, arguments)
        try:
            payload = definition.build(accepted)
        except Exception as e:
            raise BuilderError(f"{name} failed to build its payload: {e}") from e

        if not isinstance(payload, Mapping):
            raise BuilderError(f"{name} returned {type(payload).__name__}, expected a mapping")
        payload = dict(payload)
        problems: list[FieldViolation] = []
        for field, descriptor in definition.output_schema.items():
            value = payload.get(field)
            if value is None:
                if not descriptor.optional:
                    problems.append(FieldViolation(field, "missing"))
                continue
            problems.extend(descriptor.check(value, field))
        if problems:
            details = "; ".join(str(p) for p in problems)
            raise BuilderError(f"{name} produced an invalid payload: {details}")

        return InvocationResult(
            text=definition.result_message,
            structured_content=payload,
            ui_resource=UIResource(
                uri=widget.uri,
                html=widget.html,
                initial_render_data={
                    "toolInput": dict(arguments or {}),
                    "toolOutput": payload,
                },
            ),
        )

    def fetch_resource(self, uri: str) -> ResourceContent:
        """Return the stored markup for a widget URI.

        Raises:
            NotFoundError: No widget is registered at ``uri``.
        """
        widget = self._by_uri.get(uri)
        if widget is None:
            raise NotFoundError(f"Unknown resource: {uri}")
        return ResourceContent(
            uri=uri,
            mime_type=WIDGET_MIME_TYPE,
            text=widget.html,
            metadata=self._resource_meta(widget),
        )

    # -------------------------------------------------------------------------
    # MCP descriptors
    # -------------------------------------------------------------------------

    def _resource_meta(self, widget: RegisteredWidget) -> dict[str, Any]:
        meta: dict[str, Any] = {
            "openai/widgetDescription": widget.definition.description,
            "openai/widgetCSP": {
                "connect_domains": [],
                "resource_domains": [base_origin(self.base_url)],
            },
        }
        if widget.definition.widget_prefers_border:
            meta["openai/widgetPrefersBorder"] = True
        return meta

    def _tool_meta(self, widget: RegisteredWidget) -> dict[str, Any]:
        definition = widget.definition
        meta: dict[str, Any] = {
            "openai/widgetDomain": self.base_url,
            "openai/outputTemplate": widget.uri,
            "openai/toolInvocation/invoking": definition.invoking_message,
            "openai/toolInvocation/invoked": definition.invoked_message,
        }
        if definition.result_can_produce_widget:
            meta["openai/resultCanProduceWidget"] = True
        if definition.widget_accessible:
            meta["openai/widgetAccessible"] = True
        return meta

    def tool_descriptors(self) -> list[types.Tool]:
        return [
            types.Tool(
                name=widget.name,
                title=widget.definition.title,
                description=widget.definition.description,
                inputSchema=object_schema(widget.definition.input_schema),
                outputSchema=object_schema(widget.definition.output_schema),
                annotations=types.ToolAnnotations(readOnlyHint=True, openWorldHint=False),
                _meta=self._tool_meta(widget),
            )
            for widget in self._widgets.values()
        ]

    def resource_descriptors(self) -> list[types.Resource]:
        return [
            types.Resource(
                uri=widget.uri,
                name=widget.name,
                title=widget.definition.title,
                description=f"{widget.definition.title} markup",
                mimeType=WIDGET_MIME_TYPE,
                _meta=self._resource_meta(widget),
            )
            for widget in self._widgets.values()
        ]

    # -------------------------------------------------------------------------
    # MCP server wiring
    # -------------------------------------------------------------------------

    async def handle_call_tool(self, req: types.CallToolRequest) -> types.ServerResult:
        name = req.params.name
        try:
            result = self.invoke(name, req.params.arguments)
        except CityQuestError as e:
            logger.warning(f"Tool call {name} failed: {e}")
            return types.ServerResult(
                types.CallToolResult(
                    content=[types.TextContent(type="text", text=f"Error: {e}")],
                    isError=True,
                )
            )
        return types.ServerResult(result.to_mcp())

    async def handle_read_resource(
        self, req: types.ReadResourceRequest
    ) -> types.ServerResult:
        try:
            content = self.fetch_resource(str(req.params.uri))
        except NotFoundError as e:
            raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=str(e))) from e
        return types.ServerResult(types.ReadResourceResult(contents=[content.to_mcp()]))

    def attach(self, server: Server) -> None:
        """Install tool and resource handlers on an MCP server."""

        @server.list_tools()  # type: ignore
        async def list_tools() -> list[types.Tool]:
            return self.tool_descriptors()

        @server.list_resources()  # type: ignore
        async def list_resources() -> list[types.Resource]:
            return self.resource_descriptors()

        # Raw handlers: results keep their _meta and skip jsonschema validation.
        server.request_handlers[types.CallToolRequest] = self.handle_call_tool
        server.request_handlers[types.ReadResourceRequest] = self.handle_read_resource
