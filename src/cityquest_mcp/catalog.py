"""The CityQuest widget catalog.

Every widget pairs an MCP tool with an HTML resource. The catalog is built
once per process from the resolved base URL and never mutated afterwards.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from functools import partial
from typing import Any

import httpx

from . import builders
from . import schema as s
from .templates import DEFAULT_FETCH_TIMEOUT, BundledTemplate, RemotePageTemplate

TemplateSupplier = Callable[[], Awaitable[str]]
ContentBuilder = Callable[[Mapping[str, Any]], dict[str, Any]]

CALCULATOR_OPERATIONS = ("+", "-", "*", "/")


@dataclass(frozen=True)
class ToolDefinition:
    """One invocable widget tool and its paired HTML resource."""

    name: str
    title: str
    description: str
    invoking_message: str
    invoked_message: str
    result_message: str
    input_schema: s.Schema
    output_schema: s.Schema
    html: TemplateSupplier
    build: ContentBuilder
    widget_accessible: bool = False
    result_can_produce_widget: bool = False
    widget_prefers_border: bool = False


class Catalog:
    """Ordered, name-unique collection of tool definitions."""

    def __init__(self, definitions: Sequence[ToolDefinition]) -> None:
        seen: set[str] = set()
        for definition in definitions:
            if definition.name in seen:
                raise ValueError(f"Duplicate widget name in catalog: {definition.name}")
            seen.add(definition.name)
        self._definitions = tuple(definitions)

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def names(self) -> list[str]:
        return [d.name for d in self._definitions]

    def get(self, name: str) -> ToolDefinition | None:
        for definition in self._definitions:
            if definition.name == name:
                return definition
        return None


# -----------------------------------------------------------------------------
# Widget definitions
# -----------------------------------------------------------------------------


def start_cityquest(base_url: str) -> ToolDefinition:
    return ToolDefinition(
        name="start-cityquest",
        title="Start CityQuest Adventure",
        description=(
            "Launch the CityQuest onboarding console to register a hero "
            "and begin a new mission."
        ),
        invoking_message="Painting the skyline for your hero...",
        invoked_message="CityQuest console ready.",
        result_message="Your adventure console is open and ready.",
        input_schema={},
        output_schema={
            "status": s.string("Short status note describing whether the console loaded."),
            "adventureUrl": s.url("URL that opens the CityQuest greeting experience."),
        },
        html=BundledTemplate("adventure.html", base_url=base_url),
        build=lambda _args: builders.build_adventure_content(base_url),
        widget_accessible=True,
        result_can_produce_widget=True,
    )


def update_score() -> ToolDefinition:
    return ToolDefinition(
        name="update-score",
        title="Update CityQuest Score",
        description=(
            "Render a live scoreboard card with the latest player totals, "
            "progress, and badges."
        ),
        invoking_message="Syncing your guild ledger...",
        invoked_message="Score beacon synced.",
        result_message="The score tracker has been updated.",
        input_schema={
            "playerName": s.string(
                "Name of the player receiving the score update.", min_length=1
            ),
            "score": s.number("Total score after applying this update."),
            "progressPercentage": s.number(
                "Percent of the current quest that is complete. Clamped to 0-100.",
                optional=True,
            ),
            "badges": s.array(
                s.string(),
                f"Badge or perk names unlocked during the update. "
                f"Only the first {builders.MAX_BADGES} are shown.",
                optional=True,
            ),
            "lastCheckpoint": s.string(
                "Narrative description of the newest checkpoint or action.",
                optional=True,
            ),
            "scoreDelta": s.number(
                "How much the score changed in this update (positive or negative).",
                optional=True,
            ),
            "status": s.string(
                "Short sentence that appears on the status line.", optional=True
            ),
        },
        output_schema={
            "playerName": s.string(),
            "score": s.number(),
            "progressPercentage": s.number(minimum=0, maximum=100, optional=True),
            "badges": s.array(s.string(), max_items=builders.MAX_BADGES, optional=True),
            "lastCheckpoint": s.string(optional=True),
            "scoreDelta": s.number(optional=True),
            "status": s.string(),
            "updatedAt": s.string("ISO 8601 timestamp of the update."),
        },
        html=BundledTemplate("scoreboard.html"),
        build=builders.build_score_content,
        widget_accessible=True,
        result_can_produce_widget=True,
    )


def video_summary() -> ToolDefinition:
    return ToolDefinition(
        name="video-summary",
        title="CityQuest Video Summary",
        description=(
            "Embed a mission recording with a written recap, highlights, "
            "and follow-up action."
        ),
        invoking_message="Stitching together your mission footage...",
        invoked_message="Video recap ready.",
        result_message="The video summary widget has been rendered.",
        input_schema={
            "title": s.string(
                "Title that will appear at the top of the video summary.", min_length=1
            ),
            "videoUrl": s.url("Direct link to the video resource or livestream."),
            "summary": s.string(
                "Multi-line narrative that describes what happens in the video.",
                min_length=1,
            ),
            "highlights": s.array(
                s.string(),
                f"Key bullets to highlight under the summary. "
                f"Only the first {builders.MAX_HIGHLIGHTS} are shown.",
                optional=True,
            ),
            "callToAction": s.string(
                "Label for the call-to-action button beneath the summary.",
                optional=True,
            ),
            "ctaUrl": s.url(
                "URL or deeplink that should be opened when the CTA is clicked.",
                optional=True,
            ),
            "duration": s.string('Friendly duration label (e.g., "3m 42s").', optional=True),
            "thumbnailUrl": s.url(
                "Poster image to show when rendering a direct video tag.", optional=True
            ),
        },
        output_schema={
            "title": s.string(),
            "videoUrl": s.url(),
            "summary": s.string(),
            "highlights": s.array(
                s.string(), max_items=builders.MAX_HIGHLIGHTS, optional=True
            ),
            "callToAction": s.string(optional=True),
            "ctaUrl": s.url(optional=True),
            "duration": s.string(optional=True),
            "thumbnailUrl": s.url(optional=True),
            "status": s.string(),
            "embedUrl": s.string(optional=True),
        },
        html=BundledTemplate("video_summary.html"),
        build=builders.build_video_content,
        widget_accessible=True,
        result_can_produce_widget=True,
    )


def calculator() -> ToolDefinition:
    fields: dict[str, s.Field] = {
        "display": s.string(
            "The initial current display value on the calculator", optional=True
        ),
        "previousValue": s.number(
            "The initial previous value on the calculator. For example, if the "
            'user says "I want to add 5 to a number" set this to 5',
            optional=True,
        ),
        "operation": s.enum(
            CALCULATOR_OPERATIONS,
            "The initial operation on the calculator. For example, if the user "
            'says "I want to add 5 to a number" set this to "+"',
            optional=True,
        ),
        "waitingForNewValue": s.boolean(
            "Whether the calculator is waiting for a new value.", optional=True
        ),
        "errorState": s.boolean("Whether the calculator is in an error state", optional=True),
    }
    return ToolDefinition(
        name="calculator",
        title="Calculator",
        description="A simple calculator",
        invoking_message="Getting your calculator ready",
        invoked_message="Here's your calculator",
        result_message="The calculator has been rendered",
        input_schema=fields,
        output_schema=fields,
        html=BundledTemplate("calculator.html"),
        build=builders.build_calculator_content,
        widget_accessible=True,
        result_can_produce_widget=True,
    )


def take_picture(
    base_url: str,
    http_client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> ToolDefinition:
    return ToolDefinition(
        name="take-picture",
        title="Take a CityQuest Picture",
        description=(
            "Ask the player for a photo proving they reached the current checkpoint."
        ),
        invoking_message="Readying the guild camera...",
        invoked_message="Camera ready.",
        result_message="The photo request is ready for the player.",
        input_schema={
            "location": s.string("Checkpoint the player should be standing at.", optional=True),
            "prompt": s.string("Instruction shown above the upload area.", optional=True),
        },
        output_schema={
            "status": s.string(),
            "location": s.string(),
            "prompt": s.string(),
            "uploadUrl": s.url("Page where the player uploads the photo."),
            "requestedAt": s.string("ISO 8601 timestamp of the request."),
        },
        html=RemotePageTemplate(f"{base_url}take-picture", http_client, timeout),
        build=partial(builders.build_picture_content, base_url=base_url),
        widget_accessible=True,
        result_can_produce_widget=True,
        widget_prefers_border=True,
    )


def build_catalog(
    base_url: str,
    http_client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> Catalog:
    """Build the CityQuest catalog for one deployment.

    Args:
        base_url: Resolved app base URL, ending in a slash.
        http_client: Client for remotely rendered templates.
        timeout: Remote template fetch timeout in seconds.
    """
    return Catalog(
        [
            start_cityquest(base_url),
            update_score(),
            video_summary(),
            calculator(),
            take_picture(base_url, http_client, timeout),
        ]
    )
