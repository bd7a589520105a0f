"""Game master prompts offered alongside the widget tools."""

from __future__ import annotations

from collections.abc import Mapping

from mcp import types

from .errors import FieldViolation, NotFoundError, ValidationError

START_ADVENTURE = "start-adventure"
ADVENTURE_TYPES = ("tour", "foodie", "race")

ADVENTURE_DESCRIPTIONS = {
    "tour": (
        "should take the player through main tourist attractions and landmarks "
        "of the city. Suggest 3 to 5 locations to visit, mixing historical, "
        "cultural, and natural landmarks."
    ),
    "foodie": (
        "should take the player through the best food and drink spots in the "
        "city. Suggest 3 to 5 locations to visit, mixing restaurants, cafes, "
        "bars and other food and drink establishments."
    ),
    "race": (
        "should take the player on a race to visit the most iconic landmarks of "
        "the city within a given time limit."
    ),
}

PROMPTS = [
    types.Prompt(
        name=START_ADVENTURE,
        title="Start a CityQuest adventure",
        description="Brief the assistant to act as the CityQuest Game Master.",
        arguments=[
            types.PromptArgument(name="name", description="Player name.", required=True),
            types.PromptArgument(
                name="adventureType",
                description=f"One of: {', '.join(ADVENTURE_TYPES)}.",
                required=True,
            ),
            types.PromptArgument(
                name="location",
                description="Where the player is right now.",
                required=True,
            ),
        ],
    ),
]


def start_adventure_prompt(name: str, adventure_type: str, location: str) -> str:
    """Game master instructions for one player's adventure."""
    description = ADVENTURE_DESCRIPTIONS.get(adventure_type, ADVENTURE_DESCRIPTIONS["race"])
    return f"""You are the CityQuest Game Master, a playful, curious, and insightful guide who leads players on real-world adventures through their city.

Guide {name}, the player, through a city-based quest, one step at a time. They chose a {adventure_type} adventure, which {description} They are currently at {location}.

Gameplay loop:
- Offer a single destination or activity at a time, with a playful or mysterious tone. Offer a couple of options and adjust the adventure to the player's choice.
- Wait for the player to confirm they have arrived, then use the take-picture tool to capture them at the location.
- Pose a question that tests observation, curiosity, or local knowledge.
- When they answer correctly, reward them with the update-score tool.
- Optionally share fun facts or local history along the way.
- At the end of the adventure, use the video-summary tool to recap the journey.

Tone: friendly, imaginative, and responsive. Always stay in character as the CityQuest Game Master.
"""


def get_prompt(name: str, arguments: Mapping[str, str] | None) -> types.GetPromptResult:
    """Render a registered prompt.

    Raises:
        NotFoundError: Unknown prompt name.
        ValidationError: A required prompt argument is missing.
    """
    if name != START_ADVENTURE:
        raise NotFoundError(f"Unknown prompt: {name}")
    arguments = arguments or {}
    missing = [
        FieldViolation(arg, "required")
        for arg in ("name", "adventureType", "location")
        if not arguments.get(arg)
    ]
    if missing:
        raise ValidationError(name, missing)
    text = start_adventure_prompt(
        arguments["name"], arguments["adventureType"], arguments["location"]
    )
    return types.GetPromptResult(
        description="CityQuest Game Master briefing",
        messages=[
            types.PromptMessage(
                role="user", content=types.TextContent(type="text", text=text)
            )
        ],
    )
