"""Prompt templates for the site's Discord content generators.

Each generator page on the site posts a handful of form fields. This module
turns those fields into the prompt sent to the model and picks the output
length for that kind of content. ContentGenerator ties a template to a
TextGenerator so the page handler only has to pass the form data through.

Usage:
    >>> content = ContentGenerator(text_generator)
    >>> content.generate("poll", {"topic": "Movie night", "details": "Pick a genre"})
    >>> content.generate("poll", {...}, timestamp=1718000000000)  # regenerate
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from textwrap import dedent
from typing import Any

from discord_ai_tools.llm.text_generator import TextGenerator

logger = logging.getLogger(__name__)


class UnknownGeneratorError(KeyError):
    """Raised when a generator name is not in the catalogue."""


@dataclass(frozen=True, slots=True)
class GeneratorTemplate:
    """A prompt template for one kind of Discord content.

    Args:
        name: Generator identifier (e.g., "server-name")
        template: str.format template; every required and optional field is a placeholder
        required_fields: Fields that must be present and non-empty
        optional_fields: Optional field -> format used when it is present.
            The placeholder renders as an empty string when it is absent.
        max_tokens: Output length for this generator, None for the default
    """

    name: str
    template: str
    required_fields: tuple[str, ...]
    optional_fields: Mapping[str, str] = field(default_factory=dict)
    max_tokens: int | None = None

    def missing_fields(self, fields: Mapping[str, Any]) -> list[str]:
        """Return required fields that are absent or empty in ``fields``."""
        return [name for name in self.required_fields if not fields.get(name)]

    def render(self, fields: Mapping[str, Any]) -> str:
        """Format the prompt from form ``fields``.

        Raises:
            ValueError: If a required field is missing or empty
        """
        missing = self.missing_fields(fields)
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")

        values = {name: str(fields[name]) for name in self.required_fields}
        for name, fmt in self.optional_fields.items():
            value = fields.get(name)
            values[name] = fmt.format(value=value) if value else ""

        return self.template.format(**values).strip()


TEMPLATES: dict[str, GeneratorTemplate] = {
    t.name: t
    for t in (
        GeneratorTemplate(
            name="server-name",
            template=(
                "You are an expert in naming Discord servers. Generate 5-10 unique, catchy, "
                'and memorable server names for a Discord server focused on "{keywords}". '
                "List each name on a new line."
            ),
            required_fields=("keywords",),
        ),
        GeneratorTemplate(
            name="server-description",
            template=(
                "Write a compelling and informative Discord server description for a server "
                'named "{server_name}" with the following details: {description}. Keep it '
                "concise, engaging, and optimized to attract new members. The description "
                "should be under 1000 characters as per Discord's limits."
            ),
            required_fields=("server_name", "description"),
            max_tokens=400,
        ),
        GeneratorTemplate(
            name="channel-name",
            template=(
                "Generate a list of 8-12 organized Discord channel names for a server with "
                'the theme "{server_theme}" for the category "{category}". List each channel '
                "name on a new line, following Discord's naming convention (lowercase, no "
                "spaces, use hyphens instead). Include a mix of text and voice channels, and "
                "indicate which is which with [TEXT] or [VOICE] prefix."
            ),
            required_fields=("server_theme", "category"),
            max_tokens=350,
        ),
        GeneratorTemplate(
            name="welcome-message",
            template=(
                "Write a friendly and engaging welcome message for new members joining a "
                'Discord server named "{server_name}" with the theme "{server_theme}". '
                "Include a brief introduction to the server, mention 2-3 key channels they "
                "should check out, and encourage them to introduce themselves. The message "
                "should be warm, inclusive, and reflect the server's theme."
            ),
            required_fields=("server_name", "server_theme"),
            max_tokens=350,
        ),
        GeneratorTemplate(
            name="bot-command",
            template=dedent(
                """\
                Generate a list of 5-8 useful Discord bot commands and their responses for a bot named "{bot_name}" with the purpose: "{bot_purpose}". For each command, include:
                1. The command syntax (e.g., !command or /command)
                2. A brief description of what the command does
                3. An example of the bot's response when the command is used
                4. Any parameters the command might need

                Format each command as:
                Command: [command syntax]
                Description: [what it does]
                Parameters: [any required or optional parameters]
                Response: [example of bot response]

                Ensure the commands are relevant to the bot's purpose and would be useful in a Discord server."""  # noqa: E501
            ),
            required_fields=("bot_name", "bot_purpose"),
            max_tokens=500,
        ),
        GeneratorTemplate(
            name="role-name",
            template=(
                "Generate a list of 8-12 creative and thematic Discord role names for a "
                'server with the theme "{server_theme}" for the role type "{role_type}" '
                "(e.g., moderators, regular members, VIPs, etc.). List each role name on a "
                "new line. The names should be creative, fit the server theme, and be "
                "appropriate for Discord. Include a suggested color hex code for each role "
                "in parentheses after the name."
            ),
            required_fields=("server_theme", "role_type"),
            max_tokens=350,
        ),
        GeneratorTemplate(
            name="server-rules",
            template=(
                "Create a comprehensive set of 8-12 Discord server rules for a server named "
                '"{server_name}" focused on {server_focus}, with a {moderation_style} '
                "moderation style. The rules should be clear, fair, and help maintain a "
                "positive community. Format each rule with a number and a brief explanation "
                "of why the rule exists. Include rules about chat etiquette, content "
                "restrictions, channel usage, and respect for other members."
            ),
            required_fields=("server_name", "server_focus", "moderation_style"),
            max_tokens=500,
        ),
        GeneratorTemplate(
            name="announcement",
            template=(
                "Generate a clear, engaging Discord server announcement for "
                "{announcement_type} with these details: {details}. The announcement should "
                "be attention-grabbing, informative, and formatted appropriately for Discord "
                "(can include emojis, basic markdown like **bold** and *italics*). Make it "
                "exciting and community-focused."
            ),
            required_fields=("announcement_type", "details"),
            max_tokens=300,
        ),
        GeneratorTemplate(
            name="emoji",
            template=(
                "Generate 5-10 creative emoji ideas for a Discord server with the theme "
                '"{theme}" and emoji type "{emoji_type}". For each emoji, provide a name '
                "(lowercase with underscores) and a brief description. List each emoji on a "
                "new line."
            ),
            required_fields=("theme", "emoji_type"),
            max_tokens=500,
        ),
        GeneratorTemplate(
            name="event",
            template=dedent(
                """\
                Generate a detailed Discord event description and schedule for a {event_type} event with these details: {details}.
                The response should include:
                1. An attention-grabbing event title
                2. A detailed description of the event (using Discord markdown formatting like **bold** and *italics* where appropriate)
                3. Date and time suggestions (if not specified in the details)
                4. Any requirements or preparations for participants
                5. A brief schedule of activities during the event

                Make it exciting, community-focused, and formatted appropriately for Discord."""  # noqa: E501
            ),
            required_fields=("event_type", "details"),
            max_tokens=500,
        ),
        GeneratorTemplate(
            name="moderation",
            template=dedent(
                """\
                Generate a professional Discord moderator response template for a {severity} {violation_type} rule violation. {context}

                The response should include:
                1. A clear and professional greeting
                2. An explanation of which rule was violated and how
                3. The consequences of this violation (warning, timeout, kick, ban, etc.) appropriate for the severity level
                4. An explanation of why the rule exists and why it's important for the community
                5. Instructions for appealing the decision if applicable
                6. A professional closing

                Format the response using Discord markdown (bold, italics, etc.) where appropriate to enhance readability. The tone should be firm but fair, professional, and not condescending or overly harsh. The response should be usable as a template that moderators can customize for specific situations."""  # noqa: E501
            ),
            required_fields=("violation_type", "severity"),
            optional_fields={"context": "Additional context: {value}"},
            max_tokens=500,
        ),
        GeneratorTemplate(
            name="poll",
            template=dedent(
                """\
                Generate an engaging Discord poll about "{topic}" with these details: {details}.
                The response should include:
                1. A clear and attention-grabbing poll question
                2. 4-8 well-crafted poll options that cover a good range of possible answers
                3. A brief introduction explaining the purpose of the poll (using Discord markdown formatting like **bold** and *italics* where appropriate)
                4. A short conclusion with instructions on how to vote (e.g., using reactions)

                Make it engaging, community-focused, and formatted appropriately for Discord."""  # noqa: E501
            ),
            required_fields=("topic", "details"),
            max_tokens=400,
        ),
        GeneratorTemplate(
            name="webhook",
            template=dedent(
                """\
                Generate a detailed Discord webhook configuration for integrating with {service} for the purpose of {purpose}.

                The response should include:
                1. A webhook name and avatar suggestion that fits the integration purpose
                2. Detailed JSON configuration with all necessary parameters (using Discord markdown code blocks for formatting)
                3. Step-by-step instructions on how to set up the webhook in Discord
                4. Step-by-step instructions on how to configure the webhook in {service}
                5. Examples of events/triggers that would be useful to configure
                6. Any security considerations or best practices for this integration

                Format the response in a clear, organized way with appropriate headers and sections. Use Discord markdown formatting like **bold** and *italics* where appropriate."""  # noqa: E501
            ),
            required_fields=("service", "purpose"),
            max_tokens=600,
        ),
    )
}


def get_template(name: str) -> GeneratorTemplate:
    """Look up a generator template by name.

    Raises:
        UnknownGeneratorError: If no generator has that name
    """
    try:
        return TEMPLATES[name]
    except KeyError:
        raise UnknownGeneratorError(
            f"Unknown generator '{name}'. Must be one of {sorted(TEMPLATES)}"
        ) from None


class ContentGenerator:
    """Renders generator templates and forwards them to a TextGenerator."""

    def __init__(self, text_generator: TextGenerator) -> None:
        self.text_generator = text_generator

    def generate(self, name: str, fields: Mapping[str, Any], timestamp: Any = None) -> str:  # noqa: ANN401
        """Generate content for generator ``name`` from form ``fields``.

        Args:
            name: Generator identifier (see TEMPLATES)
            fields: Form fields posted by the page
            timestamp: No-cache token sent when the user asks to regenerate

        Returns:
            str: Generated text

        Raises:
            UnknownGeneratorError: If ``name`` is not a known generator
            ValueError: If a required field is missing
            GenerationFailedError: If the provider call fails
        """
        template = get_template(name)
        prompt = template.render(fields)

        options: dict[str, Any] = {"timestamp": timestamp}
        if template.max_tokens is not None:
            options["max_tokens"] = template.max_tokens

        logger.debug(f"Rendered {name} prompt ({len(prompt)} characters)")
        return self.text_generator.generate(prompt, options)
