from enum import Enum


class Mode(Enum):
    """Strategies for coaxing structured output out of a chat completion."""

    FUNCTIONS = "function_call"
    TOOLS = "tool_call"
    JSON = "json_mode"
    JSON_SCHEMA = "json_schema_mode"
    MD_JSON = "markdown_json_mode"

    @classmethod
    def json_modes(cls) -> set["Mode"]:
        """Modes where the payload is read from the message content."""
        return {cls.JSON, cls.JSON_SCHEMA, cls.MD_JSON}
