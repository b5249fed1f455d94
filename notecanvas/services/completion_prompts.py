"""LLM prompt templates for workspace analysis and chat."""

BREAKDOWN_SCHEMA = {
    "type": "object",
    "properties": {
        "summary": {"type": "string"},
        "keyPoints": {"type": "array", "items": {"type": "string"}},
        "actionItems": {"type": "array", "items": {"type": "string"}},
        "tags": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["summary", "keyPoints", "tags"],
}

CHART_SCHEMA = {
    "type": "object",
    "properties": {
        "type": {"type": "string", "enum": ["bar", "line", "area", "pie"]},
        "title": {"type": "string"},
        "xAxisKey": {"type": "string"},
        "dataKey": {"type": "string"},
        "data": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "value": {"type": "number"},
                },
                "required": ["name", "value"],
            },
        },
    },
    "required": ["type", "title", "data", "xAxisKey", "dataKey"],
}

BREAKDOWN_SYSTEM_PROMPT = """You turn messy notes into a structured breakdown.

Respond ONLY with valid JSON:
{
  "summary": "two or three sentences",
  "keyPoints": ["string", ...],
  "actionItems": ["string", ...],
  "tags": ["short lowercase tag", ...]
}"""


def get_breakdown_prompt(text: str) -> str:
    """Generate prompt for structuring a note."""
    return f"""Analyze the following chaotic notes and structure them.

{text}"""


CHART_SYSTEM_PROMPT = """You are a data visualization assistant.

Pick the chart type (bar, line, area or pie) that best fits the dataset and invent
realistic sample data points for it. Use "name" for the category axis and "value"
for the measure unless the dataset clearly needs other keys.

Respond ONLY with valid JSON matching the requested schema."""


def get_chart_prompt(dataset_description: str) -> str:
    """Generate prompt for a chart recommendation."""
    return (
        f'Generate a visualization based on this dataset description: "{dataset_description}". '
        "Create realistic mock data points to visualize it."
    )


def get_chat_system_prompt(context: str) -> str:
    """System prompt carrying the workspace content."""
    return f"""You are an AI assistant in a workspace.
Here is the context of the current workspace (notes, images, datasets):
{context}

Answer the user's questions based on this context. Be concise and helpful."""
