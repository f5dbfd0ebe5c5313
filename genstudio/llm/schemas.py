"""Structured-output contracts for slide outline generation.

`SLIDE_RESPONSE_SCHEMA` is sent as `generationConfig.responseSchema` and uses
the Gemini OpenAPI-subset type names. `PresentationStructure` validates the JSON
the service returns. Field aliases keep the camelCase wire names
(`speakerNotes`, `themeColor`) while Python code uses snake_case.

The schema does not constrain the number of slides. Callers that need an exact
count compare `len(structure.slides)` themselves.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


Sentiment = Literal["positive", "neutral", "negative", "urgent"]

SENTIMENTS = ["positive", "neutral", "negative", "urgent"]


class Slide(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    content: List[str]
    speaker_notes: Optional[str] = Field(default=None, alias="speakerNotes")


class PresentationStructure(BaseModel):
    """Parsed slide outline with tone classification and theme color."""

    model_config = ConfigDict(populate_by_name=True)

    slides: List[Slide]
    sentiment: Sentiment
    theme_color: str = Field(alias="themeColor")

    def to_wire(self) -> dict:
        """Dump using the camelCase field names the service produced."""
        return self.model_dump(by_alias=True, exclude_none=True)


SLIDE_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "slides": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "title": {"type": "STRING", "description": "Full sentence action title"},
                    "content": {
                        "type": "ARRAY",
                        "items": {"type": "STRING"},
                    },
                    "speakerNotes": {"type": "STRING"},
                },
                "required": ["title", "content"],
            },
        },
        "sentiment": {
            "type": "STRING",
            "enum": SENTIMENTS,
        },
        "themeColor": {
            "type": "STRING",
            "description": "Hex color code for the theme",
        },
    },
    "required": ["slides", "sentiment", "themeColor"],
}
