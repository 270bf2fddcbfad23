"""Build the request sent to the analysis service for one scan."""

from __future__ import annotations

import json
from dataclasses import dataclass

from .ingest import EncodedImage
from .models import LANGUAGES, SpiceLevel

SYSTEM_INSTRUCTION = "You are an expert food critic."

_PROMPT = """\
Analyze this image. First, determine if it is a "Menu" (mostly text) or "Food" (photo of dishes).
Identify all distinct dishes.
Translate details to {language}.
Return accurate bounding boxes (0-1000 scale) for where each dish is located in the image.
If it is a menu, identify the text location of the dish name.
If it is a photo of food, frame the region where the dish itself is shown.

IMPORTANT: Return PURE JSON adhering to the schema. No prose, no explanations.
"""


def response_schema(language: str) -> dict:
    """Output schema in the OpenAPI subset understood by the analysis models."""
    return {
        "type": "object",
        "properties": {
            "isMenu": {
                "type": "boolean",
                "description": (
                    "True if the image is a menu (text list), "
                    "False if it is a photo of real food."
                ),
            },
            "dishes": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {
                            "type": "string",
                            "description": f"Name of the dish translated to {language}",
                        },
                        "originalName": {
                            "type": "string",
                            "description": "Original name of the dish in its native language",
                        },
                        "englishName": {
                            "type": "string",
                            "description": "Name of the dish in English (for image search purposes)",
                        },
                        "description": {
                            "type": "string",
                            "description": f"Description of ingredients and taste profile in {language}",
                        },
                        "tags": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": (
                                "Top 3 dominant flavor profile words "
                                f"(e.g. Sweet, Salty, Umami) in {language}"
                            ),
                        },
                        "allergens": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": (
                                "List 1 to 5 potential allergens (e.g. Peanuts, "
                                f"Gluten, Dairy, Shellfish) in {language}"
                            ),
                        },
                        "spiceLevel": {
                            "type": "string",
                            "enum": [level.value for level in SpiceLevel],
                            "description": (
                                "None=Not Spicy, Mild=1 chili, "
                                "Medium=2 chilies, Hot=3 chilies"
                            ),
                        },
                        "category": {
                            "type": "string",
                            "description": "Broad category like Soup, Main, Dessert",
                        },
                        "boundingBox": {
                            "type": "array",
                            "items": {"type": "number"},
                            "description": (
                                "Bounding box [ymin, xmin, ymax, xmax] in 0-1000 scale. "
                                "For a menu: the text naming the dish. "
                                "For a food photo: the region showing the dish."
                            ),
                        },
                    },
                    "required": [
                        "name",
                        "originalName",
                        "englishName",
                        "description",
                        "tags",
                        "allergens",
                        "spiceLevel",
                        "category",
                        "boundingBox",
                    ],
                },
            },
        },
        "required": ["isMenu", "dishes"],
    }


@dataclass
class AnalysisRequest:
    image: EncodedImage
    language: str
    prompt: str
    schema: dict
    system_instruction: str = SYSTEM_INSTRUCTION

    def prompt_with_schema(self) -> str:
        """Prompt text with the schema inlined, for backends without schema support."""
        return (
            f"{self.prompt}\n"
            "The JSON must match this schema:\n"
            f"{json.dumps(self.schema, ensure_ascii=False, indent=2)}\n"
        )


def build_request(image: EncodedImage, language: str) -> AnalysisRequest:
    if language not in LANGUAGES:
        raise ValueError(
            f"Unsupported language: {language!r} "
            f"(choose from {', '.join(LANGUAGES)})"
        )
    return AnalysisRequest(
        image=image,
        language=language,
        prompt=_PROMPT.format(language=language),
        schema=response_schema(language),
    )
