"""
Data model shared by the clients, the state machine and the UI.

Wire format (what the analysis model returns) uses camelCase keys;
Python attributes are snake_case.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ShoppingItem(BaseModel):
    """One recommended product. No identity beyond its list position."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    item_name: str = Field(alias="itemName")
    category: str
    recommendation: str  # material / colour
    estimated_price: str = Field(alias="estimatedPrice")  # display string, e.g. "$150 - $300"


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    design_style: str = Field(alias="designStyle")
    description: str
    shopping_list: List[ShoppingItem] = Field(alias="shoppingList")

    @property
    def item_names(self) -> List[str]:
        return [item.item_name for item in self.shopping_list]


class UploadStatus(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    SUCCESS = "success"
    ERROR = "error"


class VisualizationStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    READY = "ready"
    FAILED = "failed"  # internal only, never shown as an error


# JSON schema handed to the analysis model as a strict response format.
ANALYSIS_RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "designStyle": {
            "type": "string",
            "description": "The primary interior design style identified.",
        },
        "description": {
            "type": "string",
            "description": "A short description of the room's style and atmosphere.",
        },
        "shoppingList": {
            "type": "array",
            "description": "A list of recommended furniture and decor items.",
            "items": {
                "type": "object",
                "properties": {
                    "itemName": {"type": "string"},
                    "category": {
                        "type": "string",
                        "description": "e.g., Furniture, Lighting, Decor, Textiles",
                    },
                    "recommendation": {
                        "type": "string",
                        "description": "Specific material or color recommendation (e.g., 'Oak Wood', 'Matte Black Metal')",
                    },
                    "estimatedPrice": {
                        "type": "string",
                        "description": "Estimated price range (e.g., '$150 - $300')",
                    },
                },
                "required": ["itemName", "category", "recommendation", "estimatedPrice"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["designStyle", "description", "shoppingList"],
    "additionalProperties": False,
}
