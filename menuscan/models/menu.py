# menuscan/models/menu.py
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional, Union

Number = Union[int, float]

# Shared with the web client's settings page
DIET_VOCABULARY = ("vegan", "vegetarian", "keto")
ALLERGEN_VOCABULARY = ("gluten", "nuts", "dairy")

# Clamp ranges per numeric field
CALORIES_RANGE = (0, 5000)
PROTEIN_RANGE = (0, 300)
CARBS_RANGE = (0, 500)
FAT_RANGE = (0, 200)
FIBER_RANGE = (0, 100)
CONFIDENCE_RANGE = (0, 1)


class UserPreferences(BaseModel):
    diets: List[str] = []
    allergens: List[str] = []


class Macros(BaseModel):
    protein: Number = Field(default=0, ge=PROTEIN_RANGE[0], le=PROTEIN_RANGE[1])
    carbs: Number = Field(default=0, ge=CARBS_RANGE[0], le=CARBS_RANGE[1])
    fat: Number = Field(default=0, ge=FAT_RANGE[0], le=FAT_RANGE[1])
    fiber: Optional[Number] = Field(default=None, ge=FIBER_RANGE[0], le=FIBER_RANGE[1])


class DishFlags(BaseModel):
    # Tags are passed through as the model produced them
    diets: List[Any] = []
    allergens: List[Any] = []


class DishRecord(BaseModel):
    name: str = Field(..., min_length=1)
    calories: Number = Field(default=0, ge=CALORIES_RANGE[0], le=CALORIES_RANGE[1])
    macros: Macros = Macros()
    flags: DishFlags = DishFlags()
    description: Optional[str] = None
    confidence: Optional[Number] = Field(default=None, ge=CONFIDENCE_RANGE[0], le=CONFIDENCE_RANGE[1])
    price: Optional[str] = None
    category: Optional[str] = None


class UserFlags(BaseModel):
    matchesDiet: bool
    matchedDiets: List[Any] = []
    hasAllergens: bool
    flaggedAllergens: List[Any] = []


class ScoredDish(DishRecord):
    recommendation: int = Field(..., ge=0, le=10)
    userFlags: UserFlags


class AnalyzeMenuRequest(BaseModel):
    imageUrl: str
    userPrefs: Optional[Dict[str, Any]] = None

    @field_validator("imageUrl")
    @classmethod
    def _image_url_present(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Image URL is required")
        return v


class AnalyzeMenuResponse(BaseModel):
    dishes: List[Dict[str, Any]]
    model: str
    processingMs: float
    scanId: Optional[str] = None


class MenuScan(BaseModel):
    id: str
    userId: str
    imageUrl: str
    dishes: List[Dict[str, Any]]
    model: str
    processingMs: float
    createdAt: str
    updatedAt: str
