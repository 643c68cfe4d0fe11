import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from ...models.menu import (
    CALORIES_RANGE,
    CARBS_RANGE,
    CONFIDENCE_RANGE,
    FAT_RANGE,
    FIBER_RANGE,
    PROTEIN_RANGE,
    DishRecord,
)
from ...utils.helpers import fnum

logger = logging.getLogger(__name__)

Number = Union[int, float]


def clamp(value: Any, bounds: Tuple[Number, Number], field: str = "") -> Number:
    """Coerce to a number (non-numeric -> 0) and clamp into bounds."""
    lo, hi = bounds
    num = fnum(value, default=0)
    clamped = max(lo, min(hi, num))
    if clamped != value:
        # Quality signal: a hallucinated 9000 kcal and a real large dish look the same here
        logger.debug("clamped %s: raw=%r -> %r", field or "value", value, clamped)
    return clamped


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


def _as_mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _dish_name(raw: Dict[str, Any]) -> Optional[str]:
    name = raw.get("name")
    if not isinstance(name, str):
        return None
    name = name.strip()
    return name or None


def sanitize_dish(raw: Any, detailed: bool = False) -> Optional[Dict[str, Any]]:
    """
    Validate one dish-like record.

    Args:
        raw: Candidate record from the model output
        detailed: Keep advanced-tier fields (description, fiber, confidence, price, category)

    Returns:
        Sanitized dish dict, or None when the record has no usable name
    """
    if not isinstance(raw, dict):
        return None
    name = _dish_name(raw)
    if name is None:
        return None

    macros = _as_mapping(raw.get("macros"))
    flags = _as_mapping(raw.get("flags"))

    dish: Dict[str, Any] = {
        "name": name,
        "calories": clamp(raw.get("calories"), CALORIES_RANGE, "calories"),
        "macros": {
            "protein": clamp(macros.get("protein"), PROTEIN_RANGE, "protein"),
            "carbs": clamp(macros.get("carbs"), CARBS_RANGE, "carbs"),
            "fat": clamp(macros.get("fat"), FAT_RANGE, "fat"),
        },
        "flags": {
            "diets": _as_list(flags.get("diets")),
            "allergens": _as_list(flags.get("allergens")),
        },
    }

    if detailed:
        description = raw.get("description")
        price = raw.get("price")
        category = raw.get("category")
        dish["macros"]["fiber"] = clamp(macros.get("fiber"), FIBER_RANGE, "fiber")
        dish["description"] = description if isinstance(description, str) else ""
        dish["confidence"] = clamp(raw.get("confidence"), CONFIDENCE_RANGE, "confidence")
        if isinstance(price, (int, float)) and not isinstance(price, bool):
            price = str(price)
        if isinstance(price, str) and price.strip():
            dish["price"] = price.strip()
        dish["category"] = category.strip() if isinstance(category, str) and category.strip() else "main"

    return DishRecord(**dish).model_dump(exclude_none=True)


def sanitize_dishes(candidates: Any, detailed: bool = False) -> List[Dict[str, Any]]:
    """
    Validate and range-clamp every dish record, preserving input order.

    Never raises: malformed records are dropped and malformed fields defaulted,
    since a single bad field from the model must not fail the whole response.
    """
    if not isinstance(candidates, list):
        return []
    dishes: List[Dict[str, Any]] = []
    dropped = 0
    for raw in candidates:
        dish = sanitize_dish(raw, detailed=detailed)
        if dish is None:
            dropped += 1
            continue
        dishes.append(dish)
    if dropped:
        logger.info("dropped %d malformed dish record(s)", dropped)
    return dishes
