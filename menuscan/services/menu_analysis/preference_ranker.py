from typing import Any, Dict, List, Optional

from ...models.menu import ScoredDish
from .preferences import has_active_preferences

BASE_SCORE = 5
DIET_MATCH_BONUS = 3
ALLERGEN_PENALTY = 5
LOW_CALORIE_LIMIT = 500
HIGH_PROTEIN_LIMIT = 20


def _matches(tags: List[Any], wanted: List[str]) -> List[Any]:
    return [t for t in tags if t in wanted]


def recommendation_score(dish: Dict[str, Any], preferences: Dict[str, List[str]]) -> int:
    """
    Score a sanitized dish against user preferences, clamped to 0..10.

    +3 per matched diet tag, -5 once if any avoided allergen is flagged,
    +1 under 500 kcal, +1 over 20 g protein.
    """
    flags = dish.get("flags") or {}
    score = BASE_SCORE
    score += len(_matches(flags.get("diets") or [], preferences.get("diets") or [])) * DIET_MATCH_BONUS
    if _matches(flags.get("allergens") or [], preferences.get("allergens") or []):
        score -= ALLERGEN_PENALTY

    # Bonus for healthier options (lower calories, higher protein)
    if dish.get("calories", 0) < LOW_CALORIE_LIMIT:
        score += 1
    if (dish.get("macros") or {}).get("protein", 0) > HIGH_PROTEIN_LIMIT:
        score += 1

    return max(0, min(10, score))


def score_dish(dish: Dict[str, Any], preferences: Dict[str, List[str]]) -> Dict[str, Any]:
    flags = dish.get("flags") or {}
    matched_diets = _matches(flags.get("diets") or [], preferences.get("diets") or [])
    flagged_allergens = _matches(flags.get("allergens") or [], preferences.get("allergens") or [])
    scored = ScoredDish(
        **dish,
        recommendation=recommendation_score(dish, preferences),
        userFlags={
            "matchesDiet": bool(matched_diets),
            "matchedDiets": matched_diets,
            "hasAllergens": bool(flagged_allergens),
            "flaggedAllergens": flagged_allergens,
        },
    )
    return scored.model_dump(exclude_none=True)


def apply_user_preferences(
    dishes: List[Dict[str, Any]],
    preferences: Optional[Dict[str, List[str]]],
) -> List[Dict[str, Any]]:
    """
    Annotate dishes with recommendation scores and user flags.

    Ranking is advisory: dishes with avoided allergens are flagged, never removed.
    With at least one diet or allergen preference the list is stable-sorted by
    descending score; otherwise input order is kept. No preferences at all
    returns the dishes untouched.
    """
    if preferences is None:
        return dishes
    scored = [score_dish(d, preferences) for d in dishes]
    if has_active_preferences(preferences):
        # list.sort is stable, ties keep menu order
        scored.sort(key=lambda d: d["recommendation"], reverse=True)
    return scored
