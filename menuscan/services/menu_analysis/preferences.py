from typing import Any, Dict, List, Optional

from ...models.menu import ALLERGEN_VOCABULARY, DIET_VOCABULARY


def _keep_known(values: Any, vocabulary) -> List[str]:
    if not isinstance(values, list):
        return []
    kept: List[str] = []
    for v in values:
        if not isinstance(v, str):
            continue
        tag = v.strip().lower()
        if tag in vocabulary and tag not in kept:
            kept.append(tag)
    return kept


def sanitize_preferences(raw: Any) -> Optional[Dict[str, List[str]]]:
    """
    Normalize user diet/allergen filters into the shared vocabulary.

    Args:
        raw: userPrefs as sent by the client, possibly None

    Returns:
        {"diets": [...], "allergens": [...]} or None when no preferences were sent
    """
    if not isinstance(raw, dict):
        return None
    return {
        "diets": _keep_known(raw.get("diets"), DIET_VOCABULARY),
        "allergens": _keep_known(raw.get("allergens"), ALLERGEN_VOCABULARY),
    }


def has_active_preferences(prefs: Optional[Dict[str, List[str]]]) -> bool:
    return bool(prefs and (prefs.get("diets") or prefs.get("allergens")))
