# menu_prompt.py
"""
Centralized prompts for menu analysis.
Both builders are pure: identical preferences give an identical prompt.
"""

import json
from typing import Dict, List, Optional


def _preferences_text(preferences: Optional[Dict[str, List[str]]]) -> str:
    if not preferences:
        return "none"
    return json.dumps(preferences, ensure_ascii=False, sort_keys=True)


def build_menu_prompt(preferences: Optional[Dict[str, List[str]]] = None) -> str:
    """
    Build the basic menu analysis prompt (JSON array output).

    Args:
        preferences: Sanitized user preferences, or None

    Returns:
        Complete prompt string
    """
    prompt = (
        "Analyze this menu image and extract dish information. For each dish, provide:\n"
        "1. Name (string)\n"
        "2. Estimated calories (number)\n"
        "3. Macronutrients in grams: protein, carbs, fat (numbers)\n"
        "4. Diet flags: vegan, vegetarian, keto, gluten-free, etc. (array of strings)\n"
        "5. Allergen warnings: nuts, dairy, gluten, shellfish, eggs, soy (array of strings)\n\n"
        f"User preferences: {_preferences_text(preferences)}\n\n"
        "Focus on main dishes and entrees. Skip drinks, sides, and desserts unless they are clearly featured.\n"
        "Make reasonable estimates for nutrition based on typical portions and ingredients.\n"
        "Only include allergens that are likely present based on typical preparation methods.\n\n"
        "Return the data as a JSON array with this exact structure:\n"
        "[\n"
        "  {\n"
        "    \"name\": \"dish name\",\n"
        "    \"calories\": number,\n"
        "    \"macros\": {\"protein\": number, \"carbs\": number, \"fat\": number},\n"
        "    \"flags\": {\"diets\": [\"vegan\", \"keto\", ...], \"allergens\": [\"nuts\", \"dairy\", ...]}\n"
        "  }\n"
        "]\n\n"
        "IMPORTANT: Return ONLY the JSON array, no additional text, commentary or markdown formatting."
    )
    return prompt


def build_advanced_menu_prompt(preferences: Optional[Dict[str, List[str]]] = None) -> str:
    """Advanced tier: per-dish detail plus menu-level insights (JSON object output)."""
    prompt = (
        "Analyze this menu image comprehensively. Extract detailed information for each dish "
        "and provide overall menu insights.\n\n"
        f"User preferences: {_preferences_text(preferences)}\n\n"
        "Focus on main dishes and entrees. Skip drinks, sides, and desserts unless they are clearly featured.\n\n"
        "Return a JSON object with this exact structure:\n"
        "{\n"
        "  \"dishes\": [\n"
        "    {\n"
        "      \"name\": \"dish name\",\n"
        "      \"description\": \"brief description\",\n"
        "      \"calories\": number,\n"
        "      \"macros\": {\"protein\": number, \"carbs\": number, \"fat\": number, \"fiber\": number},\n"
        "      \"flags\": {\"diets\": [\"vegan\", \"keto\", ...], \"allergens\": [\"nuts\", \"dairy\", ...]},\n"
        "      \"confidence\": number (0-1),\n"
        "      \"price\": \"price if visible\",\n"
        "      \"category\": \"appetizer/main/dessert/drink\"\n"
        "    }\n"
        "  ],\n"
        "  \"menuInsights\": {\n"
        "    \"cuisineType\": \"type of cuisine\",\n"
        "    \"priceRange\": \"budget/mid-range/upscale\",\n"
        "    \"healthiness\": number (1-10),\n"
        "    \"dietFriendly\": [\"vegan\", \"keto\", ...],\n"
        "    \"recommendations\": [{\"dish\": \"dish name\", \"reason\": \"why it fits the user preferences\"}]\n"
        "  },\n"
        "  \"nutritionSummary\": {\n"
        "    \"averageCalories\": number,\n"
        "    \"healthiestOption\": \"dish name\",\n"
        "    \"highestCalorie\": \"dish name\"\n"
        "  }\n"
        "}\n\n"
        "Provide realistic nutrition estimates. Only include allergens that are likely present.\n"
        "Rate confidence based on image clarity and text visibility.\n"
        "IMPORTANT: Return ONLY the JSON object, no additional text, commentary or markdown formatting."
    )
    return prompt
