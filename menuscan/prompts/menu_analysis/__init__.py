from .menu_prompt import build_advanced_menu_prompt, build_menu_prompt

__all__ = ["build_menu_prompt", "build_advanced_menu_prompt"]
