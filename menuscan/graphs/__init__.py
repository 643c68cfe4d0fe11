from .menu_analysis import run_menu_analysis

__all__ = ["run_menu_analysis"]
