"""
Configuration - Grid settings and translations.
"""

from .grid_settings import GridSettings, load_grid_settings, save_grid_settings
from .i18n import I18n, get_i18n, t

__all__ = [
    "GridSettings",
    "load_grid_settings",
    "save_grid_settings",
    "I18n",
    "get_i18n",
    "t",
]
