"""
Utility modules for the crawler and index tools.
"""

from .config import Config, ConfigManager, load_config

__all__ = ['Config', 'ConfigManager', 'load_config']
