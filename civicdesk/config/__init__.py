"""
Configuration package for the complaint workflow service.
"""

from civicdesk.config.settings import Settings, get_settings, settings

__all__ = ['Settings', 'get_settings', 'settings']
