# Settings package
from larder.settings.app import AppSettings, get_app_settings

__all__ = ["AppSettings", "get_app_settings"]
