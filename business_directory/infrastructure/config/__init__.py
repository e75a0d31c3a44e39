from .settings import MongoSettings, ServerSettings, Settings, get_settings

__all__ = ["MongoSettings", "ServerSettings", "Settings", "get_settings"]
