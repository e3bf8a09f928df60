from .settings import DEFAULT_CONFIG, Settings, get_settings

__all__ = ["DEFAULT_CONFIG", "Settings", "get_settings"]
