from .loader import LatheConfig, load_config_from_path, DEFAULT_NAMESPACE

__all__ = ["LatheConfig", "load_config_from_path", "DEFAULT_NAMESPACE"]
