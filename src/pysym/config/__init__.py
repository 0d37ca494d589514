from .loader import PysymConfig, load_config_from_path

__all__ = ["PysymConfig", "load_config_from_path"]
