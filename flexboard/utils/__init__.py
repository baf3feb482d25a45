from .env_utils import EditorConfig, load_config, get_config, set_config, setup_logging

__all__ = [
    "EditorConfig",
    "load_config",
    "get_config",
    "set_config",
    "setup_logging",
]
