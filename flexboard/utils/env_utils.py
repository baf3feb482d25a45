"""
Environment-backed configuration and logging setup for the editor core.

Values come from the process environment (optionally populated from a
``.env`` file) with the ``FLEXBOARD_`` prefix:

- FLEXBOARD_MAX_HISTORY: snapshots kept by an editor history (default 50)
- FLEXBOARD_MAX_PANELS: panels allowed in one carousel (default 12)
- FLEXBOARD_MAX_BOX_DEPTH: box nesting followed on decompile (default 32)
- FLEXBOARD_LOG_LEVEL: level used by setup_logging (default INFO)
"""

import logging
import os

import dotenv
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


class EditorConfig(BaseModel):
    max_history: int = Field(default=50, ge=1, description="Snapshots kept by an editor history")
    max_panels: int = Field(default=12, ge=1, description="Maximum panels in one carousel")
    max_box_depth: int = Field(default=32, ge=1, description="Box nesting followed on decompile")
    log_level: str = Field(default="INFO", description="Level used by setup_logging")


def load_config(env_file: str | None = None) -> EditorConfig:
    """
    Build an EditorConfig from the environment.

    Args:
        env_file: Optional path to a .env file. When omitted, python-dotenv
            searches upwards from the working directory.
    """
    if env_file is not None:
        dotenv.load_dotenv(env_file)
    else:
        dotenv.load_dotenv()
    config = EditorConfig(
        max_history=int(os.environ.get("FLEXBOARD_MAX_HISTORY", "50")),
        max_panels=int(os.environ.get("FLEXBOARD_MAX_PANELS", "12")),
        max_box_depth=int(os.environ.get("FLEXBOARD_MAX_BOX_DEPTH", "32")),
        log_level=os.environ.get("FLEXBOARD_LOG_LEVEL", "INFO").upper(),
    )
    logger.debug(f"Loaded editor config: {config.model_dump()}")
    return config


_config: EditorConfig | None = None


def get_config() -> EditorConfig:
    """Cached config. Malformed environment values fall back to the defaults."""
    global _config
    if _config is None:
        try:
            _config = load_config()
        except ValueError as e:
            logger.warning(f"Invalid FLEXBOARD_* environment, using defaults: {e}")
            _config = EditorConfig()
    return _config


def set_config(config: EditorConfig | None) -> None:
    """Replace the cached config. Passing None forces a reload on next access."""
    global _config
    _config = config


def setup_logging(level: str | int | None = None) -> None:
    if level is None:
        level = get_config().log_level
    logging.basicConfig(
        level=level,
        format='%(levelname)s:%(name)s: %(message)s',
        force=True
    )
