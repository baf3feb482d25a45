"""
Block editor core for rich LINE messages.

This module provides:
- get_at_path / set_at_path / remove_at_path / insert_at_path / move_in_array:
  copy-on-write edits of nested documents addressed by dot paths
- DocPath: parsed form of a dot path
- Panel, EditorBlock and the block prop variants: the flat editor model
- decompile / compile: document <-> panels conversion
- create_empty_panel / duplicate_panel: panel factories
- EditorSession / RawEditSession / History: undo/redo editing state
"""

from .path import (
    DocPath,
    get_at_path,
    set_at_path,
    remove_at_path,
    insert_at_path,
    move_in_array,
    parent_path,
    last_key,
)
from .schema import (
    BlockAction,
    BlockProps,
    BlockType,
    ButtonProps,
    EditorBlock,
    ImageProps,
    Panel,
    PanelSettings,
    SeparatorProps,
    TextProps,
    TitleProps,
    DEFAULT_PANEL_SETTINGS,
    create_default_block_props,
    generate_block_id,
    set_id_provider,
    use_id_provider,
)
from .transform import (
    compile,
    decompile,
    bubble_to_panel,
    panel_to_bubble,
    create_empty_panel,
    duplicate_panel,
    duplicate_block,
)
from .session import EditorSession, RawEditSession, History

__all__ = [
    "DocPath",
    "get_at_path",
    "set_at_path",
    "remove_at_path",
    "insert_at_path",
    "move_in_array",
    "parent_path",
    "last_key",
    "BlockAction",
    "BlockProps",
    "BlockType",
    "ButtonProps",
    "EditorBlock",
    "ImageProps",
    "Panel",
    "PanelSettings",
    "SeparatorProps",
    "TextProps",
    "TitleProps",
    "DEFAULT_PANEL_SETTINGS",
    "create_default_block_props",
    "generate_block_id",
    "set_id_provider",
    "use_id_provider",
    "compile",
    "decompile",
    "bubble_to_panel",
    "panel_to_bubble",
    "create_empty_panel",
    "duplicate_panel",
    "duplicate_block",
    "EditorSession",
    "RawEditSession",
    "History",
]
