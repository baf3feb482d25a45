from .block import (
    Panel,
    EditorBlock,
    compile,
    decompile,
    create_empty_panel,
    duplicate_panel,
    EditorSession,
    RawEditSession,
)

__all__ = [
    "Panel",
    "EditorBlock",
    "compile",
    "decompile",
    "create_empty_panel",
    "duplicate_panel",
    "EditorSession",
    "RawEditSession",
]
