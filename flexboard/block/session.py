"""
Session - Editing state with undo/redo for the block editor and the raw editor.

History keeps whole snapshots. Snapshots are cheap because nothing here
mutates a value that is already in history: block edits build new Panel and
EditorBlock instances, and raw edits go through the copy-on-write path
helpers, so consecutive snapshots share every untouched subtree.

EditorSession mirrors the operations of the block editor surface (panels,
blocks, selection). RawEditSession wraps a document root for structure
edits by path. Neither is thread-safe; one editor owns one session.

Example:
    session = EditorSession.from_document(document)
    session.add_block("button")
    session.undo()
    document = session.to_document()
"""

from __future__ import annotations
import logging
from typing import Any, Generic, Literal, TypeVar

from .path import PathLike, get_at_path, insert_at_path, move_in_array, remove_at_path, set_at_path
from .schema import BlockType, EditorBlock, Panel, PanelSettings
from .transform import compile, create_empty_panel, decompile, duplicate_block, duplicate_panel
from ..utils.env_utils import get_config


logger = logging.getLogger(__name__)

T = TypeVar("T")


class History(Generic[T]):
    """
    Bounded stack of snapshots with a cursor.

    Pushing after an undo drops the redo tail. When the stack grows past
    max_size the oldest snapshot is discarded.
    """

    def __init__(self, max_size: int | None = None):
        self.max_size = max_size if max_size is not None else get_config().max_history
        self._items: list[T] = []
        self._index = -1

    def __len__(self) -> int:
        return len(self._items)

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> T | None:
        if self._index < 0:
            return None
        return self._items[self._index]

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._items) - 1

    def push(self, item: T) -> None:
        self._items = self._items[:self._index + 1]
        self._items.append(item)
        if len(self._items) > self.max_size:
            self._items.pop(0)
        self._index = len(self._items) - 1

    def reset(self, item: T) -> None:
        self._items = [item]
        self._index = 0

    def undo(self) -> bool:
        if not self.can_undo:
            return False
        self._index -= 1
        return True

    def redo(self) -> bool:
        if not self.can_redo:
            return False
        self._index += 1
        return True


class EditorSession:
    """
    Block editor state: panels, the active panel, the selected block and history.

    Edit methods return True when they changed something and False when the
    target did not exist or a limit was reached. A False return leaves state
    and history untouched.
    """

    def __init__(
        self,
        panels: list[Panel] | None = None,
        *,
        template_name: str = "新しいテンプレート",
        max_panels: int | None = None,
        max_history: int | None = None,
    ):
        self.panels: list[Panel] = list(panels) if panels else [create_empty_panel()]
        self.template_name = template_name
        self.max_panels = max_panels if max_panels is not None else get_config().max_panels
        self.active_panel_index = 0
        self.selected_block_id: str | None = None
        self.history: History[list[Panel]] = History(max_history)
        self.history.reset(list(self.panels))

    @classmethod
    def from_document(cls, document: Any, **kwargs) -> EditorSession:
        return cls(decompile(document), **kwargs)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @property
    def active_panel(self) -> Panel:
        return self.panels[self.active_panel_index]

    def _commit(self, panels: list[Panel]) -> bool:
        self.panels = panels
        self.history.push(list(panels))
        return True

    def _replace_active(self, panel: Panel) -> bool:
        panels = list(self.panels)
        panels[self.active_panel_index] = panel
        return self._commit(panels)

    def _restore(self, panels: list[Panel]) -> None:
        self.panels = list(panels)
        self.active_panel_index = min(self.active_panel_index, len(self.panels) - 1)
        self.selected_block_id = None

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self, document: Any, name: str | None = None) -> None:
        """Replace the session content with a decompiled document and restart history."""
        self.panels = decompile(document)
        self.active_panel_index = 0
        self.selected_block_id = None
        if name:
            self.template_name = name
        self.history.reset(list(self.panels))
        logger.debug(f"Loaded {len(self.panels)} panel(s) into session {self.template_name!r}")

    def to_document(self) -> dict[str, Any]:
        return compile(self.panels)

    # -------------------------------------------------------------------------
    # Panels
    # -------------------------------------------------------------------------

    def select_panel(self, index: int) -> None:
        self.active_panel_index = max(0, min(index, len(self.panels) - 1))
        self.selected_block_id = None

    def add_panel(self) -> bool:
        """Insert an empty panel after the active one, inheriting its theme color."""
        if len(self.panels) >= self.max_panels:
            logger.debug(f"Panel limit {self.max_panels} reached")
            return False
        panel = create_empty_panel(self.active_panel.settings.theme_color)
        panels = list(self.panels)
        panels.insert(self.active_panel_index + 1, panel)
        self.active_panel_index += 1
        self.selected_block_id = None
        return self._commit(panels)

    def delete_panel(self, index: int) -> bool:
        if len(self.panels) <= 1 or not 0 <= index < len(self.panels):
            return False
        panels = self.panels[:index] + self.panels[index + 1:]
        self.active_panel_index = min(self.active_panel_index, len(panels) - 1)
        self.selected_block_id = None
        return self._commit(panels)

    def duplicate_panel(self, index: int) -> bool:
        if len(self.panels) >= self.max_panels or not 0 <= index < len(self.panels):
            return False
        panels = list(self.panels)
        panels.insert(index + 1, duplicate_panel(self.panels[index]))
        self.active_panel_index = index + 1
        self.selected_block_id = None
        return self._commit(panels)

    def move_panel(self, index: int, direction: Literal["prev", "next"]) -> bool:
        target = index - 1 if direction == "prev" else index + 1
        panels = move_in_array(self.panels, "", index, target)
        if panels is self.panels:
            return False
        self.active_panel_index = target
        return self._commit(panels)

    def update_panel_settings(self, **changes: Any) -> bool:
        panel = self.active_panel
        settings = PanelSettings.model_validate({**panel.settings.model_dump(), **changes})
        return self._replace_active(panel.model_copy(update={"settings": settings}))

    # -------------------------------------------------------------------------
    # Blocks
    # -------------------------------------------------------------------------

    def select_block(self, block_id: str | None) -> None:
        self.selected_block_id = block_id

    def add_block(self, block_type: BlockType) -> EditorBlock:
        """Append a block with default props to the active panel and select it."""
        panel = self.active_panel
        block = EditorBlock.create(block_type, panel.settings.theme_color)
        self._replace_active(panel.model_copy(update={"blocks": [*panel.blocks, block]}))
        self.selected_block_id = block.id
        return block

    def update_block(self, block_id: str, **changes: Any) -> bool:
        """
        Apply field changes to a block's props.

        Changes are validated against the block's own variant, so
        update_block(id, text="...") on a title works and an invalid button
        style raises pydantic.ValidationError.
        """
        panel = self.active_panel
        idx = panel.find_block(block_id)
        if idx < 0:
            return False
        block = panel.blocks[idx]
        props = type(block.props).model_validate({**block.props.model_dump(), **changes})
        blocks = list(panel.blocks)
        blocks[idx] = EditorBlock(id=block.id, props=props)
        return self._replace_active(panel.model_copy(update={"blocks": blocks}))

    def delete_block(self, block_id: str) -> bool:
        panel = self.active_panel
        idx = panel.find_block(block_id)
        if idx < 0:
            return False
        if self.selected_block_id == block_id:
            self.selected_block_id = None
        blocks = panel.blocks[:idx] + panel.blocks[idx + 1:]
        return self._replace_active(panel.model_copy(update={"blocks": blocks}))

    def duplicate_block(self, block_id: str) -> EditorBlock | None:
        """Insert a copy with a fresh id right after the block and select it."""
        panel = self.active_panel
        idx = panel.find_block(block_id)
        if idx < 0:
            return None
        clone = duplicate_block(panel.blocks[idx])
        blocks = insert_at_path(panel.blocks, "", idx + 1, clone)
        self._replace_active(panel.model_copy(update={"blocks": blocks}))
        self.selected_block_id = clone.id
        return clone

    def move_block(self, block_id: str, direction: Literal["up", "down"]) -> bool:
        idx = self.active_panel.find_block(block_id)
        if idx < 0:
            return False
        return self.reorder_block(idx, idx - 1 if direction == "up" else idx + 1)

    def reorder_block(self, from_index: int, to_index: int) -> bool:
        panel = self.active_panel
        blocks = move_in_array(panel.blocks, "", from_index, to_index)
        if blocks is panel.blocks:
            return False
        return self._replace_active(panel.model_copy(update={"blocks": blocks}))

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def undo(self) -> bool:
        if not self.history.undo():
            return False
        self._restore(self.history.current)
        return True

    def redo(self) -> bool:
        if not self.history.redo():
            return False
        self._restore(self.history.current)
        return True


class RawEditSession:
    """
    Structure-preserving editor over a raw document root.

    Each write that produces a new root is pushed to history; writes that
    resolve to nothing return False and leave history alone.
    """

    def __init__(self, document: Any, *, max_history: int | None = None):
        self.history: History[Any] = History(max_history)
        self.history.reset(document)

    @property
    def document(self) -> Any:
        return self.history.current

    def _apply(self, new_root: Any) -> bool:
        if new_root is self.document:
            return False
        self.history.push(new_root)
        return True

    def get(self, path: PathLike, default: Any = None) -> Any:
        return get_at_path(self.document, path, default)

    def set(self, path: PathLike, value: Any) -> bool:
        return self._apply(set_at_path(self.document, path, value))

    def remove(self, path: PathLike) -> bool:
        return self._apply(remove_at_path(self.document, path))

    def insert(self, array_path: PathLike, index: int, element: Any) -> bool:
        return self._apply(insert_at_path(self.document, array_path, index, element))

    def move(self, array_path: PathLike, from_index: int, to_index: int) -> bool:
        return self._apply(move_in_array(self.document, array_path, from_index, to_index))

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    def to_panels(self) -> list[Panel]:
        return decompile(self.document)
