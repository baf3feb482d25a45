"""
Schema - Editor-facing data model for rich message documents.

Defines:
- BlockAction: what a tap on a button or image does (open url / send message)
- TitleProps, TextProps, ImageProps, ButtonProps, SeparatorProps: the five
  block variants, discriminated by block_type
- EditorBlock: an id plus one block variant
- PanelSettings, Panel: one bubble of a message as the editor sees it
- Closed enumerations and defaults shared by the compiler and editor surfaces
- generate_block_id: the only non-deterministic primitive, swappable through
  use_id_provider for tests

All models serialize with camelCase aliases ("blockType", "themeColor", ...)
and accept either the alias or the field name on input.
"""

from __future__ import annotations
import contextvars
import time
from contextlib import contextmanager
from typing import Annotated, Any, Callable, Iterator, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# Enumerations and defaults
# =============================================================================

BlockType = Literal["title", "text", "image", "button", "separator"]
ButtonStyle = Literal["primary", "secondary", "link"]
PanelSize = Literal["nano", "micro", "kilo", "mega", "giga"]
ActionType = Literal["url", "message"]

BLOCK_TYPES: tuple[str, ...] = ("title", "text", "image", "button", "separator")
BUTTON_STYLES: tuple[str, ...] = ("primary", "secondary", "link")
PANEL_SIZES: tuple[str, ...] = ("nano", "micro", "kilo", "mega", "giga")
ASPECT_RATIOS: tuple[str, ...] = ("1:1", "1.51:1", "20:13", "2:1", "3:1", "4:3", "16:9", "9:16", "3:4")

# text sizes that, combined with bold weight, make a heading
TITLE_SIZES: frozenset[str] = frozenset({"lg", "xl", "xxl", "3xl", "4xl", "5xl"})

BULLET_GLYPHS: tuple[str, ...] = (
    "●", "・", "▶", "★", "◆", "■", "□", "◇", "▷", "►",
    "☆", "✓", "✔", "⚫︎", "⚫", "○", "◎", "▪", "▸", "•",
)

DEFAULT_THEME_COLOR = "#06C755"
DEFAULT_BACKGROUND_COLOR = "#ffffff"
DEFAULT_TEXT_COLOR = "#666666"
DEFAULT_TEXT_SIZE = "md"
HEADER_TEXT_COLOR = "#ffffff"
DEFAULT_PANEL_SIZE: PanelSize = "mega"
DEFAULT_ASPECT_RATIO = "20:13"
DEFAULT_BUTTON_LABEL = "ボタン"
DEFAULT_MESSAGE_LABEL = "メッセージ"
DEFAULT_TITLE_TEXT = "タイトル"
DEFAULT_BODY_TEXT = "テキスト"
DEFAULT_URL = "https://example.com"
PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/600x400/e2e8f0/94a3b8?text=Image"


# =============================================================================
# Block ids
# =============================================================================

IdProvider = Callable[[], str]


def _default_id() -> str:
    """Millisecond timestamp in hex followed by a short random suffix."""
    return f"{int(time.time() * 1000):x}-{uuid4().hex[:8]}"


_id_provider: contextvars.ContextVar[IdProvider] = contextvars.ContextVar("id_provider", default=_default_id)


def generate_block_id() -> str:
    return _id_provider.get()()


def set_id_provider(provider: IdProvider | None) -> contextvars.Token:
    """Install provider for the current context. None restores the default generator."""
    return _id_provider.set(provider or _default_id)


@contextmanager
def use_id_provider(provider: IdProvider) -> Iterator[IdProvider]:
    """
    Temporarily route generate_block_id through provider.

    Example:
        counter = itertools.count(1)
        with use_id_provider(lambda: f"id-{next(counter)}"):
            panel = create_empty_panel()   # panel.id == "id-1"
    """
    token = _id_provider.set(provider)
    try:
        yield provider
    finally:
        _id_provider.reset(token)


# =============================================================================
# Models
# =============================================================================


class EditorModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class BlockAction(EditorModel):
    type: ActionType = "url"
    value: str = ""
    label: str | None = None


class TitleProps(EditorModel):
    block_type: Literal["title"] = "title"
    text: str = ""


class TextProps(EditorModel):
    block_type: Literal["text"] = "text"
    text: str = ""
    wrap: bool = True
    color: str | None = Field(default=None, description="Override of the default body text color")
    size: str | None = Field(default=None, description="Override of the default body text size")


class ImageProps(EditorModel):
    block_type: Literal["image"] = "image"
    url: str = ""
    aspect_ratio: str = DEFAULT_ASPECT_RATIO
    action: BlockAction | None = None


class ButtonProps(EditorModel):
    block_type: Literal["button"] = "button"
    label: str = DEFAULT_BUTTON_LABEL
    style: ButtonStyle = "primary"
    color: str = DEFAULT_THEME_COLOR
    action: BlockAction = Field(default_factory=BlockAction)


class SeparatorProps(EditorModel):
    block_type: Literal["separator"] = "separator"


BlockProps = Annotated[
    Union[TitleProps, TextProps, ImageProps, ButtonProps, SeparatorProps],
    Field(discriminator="block_type"),
]


class EditorBlock(EditorModel):
    id: str = Field(default_factory=generate_block_id)
    props: BlockProps

    @property
    def block_type(self) -> BlockType:
        return self.props.block_type

    @classmethod
    def create(cls, block_type: BlockType, theme_color: str = DEFAULT_THEME_COLOR) -> EditorBlock:
        return cls(id=generate_block_id(), props=create_default_block_props(block_type, theme_color))


class PanelSettings(EditorModel):
    background_color: str = DEFAULT_BACKGROUND_COLOR
    theme_color: str = DEFAULT_THEME_COLOR
    size: PanelSize = DEFAULT_PANEL_SIZE


DEFAULT_PANEL_SETTINGS = PanelSettings()


class Panel(EditorModel):
    id: str = Field(default_factory=generate_block_id)
    settings: PanelSettings = Field(default_factory=PanelSettings)
    blocks: list[EditorBlock] = Field(default_factory=list)

    def find_block(self, block_id: str) -> int:
        """Index of the block with block_id, or -1."""
        for i, block in enumerate(self.blocks):
            if block.id == block_id:
                return i
        return -1

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Panel:
        return cls.model_validate(data)


# =============================================================================
# Factories
# =============================================================================


def create_default_block_props(block_type: BlockType, theme_color: str = DEFAULT_THEME_COLOR):
    """
    Default payload for a freshly added block.

    Button colors follow the panel theme so a new button matches the header.
    """
    if block_type == "title":
        return TitleProps(text=DEFAULT_TITLE_TEXT)
    if block_type == "text":
        return TextProps(text=DEFAULT_BODY_TEXT, wrap=True)
    if block_type == "image":
        return ImageProps(url=PLACEHOLDER_IMAGE_URL, aspect_ratio=DEFAULT_ASPECT_RATIO)
    if block_type == "button":
        return ButtonProps(
            label=DEFAULT_BUTTON_LABEL,
            style="primary",
            color=theme_color,
            action=BlockAction(type="url", value=DEFAULT_URL),
        )
    if block_type == "separator":
        return SeparatorProps()
    raise ValueError(f"Unknown block type: {block_type!r}")
