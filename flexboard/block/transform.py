"""
Transform - Convert between nested Flex documents and flat editor panels.

Two directions:
- decompile: document (bubble or carousel) -> list[Panel]
- compile: list[Panel] -> document

Decompile flattens header, hero, body and footer into one ordered block list
and classifies every element with structural heuristics (bold large text is a
title, a bullet glyph next to a label is one text block, fillers disappear).
Compile re-derives the sections from block order and type and re-expands the
bullet pattern into a two-column box.

The conversion is lossy on purpose. Section membership, margins, exact
colors and unknown element types are not kept in the panel model. Neither
direction raises on malformed input.

Usage:
    panels = decompile(document)
    panels[0].blocks.append(EditorBlock.create("button"))
    document = compile(panels)
"""

from __future__ import annotations
import logging
import re
from typing import Any

from .schema import (
    BULLET_GLYPHS,
    BUTTON_STYLES,
    DEFAULT_ASPECT_RATIO,
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_BODY_TEXT,
    DEFAULT_BUTTON_LABEL,
    DEFAULT_MESSAGE_LABEL,
    DEFAULT_PANEL_SETTINGS,
    DEFAULT_TEXT_COLOR,
    DEFAULT_TEXT_SIZE,
    DEFAULT_THEME_COLOR,
    DEFAULT_TITLE_TEXT,
    DEFAULT_URL,
    HEADER_TEXT_COLOR,
    PANEL_SIZES,
    PLACEHOLDER_IMAGE_URL,
    TITLE_SIZES,
    BlockAction,
    ButtonProps,
    EditorBlock,
    ImageProps,
    Panel,
    PanelSettings,
    SeparatorProps,
    TextProps,
    TitleProps,
    generate_block_id,
)
from ..utils.env_utils import get_config


logger = logging.getLogger(__name__)

FlexObj = dict[str, Any]

# Bumped whenever compile's section routing changes, since that changes the
# saved output of every existing document on its next edit.
SECTION_HEURISTIC_VERSION = 1

MAX_HEADER_BLOCKS = 2
HEADER_PADDING = "20px"
BODY_SPACING = "md"
FOOTER_SPACING = "sm"

DECORATIVE_TYPES = frozenset({"filler", "spacer"})

_BULLET_TEXT_RE = re.compile(
    "^(" + "|".join(re.escape(g) for g in sorted(BULLET_GLYPHS, key=len, reverse=True)) + ") (.+)$",
    re.DOTALL,
)


# =============================================================================
# Document -> blocks
# =============================================================================


def _as_obj(value: Any) -> FlexObj | None:
    return value if isinstance(value, dict) else None


def _str(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) and value else default


def _is_bullet(el: FlexObj) -> bool:
    return el.get("type") == "text" and isinstance(el.get("text"), str) and el["text"].strip() in BULLET_GLYPHS


def _is_label(el: FlexObj) -> bool:
    return el.get("type") == "text" and isinstance(el.get("text"), str) and el["text"] != ""


def _is_title(el: FlexObj) -> bool:
    return el.get("weight") == "bold" and el.get("size") in TITLE_SIZES


def flex_action_to_block_action(action: Any) -> BlockAction | None:
    action = _as_obj(action)
    if action is None:
        return None
    label = action.get("label") if isinstance(action.get("label"), str) else None
    action_type = action.get("type")
    if action_type == "uri":
        return BlockAction(type="url", value=_str(action.get("uri")), label=label)
    if action_type == "message":
        return BlockAction(type="message", value=_str(action.get("text")), label=label)
    if action_type == "postback":
        return BlockAction(type="message", value=_str(action.get("data")), label=label)
    return None


def _text_props(el: FlexObj, *, keep_color: bool = True) -> TextProps:
    color = el.get("color") if keep_color else None
    size = el.get("size")
    return TextProps(
        text=_str(el.get("text")),
        wrap=el.get("wrap") is not False,
        color=color if isinstance(color, str) and color != DEFAULT_TEXT_COLOR else None,
        size=size if isinstance(size, str) and size != DEFAULT_TEXT_SIZE else None,
    )


def element_to_block(el: FlexObj, *, in_header: bool = False) -> EditorBlock:
    """Classify one non-box element. Unknown element types become text blocks."""
    el_type = el.get("type")

    if el_type == "image":
        props = ImageProps(
            url=_str(el.get("url")),
            aspect_ratio=_str(el.get("aspectRatio"), DEFAULT_ASPECT_RATIO),
            action=flex_action_to_block_action(el.get("action")),
        )
    elif el_type == "button":
        action = _as_obj(el.get("action")) or {}
        style = el.get("style")
        label = _str(action.get("label"), DEFAULT_BUTTON_LABEL)
        # compile always writes the button label into its action
        block_action = flex_action_to_block_action(action) or BlockAction(type="url", value="")
        props = ButtonProps(
            label=label,
            style=style if style in BUTTON_STYLES else "primary",
            color=_str(el.get("color"), DEFAULT_THEME_COLOR),
            action=block_action.model_copy(update={"label": label}),
        )
    elif el_type == "separator":
        props = SeparatorProps()
    elif el_type == "text" and _is_title(el):
        props = TitleProps(text=_str(el.get("text")))
    else:
        if el_type != "text":
            logger.debug(f"Unknown element type {el_type!r}, decompiling as text")
        props = _text_props(el, keep_color=not in_header)
    return EditorBlock(id=generate_block_id(), props=props)


def _merge_bullet(bullet: FlexObj, label: FlexObj, *, in_header: bool) -> EditorBlock:
    props = _text_props(label, keep_color=not in_header)
    props.text = f"{bullet['text'].strip()} {label['text']}"
    return EditorBlock(id=generate_block_id(), props=props)


def _is_bullet_row(box: FlexObj) -> bool:
    contents = box.get("contents")
    if box.get("layout") not in ("horizontal", "baseline"):
        return False
    if not isinstance(contents, list) or len(contents) != 2:
        return False
    first, second = contents
    return isinstance(first, dict) and isinstance(second, dict) and _is_bullet(first) and _is_label(second)


def flatten_box(box: FlexObj, *, in_header: bool = False, depth: int = 0) -> list[EditorBlock]:
    """
    Flatten a box into an ordered block list.

    Nested boxes are expanded in place except a horizontal bullet row, which
    collapses into a single text block.
    """
    max_depth = get_config().max_box_depth
    if depth >= max_depth:
        logger.warning(f"Box nesting deeper than {max_depth}, dropping its contents")
        return []

    contents = box.get("contents")
    if not isinstance(contents, list):
        return []
    vertical = box.get("layout", "vertical") == "vertical"

    blocks: list[EditorBlock] = []
    i = 0
    while i < len(contents):
        item = contents[i]
        i += 1
        if not isinstance(item, dict):
            continue
        item_type = item.get("type")
        if item_type in DECORATIVE_TYPES:
            continue
        if item_type == "box":
            if _is_bullet_row(item):
                bullet, label = item["contents"]
                blocks.append(_merge_bullet(bullet, label, in_header=in_header))
            else:
                blocks.extend(flatten_box(item, in_header=in_header, depth=depth + 1))
            continue
        if vertical and _is_bullet(item) and i < len(contents):
            following = contents[i]
            if isinstance(following, dict) and _is_label(following):
                blocks.append(_merge_bullet(item, following, in_header=in_header))
                i += 1
                continue
        blocks.append(element_to_block(item, in_header=in_header))
    return blocks


def _section_blocks(section: Any, *, in_header: bool = False) -> list[EditorBlock]:
    section = _as_obj(section)
    if section is None:
        return []
    if section.get("type") == "box" or "contents" in section:
        return flatten_box(section, in_header=in_header)
    if section.get("type") in DECORATIVE_TYPES:
        return []
    return [element_to_block(section, in_header=in_header)]


def _extract_theme_color(header: FlexObj | None, blocks: list[EditorBlock]) -> str:
    if header is not None and _str(header.get("backgroundColor")):
        return header["backgroundColor"]
    for block in blocks:
        if isinstance(block.props, ButtonProps):
            return block.props.color
    return DEFAULT_PANEL_SETTINGS.theme_color


def bubble_to_panel(bubble: FlexObj) -> Panel:
    header = _as_obj(bubble.get("header"))
    body = _as_obj(bubble.get("body"))

    blocks: list[EditorBlock] = []
    blocks.extend(_section_blocks(header, in_header=True))
    blocks.extend(_section_blocks(bubble.get("hero")))
    blocks.extend(_section_blocks(body))
    blocks.extend(_section_blocks(bubble.get("footer")))

    size = bubble.get("size")
    settings = PanelSettings(
        background_color=_str((body or {}).get("backgroundColor"), DEFAULT_PANEL_SETTINGS.background_color),
        theme_color=_extract_theme_color(header, blocks),
        size=size if size in PANEL_SIZES else DEFAULT_PANEL_SETTINGS.size,
    )
    return Panel(id=generate_block_id(), settings=settings, blocks=blocks)


def decompile(document: Any) -> list[Panel]:
    """
    Convert a Flex document into editor panels.

    A carousel yields one panel per bubble, in order. Anything that is
    neither a carousel nor a bubble yields a single empty panel.
    """
    document = _as_obj(document)
    if document is None:
        logger.debug("Document is not an object, starting from an empty panel")
        return [create_empty_panel()]

    if document.get("type") == "carousel":
        contents = document.get("contents")
        panels = [bubble_to_panel(b) for b in contents if isinstance(b, dict)] if isinstance(contents, list) else []
        return panels or [create_empty_panel()]

    if document.get("type") == "bubble" or any(k in document for k in ("header", "hero", "body", "footer")):
        return [bubble_to_panel(document)]

    logger.debug(f"Unrecognized document type {document.get('type')!r}, starting from an empty panel")
    return [create_empty_panel()]


# =============================================================================
# Blocks -> document
# =============================================================================


def block_action_to_flex(action: BlockAction, *, require_label: bool = False) -> FlexObj:
    if action.type == "url":
        flex: FlexObj = {"type": "uri", "uri": action.value or DEFAULT_URL}
        default_label = DEFAULT_BUTTON_LABEL
    else:
        flex = {"type": "message", "text": action.value or DEFAULT_BODY_TEXT}
        default_label = DEFAULT_MESSAGE_LABEL
    if action.label:
        flex["label"] = action.label
    elif require_label:
        flex["label"] = default_label
    return flex


def _text_element(text: str, props: TextProps, **extra: Any) -> FlexObj:
    return {
        "type": "text",
        "text": text,
        "size": props.size or DEFAULT_TEXT_SIZE,
        "color": props.color or DEFAULT_TEXT_COLOR,
        "wrap": props.wrap,
        **extra,
    }


def split_bullet(text: str) -> tuple[str, str] | None:
    """Split a bullet line into (glyph, label). Returns None for any other text."""
    match = _BULLET_TEXT_RE.match(text)
    if match is None:
        return None
    return match.group(1), match.group(2)


def block_to_element(block: EditorBlock) -> FlexObj:
    """Expand one block into its wire-format element."""
    props = block.props

    if isinstance(props, TitleProps):
        return {
            "type": "text",
            "text": props.text or DEFAULT_TITLE_TEXT,
            "weight": "bold",
            "size": "xl",
            "wrap": True,
        }
    if isinstance(props, TextProps):
        bullet = split_bullet(props.text)
        if bullet is not None:
            glyph, label = bullet
            return {
                "type": "box",
                "layout": "horizontal",
                "spacing": "sm",
                "contents": [
                    _text_element(glyph, props, flex=0),
                    _text_element(label, props, flex=1),
                ],
            }
        return _text_element(props.text or DEFAULT_BODY_TEXT, props)
    if isinstance(props, ImageProps):
        element: FlexObj = {
            "type": "image",
            "url": props.url or PLACEHOLDER_IMAGE_URL,
            "aspectRatio": props.aspect_ratio or DEFAULT_ASPECT_RATIO,
            "size": "full",
            "aspectMode": "cover",
        }
        if props.action is not None:
            element["action"] = block_action_to_flex(props.action)
        return element
    if isinstance(props, ButtonProps):
        action = props.action.model_copy(update={"label": props.label})
        return {
            "type": "button",
            "style": props.style,
            "color": props.color or DEFAULT_THEME_COLOR,
            "action": block_action_to_flex(action, require_label=True),
        }
    return {"type": "separator", "margin": "md"}


def _header_colors(element: FlexObj) -> FlexObj:
    if element.get("type") == "text":
        return {**element, "color": HEADER_TEXT_COLOR}
    if element.get("type") == "box":
        return {**element, "contents": [_header_colors(c) for c in element["contents"]]}
    return element


def partition_blocks(blocks: list[EditorBlock]) -> tuple[list[EditorBlock], list[EditorBlock], list[EditorBlock]]:
    """
    Route blocks into (header, body, footer).

    Leading titles open the header, and one text directly after a title is
    the subtitle. The header closes on the first other block or once it
    holds two blocks. Buttons always go to the footer.
    """
    header: list[EditorBlock] = []
    body: list[EditorBlock] = []
    footer: list[EditorBlock] = []

    in_header = True
    seen_title = False
    seen_subtitle = False
    for block in blocks:
        block_type = block.props.block_type
        if in_header:
            is_subtitle = block_type == "text" and seen_title and not seen_subtitle
            if block_type == "title" or is_subtitle:
                header.append(block)
                seen_title = seen_title or block_type == "title"
                seen_subtitle = seen_subtitle or is_subtitle
                in_header = len(header) < MAX_HEADER_BLOCKS
                continue
            in_header = False
        if block_type == "button":
            footer.append(block)
        else:
            body.append(block)
    return header, body, footer


def panel_to_bubble(panel: Panel) -> FlexObj:
    header_blocks, body_blocks, footer_blocks = partition_blocks(panel.blocks)
    settings = panel.settings

    bubble: FlexObj = {"type": "bubble", "size": settings.size}
    if header_blocks:
        bubble["header"] = {
            "type": "box",
            "layout": "vertical",
            "contents": [_header_colors(block_to_element(b)) for b in header_blocks],
            "backgroundColor": settings.theme_color,
            "paddingAll": HEADER_PADDING,
        }
    if body_blocks:
        body: FlexObj = {
            "type": "box",
            "layout": "vertical",
            "contents": [block_to_element(b) for b in body_blocks],
            "spacing": BODY_SPACING,
        }
        if settings.background_color != DEFAULT_BACKGROUND_COLOR:
            body["backgroundColor"] = settings.background_color
        bubble["body"] = body
    if footer_blocks:
        bubble["footer"] = {
            "type": "box",
            "layout": "vertical",
            "contents": [block_to_element(b) for b in footer_blocks],
            "spacing": FOOTER_SPACING,
        }
    return bubble


def compile(panels: list[Panel]) -> FlexObj:
    """
    Convert editor panels into a Flex document.

    No panels gives an empty bubble, one panel a bubble, several a carousel.
    """
    if not panels:
        return panel_to_bubble(create_empty_panel())
    if len(panels) == 1:
        return panel_to_bubble(panels[0])
    return {
        "type": "carousel",
        "contents": [panel_to_bubble(p) for p in panels],
    }


# =============================================================================
# Panel factories
# =============================================================================


def create_empty_panel(theme_color: str | None = None) -> Panel:
    settings = DEFAULT_PANEL_SETTINGS.model_copy()
    if theme_color:
        settings.theme_color = theme_color
    return Panel(id=generate_block_id(), settings=settings, blocks=[])


def duplicate_panel(panel: Panel) -> Panel:
    """Deep copy of panel with fresh ids for the panel and every block."""
    return Panel(
        id=generate_block_id(),
        settings=panel.settings.model_copy(),
        blocks=[duplicate_block(b) for b in panel.blocks],
    )


def duplicate_block(block: EditorBlock) -> EditorBlock:
    return EditorBlock(id=generate_block_id(), props=block.props.model_copy(deep=True))

