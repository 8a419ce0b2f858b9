"""Write standalone SVG documents from element definitions."""

from __future__ import annotations

from typing import Any
from xml.sax.saxutils import escape, quoteattr

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"


def _attrs(elem: dict[str, Any]) -> str:
    return " ".join(
        f"{k}={quoteattr(str(v))}"
        for k, v in elem.items()
        if k not in ("tag", "text", "children") and v is not None
    )


def _element_lines(elem: dict[str, Any], indent: str) -> list[str]:
    tag = elem.get("tag", "path")
    attr_str = _attrs(elem)
    open_tag = f"<{tag} {attr_str}" if attr_str else f"<{tag}"
    children = elem.get("children") or []
    text = elem.get("text")

    if children:
        lines = [f"{indent}{open_tag}>"]
        for child in children:
            lines.extend(_element_lines(child, indent + "  "))
        lines.append(f"{indent}</{tag}>")
        return lines
    if text is not None:
        return [f"{indent}{open_tag}>{escape(str(text))}</{tag}>"]
    return [f"{indent}{open_tag} />"]


def serialize_svg(
    elements: list[dict[str, Any]],
    canvas_w: float = 100.0,
    canvas_h: float = 100.0,
    title: str = "",
    element_id: str | None = None,
) -> str:
    """Generate a standalone SVG document (XML prolog + namespace declarations)."""
    id_attr = f" id={quoteattr(element_id)}" if element_id else ""
    lines = [
        '<?xml version="1.0" standalone="no"?>',
        f'<svg xmlns="{SVG_NS}" xmlns:xlink="{XLINK_NS}"{id_attr}'
        f' viewBox="0 0 {canvas_w:g} {canvas_h:g}" preserveAspectRatio="xMidYMid meet">',
    ]

    if title:
        lines.append(f"  <title>{escape(title)}</title>")

    for elem in elements:
        lines.extend(_element_lines(elem, "  "))

    lines.append("</svg>")
    return "\n".join(lines)
