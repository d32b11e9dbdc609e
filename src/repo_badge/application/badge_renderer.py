"""
SVG badge rendering.

Produces shields.io-style flat badges: a label segment on the left and a value
segment on the right. Widths come from a character-count heuristic rather than
measured glyphs, so the output is deterministic and needs no font metrics.
Pure functions, no I/O.
"""

import re
from html import escape

from repo_badge.domain.exceptions import RenderException
from repo_badge.domain.models import BadgeStyle

_CHAR_WIDTH = 7
_PADDING = 10
_HEIGHT = 20
_RADIUS = 3
_TEXT_Y = 14
_FONT_FAMILY = "Verdana,Geneva,DejaVu Sans,sans-serif"
_FONT_SIZE = 11

ERROR_COLOR = "#e05d44"

# Code points XML 1.0 does not allow anywhere in a document
_XML_FORBIDDEN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def measure(text) -> int:
    """Width in pixels of a badge segment holding `text`."""
    return _CHAR_WIDTH * len(str(text)) + _PADDING * 2


def _xml_text(text: str) -> str:
    """Escape `text` for use as XML content or attribute value, replacing forbidden characters."""
    return escape(_XML_FORBIDDEN.sub("\ufffd", text))


def _text(x: float, content: str) -> str:
    x = int(x) if x == int(x) else x
    return (
        f'    <text x="{x}" y="{_TEXT_Y}" fill="#fff" font-family="{_FONT_FAMILY}" '
        f'font-size="{_FONT_SIZE}" text-anchor="middle">{content}</text>'
    )


def render_badge(label: str, value, style: BadgeStyle) -> str:
    """
    Render a two-segment SVG badge.

    Args:
        label: Text of the left segment.
        value: Text of the right segment, stringified if numeric.
        style: Segment colors.

    Returns:
        str: SVG markup with label, value and colors XML-escaped.
    """
    if label is None or value is None:
        raise RenderException("Badge label and value are required.")

    value = str(value)
    label_width = measure(label)
    value_width = measure(value)
    total_width = label_width + value_width

    title = _xml_text(f"{label}: {value}")
    label_text = _xml_text(label)
    value_text = _xml_text(value)
    label_color = _xml_text(style.label_color)
    color = _xml_text(style.color)

    return "\n".join([
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{total_width}" height="{_HEIGHT}" '
        f'role="img" aria-label="{title}">',
        f'  <title>{title}</title>',
        '  <clipPath id="r">',
        f'    <rect width="{total_width}" height="{_HEIGHT}" rx="{_RADIUS}" fill="#fff"/>',
        '  </clipPath>',
        '  <g clip-path="url(#r)">',
        f'    <rect width="{label_width}" height="{_HEIGHT}" fill="{label_color}"/>',
        f'    <rect x="{label_width}" width="{value_width}" height="{_HEIGHT}" fill="{color}"/>',
        '  </g>',
        '  <g>',
        _text(label_width / 2, label_text),
        _text(label_width + value_width / 2, value_text),
        '  </g>',
        '</svg>',
    ])


def render_error_badge(message: str, color: str = ERROR_COLOR) -> str:
    """Render a single-segment badge carrying only `message`, used when a badge cannot be built."""
    width = measure(message)
    text = _xml_text(message)

    return "\n".join([
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{_HEIGHT}" '
        f'role="img" aria-label="{text}">',
        f'  <title>{text}</title>',
        f'  <rect width="{width}" height="{_HEIGHT}" rx="{_RADIUS}" fill="{_xml_text(color)}"/>',
        _text(width / 2, text),
        '</svg>',
    ])
