"""Markdown-subset → HTML conversion for model output.

The model is asked for plain bullet-point prose, so only a small subset of
markdown is recognised: headings, bold, italics, numbered and dash/bullet
lists, and pipe tables. Everything else becomes a paragraph. The rules are
applied in a fixed order; later rules see the HTML produced by earlier ones.

Classes are Tailwind utility classes so the fragments render identically in
the Streamlit app and the standalone HTML export.
"""
from __future__ import annotations

import logging
import re
from typing import List, Optional

import lxml.html

from roadmap.config.models import SectionContent

logger = logging.getLogger(__name__)

H3_CLASS = "text-2xl font-bold text-indigo-900 mt-8 mb-4 pb-2 border-b-2 border-indigo-200"
STRONG_CLASS = "font-semibold text-gray-900"
EM_CLASS = "italic"
NUMBERED_LI_CLASS = "ml-6 my-3 pl-2"
NUMBER_SPAN_CLASS = "font-semibold text-indigo-600"
BULLET_LI_CLASS = "ml-6 my-3 pl-2 list-disc"
UL_CLASS = "space-y-2 my-4"
TABLE_WRAPPER_CLASS = "overflow-x-auto my-6"
TABLE_CLASS = "min-w-full border-collapse border border-gray-300 rounded-lg"
THEAD_CLASS = "bg-indigo-100"
TH_CLASS = "border border-gray-300 px-4 py-3 text-left font-bold text-gray-900"
TD_CLASS = "border border-gray-300 px-4 py-3 text-gray-700"
ROW_CLASSES = ("bg-white", "bg-gray-50")
P_CLASS = "my-3 text-gray-700 leading-relaxed"

_JSON_FENCE_RE = re.compile(r"```json\n?")
_FENCE_RE = re.compile(r"```\n?")
_HEADING_RE = re.compile(r"^#{1,6}\s+(.+)$", re.MULTILINE)
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_ITALIC_RE = re.compile(r"\*(.+?)\*")
_NUMBERED_RE = re.compile(r"^(\d+)\.\s+(.+)$", re.MULTILINE)
_BULLET_RE = re.compile(r"^[-•]\s+(.+)$", re.MULTILINE)
_LIST_RUN_RE = re.compile(r"(<li[^>]*>.*?</li>\s*)+", re.DOTALL)
_TABLE_RE = re.compile(r"\|(.+)\|\n\|[-:\s|]+\|\n((?:\|.+\|\n?)+)")
_PARAGRAPH_RE = re.compile(r"^(?!<[hl]|<ul|<table|<div)(.+)$", re.MULTILINE)


def _split_cells(row: str) -> List[str]:
    return [cell.strip() for cell in row.split("|") if cell.strip()]


def _wrap_list(match: re.Match) -> str:
    # Trailing whitespace stays after </ul> so the next line keeps its own start
    run = match.group(0)
    body = run.rstrip()
    return f'<ul class="{UL_CLASS}">{body}</ul>{run[len(body):]}'


def _render_table(match: re.Match) -> str:
    headers = _split_cells(match.group(1))
    rows = [_split_cells(row) for row in match.group(2).strip().split("\n")]

    parts = [
        f'<div class="{TABLE_WRAPPER_CLASS}"><table class="{TABLE_CLASS}">',
        f'<thead class="{THEAD_CLASS}"><tr>',
    ]
    parts.extend(f'<th class="{TH_CLASS}">{h}</th>' for h in headers)
    parts.append("</tr></thead><tbody>")
    for idx, row in enumerate(rows):
        parts.append(f'<tr class="{ROW_CLASSES[idx % 2]}">')
        parts.extend(f'<td class="{TD_CLASS}">{cell}</td>' for cell in row)
        parts.append("</tr>")
    parts.append("</tbody></table></div>")
    return "".join(parts)


def markdown_to_html(text: Optional[str]) -> str:
    """Convert model text to an HTML fragment."""
    if not text:
        return ""

    text = text.replace("\r\n", "\n")
    text = _JSON_FENCE_RE.sub("", text)
    text = _FENCE_RE.sub("", text)
    text = _HEADING_RE.sub(rf'<h3 class="{H3_CLASS}">\1</h3>', text)
    text = _BOLD_RE.sub(rf'<strong class="{STRONG_CLASS}">\1</strong>', text)
    text = _ITALIC_RE.sub(rf'<em class="{EM_CLASS}">\1</em>', text)
    text = _NUMBERED_RE.sub(
        rf'<li class="{NUMBERED_LI_CLASS}"><span class="{NUMBER_SPAN_CLASS}">\1.</span> \2</li>',
        text,
    )
    text = _BULLET_RE.sub(rf'<li class="{BULLET_LI_CLASS}">\1</li>', text)
    text = _LIST_RUN_RE.sub(_wrap_list, text)
    text = _TABLE_RE.sub(_render_table, text)
    text = _PARAGRAPH_RE.sub(rf'<p class="{P_CLASS}">\1</p>', text)
    return text


def process_content(text: Optional[str]) -> SectionContent:
    """Format raw model text into a :class:`SectionContent`."""
    html = markdown_to_html(text)
    logger.debug("Formatted %d chars of model text into %d chars of HTML", len(text or ""), len(html))
    return SectionContent(html=html, data=None)


def strip_html(html: Optional[str]) -> str:
    """Return the visible text of an HTML fragment."""
    if not html or not html.strip():
        return ""
    fragment = lxml.html.fragment_fromstring(html, create_parent="div")
    return fragment.text_content()
