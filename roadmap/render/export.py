"""Roadmap export as plain text (download button) or standalone HTML (CLI)."""
from __future__ import annotations

import html
from datetime import date, datetime
from typing import Optional

from roadmap.agents.prompts import STEPS
from roadmap.config.models import Roadmap

from .formatter import strip_html

RULE = "=" * 80

HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Business Roadmap</title>
<script src="https://cdn.tailwindcss.com"></script>
</head>
<body class="bg-gray-50">
<main class="max-w-5xl mx-auto p-8">
<h1 class="text-4xl font-bold text-indigo-900 mb-2">Business Roadmap</h1>
<p class="text-gray-600 mb-8">{idea}</p>
{sections}
</main>
</body>
</html>
"""


def render_text_export(
    roadmap: Roadmap,
    idea: str,
    mode: str,
    on_date: Optional[date] = None,
) -> str:
    """Plain-text roadmap with one ruled block per generated section."""
    on_date = on_date or date.today()
    content = (
        f"BUSINESS ROADMAP\nIdea: {idea}\nMode: {mode}\n"
        f"Date: {on_date.strftime('%d/%m/%Y')}\n\n"
    )
    for step in STEPS:
        section = roadmap.get(step.key)
        if section:
            content += f"\n{RULE}\n{step.label.upper()}\n{RULE}\n"
            content += strip_html(section.html) + "\n"
    return content


def render_html_export(roadmap: Roadmap, idea: str) -> str:
    """Standalone HTML page with every generated section."""
    blocks = []
    for step in STEPS:
        section = roadmap.get(step.key)
        if section and section.html:
            blocks.append(
                '<section class="bg-white rounded-xl shadow p-8 mb-8">'
                f'<h2 class="text-3xl font-bold text-gray-900 mb-4">{step.label}</h2>'
                f"{section.html}</section>"
            )
    return HTML_TEMPLATE.format(idea=html.escape(idea), sections="\n".join(blocks))


def export_filename(now: Optional[datetime] = None) -> str:
    """``roadmap-<epoch millis>.txt``"""
    now = now or datetime.now()
    return f"roadmap-{int(now.timestamp() * 1000)}.txt"
