"""Text helpers for recipe summaries and instructions."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup


_BLOCK_TAGS = ["p", "div", "li", "ol", "ul", "h1", "h2", "h3", "h4", "h5", "h6", "tr"]
_STEP_BOUNDARY = re.compile(r"(?<=[.?!])\s+(?=[A-Z])")
_INLINE_SPACE = re.compile(r"[ \t\r\f\v\xa0]+")


def clean_html_tags(text: str) -> str:
    """Strip markup and decode entities.

    Line breaks and block elements become newlines; runs of spaces collapse
    and blank lines are dropped. Text without markup is returned trimmed.
    """
    if not text:
        return ""

    soup = BeautifulSoup(text, "html.parser")
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for block in soup.find_all(_BLOCK_TAGS):
        block.append("\n")

    lines = (_INLINE_SPACE.sub(" ", line).strip() for line in soup.get_text().splitlines())
    return "\n".join(line for line in lines if line)


def split_into_steps(text: str) -> list[str]:
    """Split cleaned text into sentences that look like instruction steps.

    A boundary is whitespace after ``.``, ``?`` or ``!`` that precedes a
    capital letter. Empty fragments are dropped.

    >>> split_into_steps("Boil water. Add pasta! stir well. Serve.")
    ['Boil water.', 'Add pasta! stir well.', 'Serve.']
    """
    cleaned = clean_html_tags(text)
    return [step.strip() for step in _STEP_BOUNDARY.split(cleaned) if step.strip()]
