"""Utility helpers."""

from forkly.utils.text import clean_html_tags, split_into_steps


__all__ = ["clean_html_tags", "split_into_steps"]
