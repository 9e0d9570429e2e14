#!/usr/bin/env python3
"""
slugify.py
----------
URL-safe identifiers derived from display names.

Usage:
    from lorekeeper.utils.slugify import slugify

    slugify("Middle-earth")        # "middle-earth"
    slugify("Ëa & the Void")       # "ea-and-the-void"
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import re
import unicodedata


def slugify(text: str, max_length: int = 200) -> str:
    """
    Convert text to a lowercase, hyphen-separated ASCII slug.

    Args:
        text: Input text
        max_length: Maximum slug length

    Returns:
        Slug, possibly empty when text has no ASCII-representable characters

    Examples:
        >>> slugify("The Second Age (draft)")
        'the-second-age-draft'
        >>> slugify("Númenor's Fall")
        'numenors-fall'
    """
    if not text:
        return ""

    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii").lower()

    text = text.replace("'", "")
    text = text.replace("&", " and ")
    text = re.sub(r"[(){}\[\]/]", " ", text)
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"[^a-z0-9-]", "", text)
    text = re.sub(r"-+", "-", text).strip("-")

    if len(text) > max_length:
        text = text[:max_length].rstrip("-")

    return text
