"""Payload helpers shared by the write operations"""

import re


def slugify(title: str) -> str:
    """URL slug from a title: lowercase, spaces to dashes, drop everything else"""
    slug = re.sub(r"\s+", "-", title.strip().lower())
    return re.sub(r"[^a-z0-9-]", "", slug)


def blank_to_none(data: dict, keys) -> dict:
    """Copy of data where empty-string values for keys become None"""
    cleaned = dict(data)
    for key in keys:
        if key in cleaned and cleaned[key] == "":
            cleaned[key] = None
    return cleaned
