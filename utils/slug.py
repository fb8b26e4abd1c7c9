"""
Text helpers for catalog identifiers:
- remove_accents: "Áo thun" -> "Ao thun"
- slugify: "Áo Thun  Trắng!!" -> "ao-thun-trang"
- generate_prefix: "Áo thun trắng" -> "ATT"
- generate_sku: ("Áo thun", "Áo thun trắng", 1) -> "ATATT1"
"""
from __future__ import annotations

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")
_NOT_SLUG = re.compile(r"[^a-z0-9-]+")
_HYPHENS = re.compile(r"-{2,}")


def remove_accents(text: str) -> str:
    """Drop diacritics (Vietnamese included); đ/Đ have no decomposition and are mapped by hand."""
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    stripped = unicodedata.normalize("NFC", stripped)
    return stripped.replace("đ", "d").replace("Đ", "D")


def slugify(name: str) -> str:
    slug = remove_accents(name).lower().strip()
    slug = _WHITESPACE.sub("-", slug)
    slug = _NOT_SLUG.sub("", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")


def generate_prefix(text: str) -> str:
    return "".join(word[0].upper() for word in remove_accents(text).split())


def generate_sku(category_name: str, product_name: str, variant_id: int) -> str:
    return f"{generate_prefix(category_name)}{generate_prefix(product_name)}{variant_id}"
