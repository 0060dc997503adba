# File: houselook/utils/images.py
"""
Listing image decoding.

Listings were written over time with three image layouts:

* ``images: [url, url, ...]``
* ``images: {"0": url, "1": {"url": url}, ...}``
* ``image1Url``, ``image2Url``, ... as top-level keys

All of them decode to one ordered list of URLs through :func:`decode_images`.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

NUMBERED_IMAGE_KEY = re.compile(r"^image(\d+)Url$")


@dataclass(frozen=True)
class ImageArray:
    items: List[Any]


@dataclass(frozen=True)
class NestedImages:
    items: Dict[str, Any]


@dataclass(frozen=True)
class NumberedImageKeys:
    items: Dict[int, Any]


ImageField = Union[ImageArray, NestedImages, NumberedImageKeys]


def classify_image_field(record: Dict[str, Any]) -> Optional[ImageField]:
    images = record.get("images")
    if isinstance(images, list):
        return ImageArray(images)
    if isinstance(images, dict):
        return NestedImages(images)

    numbered = {}
    for key, value in record.items():
        match = NUMBERED_IMAGE_KEY.match(str(key))
        if match:
            numbered[int(match.group(1))] = value
    if numbered:
        return NumberedImageKeys(numbered)
    return None


def _url(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        value = value.get("url")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _nested_order(key: str):
    # Numeric keys in numeric order, then the rest in stored order
    return (0, int(key)) if key.isdigit() else (1, 0)


def decode_images(record: Optional[Dict[str, Any]]) -> List[str]:
    if not isinstance(record, dict):
        return []
    field = classify_image_field(record)
    if field is None:
        return []

    if isinstance(field, ImageArray):
        values = field.items
    elif isinstance(field, NestedImages):
        values = [field.items[key] for key in sorted(field.items, key=lambda k: _nested_order(str(k)))]
    else:
        values = [field.items[index] for index in sorted(field.items)]

    urls = []
    for value in values:
        url = _url(value)
        if url:
            urls.append(url)
    return urls
