"""
包裹计数文案 - "X of Y" 多语言模板

模板表按语言标签索引，可扩展；未知语言回退到英文。
"""

from __future__ import annotations

from ..models import PackageCounterFormat

F = PackageCounterFormat

COUNTER_PHRASES: dict[str, dict[PackageCounterFormat, str]] = {
    "en": {
        F.X_SLASH_Y: "{current}/{total}",
        F.X_OF_Y: "{current} of {total}",
        F.PACKAGE_X_OF_Y: "Package {current} of {total}",
        F.BOX_X_OF_Y: "Box {current} of {total}",
        F.PARCEL_X_OF_Y: "Parcel {current} of {total}",
    },
    "de": {
        F.X_SLASH_Y: "{current}/{total}",
        F.X_OF_Y: "{current} von {total}",
        F.PACKAGE_X_OF_Y: "Paket {current} von {total}",
        F.BOX_X_OF_Y: "Karton {current} von {total}",
        F.PARCEL_X_OF_Y: "Paket {current} von {total}",
    },
}

DEFAULT_LOCALE = "en"


def format_package_counter(
    current: int,
    total: int,
    format: PackageCounterFormat | str,
    locale: str = DEFAULT_LOCALE,
) -> str:
    """格式化计数文案"""
    phrases = COUNTER_PHRASES.get((locale or "").split("-")[0].lower(), COUNTER_PHRASES[DEFAULT_LOCALE])
    try:
        key = PackageCounterFormat(format)
    except ValueError:
        key = F.X_SLASH_Y
    template = phrases.get(key) or COUNTER_PHRASES[DEFAULT_LOCALE][key]
    return template.format(current=current, total=total)
