"""Display strings for canonical labels and colors.

Classification always works in canonical English; this module only decides
what a user sees.
"""

from __future__ import annotations

from itemsight.vision.models import UNKNOWN_LABEL, NamedColor

SUPPORTED_LOCALES: tuple[str, ...] = ("en", "vi")

_EN_COLORS: dict[NamedColor, str] = {
    NamedColor.BLACK: "Black",
    NamedColor.DARK_GRAY: "Dark Gray",
    NamedColor.GRAY: "Gray",
    NamedColor.LIGHT_GRAY: "Light Gray",
    NamedColor.WHITE: "White",
    NamedColor.RED: "Red",
    NamedColor.PINK: "Pink",
    NamedColor.ORANGE: "Orange",
    NamedColor.DARK_ORANGE: "Dark Orange",
    NamedColor.BROWN: "Brown",
    NamedColor.YELLOW: "Yellow",
    NamedColor.YELLOW_GREEN: "Yellow Green",
    NamedColor.GREEN: "Green",
    NamedColor.LIGHT_GREEN: "Light Green",
    NamedColor.DARK_GREEN: "Dark Green",
    NamedColor.CYAN: "Cyan",
    NamedColor.BLUE: "Blue",
    NamedColor.LIGHT_BLUE: "Light Blue",
    NamedColor.PURPLE: "Purple",
    NamedColor.MAGENTA: "Magenta",
    NamedColor.UNKNOWN: "Unknown",
}

_VI_COLORS: dict[NamedColor, str] = {
    NamedColor.BLACK: "Đen",
    NamedColor.DARK_GRAY: "Xám đậm",
    NamedColor.GRAY: "Xám",
    NamedColor.LIGHT_GRAY: "Xám nhạt",
    NamedColor.WHITE: "Trắng",
    NamedColor.RED: "Đỏ",
    NamedColor.PINK: "Hồng",
    NamedColor.ORANGE: "Cam",
    NamedColor.DARK_ORANGE: "Cam đậm",
    NamedColor.BROWN: "Nâu",
    NamedColor.YELLOW: "Vàng",
    NamedColor.YELLOW_GREEN: "Vàng chanh",
    NamedColor.GREEN: "Xanh lá",
    NamedColor.LIGHT_GREEN: "Xanh lá nhạt",
    NamedColor.DARK_GREEN: "Xanh lá đậm",
    NamedColor.CYAN: "Xanh lơ",
    NamedColor.BLUE: "Xanh dương",
    NamedColor.LIGHT_BLUE: "Xanh da trời",
    NamedColor.PURPLE: "Tím",
    NamedColor.MAGENTA: "Đỏ tía",
    NamedColor.UNKNOWN: "Không xác định",
}

# Household objects the catalog is mostly used for; other labels pass through.
_VI_LABELS: dict[str, str] = {
    UNKNOWN_LABEL.lower(): "Không xác định",
    "person": "Người",
    "backpack": "Ba lô",
    "umbrella": "Ô",
    "handbag": "Túi xách",
    "suitcase": "Va li",
    "bottle": "Chai",
    "wine glass": "Ly rượu",
    "cup": "Cốc",
    "fork": "Nĩa",
    "knife": "Dao",
    "spoon": "Thìa",
    "bowl": "Bát",
    "banana": "Chuối",
    "apple": "Táo",
    "orange": "Cam",
    "chair": "Ghế",
    "couch": "Ghế sofa",
    "potted plant": "Chậu cây",
    "bed": "Giường",
    "dining table": "Bàn ăn",
    "tv": "Ti vi",
    "laptop": "Máy tính xách tay",
    "mouse": "Chuột máy tính",
    "remote": "Điều khiển từ xa",
    "keyboard": "Bàn phím",
    "cell phone": "Điện thoại",
    "microwave": "Lò vi sóng",
    "oven": "Lò nướng",
    "toaster": "Máy nướng bánh mì",
    "refrigerator": "Tủ lạnh",
    "book": "Sách",
    "clock": "Đồng hồ",
    "vase": "Bình hoa",
    "scissors": "Kéo",
    "teddy bear": "Gấu bông",
    "hair drier": "Máy sấy tóc",
    "toothbrush": "Bàn chải đánh răng",
}


class Translator:
    """Maps canonical labels and colors to display strings for a locale."""

    def __init__(self, default_locale: str = "en") -> None:
        self.default_locale = default_locale

    def _resolve(self, locale: str | None) -> str:
        chosen = (locale or self.default_locale).lower()
        return chosen if chosen in SUPPORTED_LOCALES else "en"

    def color(self, color: NamedColor, locale: str | None = None) -> str:
        table = _VI_COLORS if self._resolve(locale) == "vi" else _EN_COLORS
        return table[color]

    def label(self, label: str, locale: str | None = None) -> str:
        """Translate a detector label; English keeps it with the first letter capitalized."""
        if self._resolve(locale) == "vi":
            translated = _VI_LABELS.get(label.lower())
            if translated is not None:
                return translated
        return label[:1].upper() + label[1:]
