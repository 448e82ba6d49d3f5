"""Tests for label and color localization."""

from __future__ import annotations

import pytest

from itemsight.i18n.translations import Translator
from itemsight.vision.models import NamedColor


class TestTranslator:
    def test_english_colors_are_spaced(self) -> None:
        assert Translator().color(NamedColor.LIGHT_BLUE) == "Light Blue"

    def test_vietnamese_colors(self) -> None:
        translator = Translator()
        assert translator.color(NamedColor.RED, "vi") == "Đỏ"
        assert translator.color(NamedColor.UNKNOWN, "vi") == "Không xác định"

    @pytest.mark.parametrize("locale", ["en", "vi"])
    def test_every_color_has_a_display_name(self, locale: str) -> None:
        translator = Translator()
        assert all(translator.color(color, locale) for color in NamedColor)

    def test_english_label_is_capitalized(self) -> None:
        assert Translator().label("cell phone") == "Cell phone"

    def test_vietnamese_label(self) -> None:
        assert Translator().label("cup", "vi") == "Cốc"
        assert Translator().label("Unknown", "vi") == "Không xác định"

    def test_untranslated_label_falls_back(self) -> None:
        assert Translator().label("giraffe", "vi") == "Giraffe"

    def test_default_locale_applies(self) -> None:
        assert Translator(default_locale="vi").color(NamedColor.BLACK) == "Đen"

    def test_unsupported_locale_uses_english(self) -> None:
        assert Translator().color(NamedColor.GREEN, "fr") == "Green"

    def test_locale_is_case_insensitive(self) -> None:
        assert Translator().color(NamedColor.WHITE, "VI") == "Trắng"
