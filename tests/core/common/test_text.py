import pytest

from school_budget.core.common.text import (
    normalize_name,
    normalize_text,
    normalize_variant,
    parse_academic_start_year,
    previous_academic_year,
    strip_marks,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Öğrenci Servis Ücreti (aylık)", "ogrenci servis ucreti"),
        ("Kitap-Kırtasiye", "kitap kirtasiye"),
        ("  ÜNİFORMA   bedeli ", "uniforma bedeli"),
        ("School_bus", "school_bus"),
        (None, ""),
    ],
)
def test_normalize_text_for_fuzzy_matching(raw, expected):
    assert normalize_text(raw) == expected


def test_strip_marks_drops_combining_characters():
    assert strip_marks("Üçgen") == "Ucgen"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Kardeş İndirimi", "KARDES INDIRIMI"),
        ("kardes indirimi", "KARDES INDIRIMI"),
        ("Magis Başarı Bursu", "MAGIS BASARI BURSU"),
        ("Vakfın Uluslararası Yükümlülüklerinden Kaynaklı İndirim", "VAKFIN ULUSLARARASI YUKUMLULUKLERINDEN KAYNAKLI INDIRIM"),
        (None, ""),
    ],
)
def test_normalize_name_builds_catalog_keys(raw, expected):
    assert normalize_name(raw) == expected


def test_normalize_variant_compacts_keys():
    assert normalize_variant("Lise Yerel") == "liseyerel"
    assert normalize_variant("ortaokulInt") == "ortaokulint"
    assert normalize_variant(None) == ""


@pytest.mark.parametrize(
    "raw,expected",
    [("2025-2026", 2025), ("2025 - 2026", 2025), ("2025", 2025), ("next year", None), (None, None)],
)
def test_parse_academic_start_year(raw, expected):
    assert parse_academic_start_year(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [("2025-2026", "2024-2025"), ("2025", "2024-2025"), ("", None), ("abc", None)],
)
def test_previous_academic_year(raw, expected):
    assert previous_academic_year(raw) == expected
