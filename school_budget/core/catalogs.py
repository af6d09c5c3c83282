"""Read-only catalogs used by the report engine.

Everything here is an immutable tuple or a ``MappingProxyType`` so that
concurrent builds can share the tables safely.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple

from .common.types import DiscountCatalogEntry, TierDefinition

__all__ = [
    "ANCILLARY_FEE_KEYS",
    "BAD_DEBT_KEY",
    "BOOK_ALIASES",
    "DISCOUNT_CATALOG",
    "DORM_EXPENSE_KEYS",
    "GRADES",
    "HR_EXPENSE_KEYS",
    "HR_LOCAL_KEYS",
    "HR_ROLE_GROUPS",
    "HR_TURKISH_KEYS",
    "MEAL_ALIASES",
    "OPERATING_EXPENSE_KEYS",
    "OTHER_DISCOUNT_CATALOG",
    "SCHOLARSHIP_CATALOG",
    "SERVICE_COST_KEYS",
    "TIER_DEFINITIONS",
    "TIER_KEYS",
    "TIER_REPORT_LABELS",
    "TRANSPORT_ALIASES",
    "TUITION_VARIANT_BASE",
    "UNIFORM_ALIASES",
    "tier_definition",
]

GRADES: Tuple[str, ...] = ("KG", "1", "2", "3", "4", "5", "6", "7", "8", "9", "10", "11", "12")

TIER_DEFINITIONS: Tuple[TierDefinition, ...] = (
    TierDefinition("okulOncesi", "Okul Öncesi", "KG", "KG"),
    TierDefinition("ilkokul", "İlkokul", "1", "5"),
    TierDefinition("ortaokul", "Ortaokul", "6", "9"),
    TierDefinition("lise", "Lise", "10", "12"),
)
TIER_KEYS: Tuple[str, ...] = tuple(item.key for item in TIER_DEFINITIONS)

# ASCII labels used in exported tables.
TIER_REPORT_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "okulOncesi": "Okul Oncesi",
        "ilkokul": "Ilkokul",
        "ortaokul": "Ortaokul",
        "lise": "Lise",
    }
)


def tier_definition(key: str) -> TierDefinition | None:
    for item in TIER_DEFINITIONS:
        if item.key == key:
            return item
    return None


TUITION_VARIANT_BASE: Mapping[str, str] = MappingProxyType(
    {
        "okuloncesi": "okulOncesi",
        "ilkokul": "ilkokul",
        "ilkokulyerel": "ilkokul",
        "ilkokulint": "ilkokul",
        "ortaokul": "ortaokul",
        "ortaokulyerel": "ortaokul",
        "ortaokulint": "ortaokul",
        "lise": "lise",
        "liseyerel": "lise",
        "liseint": "lise",
    }
)


def _scholarship(key: str, name: str) -> DiscountCatalogEntry:
    return DiscountCatalogEntry(key=key, name=name, group="scholarship")


def _discount(key: str, name: str) -> DiscountCatalogEntry:
    return DiscountCatalogEntry(key=key, name=name, group="discount")


DISCOUNT_CATALOG: Tuple[DiscountCatalogEntry, ...] = (
    _scholarship("magisBasariBursu", "MAGIS BASARI BURSU"),
    _scholarship("maarifYetenekBursu", "MAARIF YETENEK BURSU"),
    _scholarship("ihtiyacBursu", "IHTIYAC BURSU"),
    _scholarship("okulBasariBursu", "OKUL BASARI BURSU"),
    _scholarship("tamEgitimBursu", "TAM EGITIM BURSU"),
    _scholarship("barinmaBursu", "BARINMA BURSU"),
    _scholarship("turkceBasariBursu", "TURKCE BASARI BURSU"),
    _discount(
        "uluslararasiYukumlulukIndirimi",
        "VAKFIN ULUSLARARASI YUKUMLULUKLERINDEN KAYNAKLI INDIRIM",
    ),
    _discount("vakifCalisaniIndirimi", "VAKIF CALISANI INDIRIMI"),
    _discount("kardesIndirimi", "KARDES INDIRIMI"),
    _discount("erkenKayitIndirimi", "ERKEN KAYIT INDIRIMI"),
    _discount("pesinOdemeIndirimi", "PESIN ODEME INDIRIMI"),
    _discount("kademeGecisIndirimi", "KADEME GECIS INDIRIMI"),
    _discount("temsilIndirimi", "TEMSIL INDIRIMI"),
    _discount("kurumIndirimi", "KURUM INDIRIMI"),
    _discount("istisnaiIndirim", "ISTISNAI INDIRIM"),
)
SCHOLARSHIP_CATALOG: Tuple[DiscountCatalogEntry, ...] = tuple(
    entry for entry in DISCOUNT_CATALOG if entry.is_scholarship
)
OTHER_DISCOUNT_CATALOG: Tuple[DiscountCatalogEntry, ...] = tuple(
    entry for entry in DISCOUNT_CATALOG if not entry.is_scholarship
)

MEAL_ALIASES: Tuple[str, ...] = (
    "yemek",
    "ogrenci yemegi",
    "ogrenci yemegi ucreti",
    "ogrenci yemeği",
    "yemek ucreti",
    "lunch",
    "meal",
    "meal fee",
    "food",
)
UNIFORM_ALIASES: Tuple[str, ...] = (
    "uniforma",
    "okul uniformasi",
    "okul üniformasi",
    "forma",
    "kiyafet",
    "kıyafet",
    "uniform",
    "uniform fee",
)
BOOK_ALIASES: Tuple[str, ...] = (
    "kitap",
    "kirtasiye",
    "kırtasiye",
    "kitap kirtasiye",
    "kitap-kirtasiye",
    "book",
    "books",
    "stationery",
    "book stationery",
)
TRANSPORT_ALIASES: Tuple[str, ...] = (
    "servis",
    "ogrenci servisi",
    "ogrenci servis",
    "ulasim",
    "ulaşim",
    "servis ucreti",
    "transport",
    "transportation",
    "bus",
    "school bus",
)

# Fee row keys of the ancillary fees charged on top of tuition.
ANCILLARY_FEE_KEYS: Mapping[str, str] = MappingProxyType(
    {"uniform": "uniforma", "book": "kitap", "transport": "ulasim", "meal": "yemek"}
)

# Unit-cost item keys of non-tuition services, first match wins.
SERVICE_COST_KEYS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "meal": ("yemek",),
        "uniform": ("uniforma",),
        "book": ("kitapKirtasiye", "kitap", "kirtasiye"),
        "transport": ("ulasimServis", "servis", "ulasim"),
    }
)

# (expense item key, dormitory income row key providing the student count)
DORM_EXPENSE_KEYS: Tuple[Tuple[str, str], ...] = (
    ("yurtGiderleri", "yurt"),
    ("digerYurt", "yazokulu"),
)

OPERATING_EXPENSE_KEYS: Tuple[str, ...] = (
    "ulkeTemsilciligi",
    "genelYonetim",
    "kira",
    "emsalKira",
    "enerjiKantin",
    "turkPersonelMaas",
    "turkDestekPersonelMaas",
    "yerelPersonelMaas",
    "yerelDestekPersonelMaas",
    "internationalPersonelMaas",
    "sharedPayrollAllocation",
    "disaridanHizmet",
    "egitimAracGerec",
    "finansalGiderler",
    "egitimAmacliHizmet",
    "temsilAgirlama",
    "ulkeIciUlasim",
    "ulkeDisiUlasim",
    "vergilerResmiIslemler",
    "vergiler",
    "demirbasYatirim",
    "rutinBakim",
    "pazarlamaOrganizasyon",
    "reklamTanitim",
    "tahsilEdilemeyenGelirler",
)
HR_EXPENSE_KEYS: Tuple[str, ...] = (
    "turkPersonelMaas",
    "turkDestekPersonelMaas",
    "yerelPersonelMaas",
    "yerelDestekPersonelMaas",
    "internationalPersonelMaas",
)
HR_TURKISH_KEYS: Tuple[str, ...] = ("turkPersonelMaas", "turkDestekPersonelMaas")
HR_LOCAL_KEYS: Tuple[str, ...] = (
    "yerelPersonelMaas",
    "yerelDestekPersonelMaas",
    "internationalPersonelMaas",
)
BAD_DEBT_KEY = "tahsilEdilemeyenGelirler"

# (role group key, report label, role keys summed across levels)
HR_ROLE_GROUPS: Tuple[Tuple[str, str, Tuple[str, ...]], ...] = (
    (
        "turkPersonelYoneticiEgitimci",
        "Turk Personel Yonetici ve Egitimci Sayisi",
        ("turk_mudur", "turk_mdyard", "turk_egitimci"),
    ),
    ("turkPersonelTemsilcilik", "Turk Personel Temsilcilik Personeli Sayisi", ("turk_temsil",)),
    ("yerelKadroluEgitimci", "Yerel Kadrolu Egitimci Personel Sayisi", ("yerel_yonetici_egitimci",)),
    (
        "yerelUcretliVakaterEgitimci",
        "Yerel Ucretli (Vaka) Egitimci Personel Sayisi",
        ("yerel_ucretli_egitimci",),
    ),
    ("yerelDestek", "Yerel Destek Personel Sayisi", ("yerel_destek",)),
    ("yerelTemsilcilik", "Yerel Personel Temsilcilik Personeli Sayisi", ("yerel_ulke_temsil_destek",)),
    ("international", "International Personel Sayisi", ("int_yonetici_egitimci",)),
)
