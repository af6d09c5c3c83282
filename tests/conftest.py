from __future__ import annotations

from typing import Any, Dict

import pytest

from school_budget.core.currency import CurrencyContext


def make_scenario_config() -> Dict[str, Any]:
    """Local-program scenario with two visible tuition variants.

    Visible tuition rows are ``ilkokulYerel`` (1000, +10% raise, 50
    students) and ``ortaokulYerel`` (1500, 50 students); ``ilkokulInt``
    exists but is hidden for a local program.

    Example:
        >>> config = make_scenario_config()
        >>> config["basicInfo"]["programType"]
        'local'
    """

    return {
        "basicInfo": {
            "programType": "local",
            "administrators": {
                "principal": "Ayse Yilmaz",
                "reportPreparer": "Mehmet Kaya",
                "countryRepresentative": "Ali Demir",
            },
            "schoolEducation": {
                "startDate": "2025-09-08",
                "compulsoryEducation": "12 yil",
                "lessonDurationMinutes": 40,
                "dailyLessonHours": 7,
                "weeklyLessonHours": 35,
                "shiftSystem": "Tekli",
                "teacherWeeklyHoursAvg": 22,
                "transitionExamInfo": "LGS",
            },
            "tiers": {
                "okulOncesi": {"enabled": False},
                "ilkokul": {"enabled": True, "from": "1", "to": "5"},
                "ortaokul": {"enabled": True},
                "lise": {"enabled": False},
            },
            "feeIncreaseRates": {"ilkokulYerel": 0.1, "ortaokulYerel": 0},
            "inflation": {
                "y2023": 0.5,
                "y2024": 0.4,
                "y2025": 0.3,
                "expenseDeviationPct": 0.05,
                "currentSeasonAvgFee": 900,
            },
            "competitors": {"ilkokul": {"a": 1200, "b": 1100, "c": 0}},
            "performance": {
                "actual": {
                    "studentCount": 90,
                    "income": 110000,
                    "expenses": 88000,
                    "discounts": 5000,
                }
            },
            "discountStudentCounts": {"kardesIndirimi": 4},
        },
        "capacity": {"currentStudents": 90, "totals": {"cur": 120, "y1": 150}},
        "gradesCurrent": [
            {"grade": "1", "branchCount": 2, "studentsPerBranch": 40},
            {"grade": "6", "branchCount": 2, "studentsPerBranch": 50},
        ],
        "gradesPlannedByYear": {
            "y1": [
                {"grade": "1", "branchCount": 2, "studentsPerBranch": 50},
                {"grade": "6", "branchCount": 2, "studentsPerBranch": 50},
            ]
        },
        "income": {
            "tuition": {
                "rows": [
                    {"key": "ilkokulYerel", "label": "Ilkokul Yerel", "unitFee": 1000, "studentCount": 50},
                    {"key": "ilkokulInt", "label": "Ilkokul Int", "unitFee": 2000, "studentCount": 0},
                    {"key": "ortaokulYerel", "label": "Ortaokul Yerel", "unitFee": 1500, "studentCount": 50},
                ]
            },
            "nonEducationFees": {
                "rows": [
                    {"key": "yemek", "label": "Yemek", "unitFee": 200, "studentCount": 80},
                    {"key": "ulasim", "label": "Öğrenci Servis Ücreti", "unitFee": 100, "studentCount": 40},
                ]
            },
            "dormitory": {"rows": []},
            "otherInstitutionIncome": {"rows": [{"name": "Kantin", "amount": 3000}]},
            "governmentIncentives": 2000,
        },
        "expenses": {
            "operating": {
                "items": {
                    "turkPersonelMaas": 30000,
                    "yerelPersonelMaas": 40000,
                    "kira": 10000,
                    "tahsilEdilemeyenGelirler": 1000,
                }
            },
            "nonTuitionServices": {
                "items": {"yemek": {"unitCost": 150}, "ulasimServis": {"unitCost": 60}}
            },
        },
        "staffing": {
            "current": {"turkPersonelYoneticiEgitimci": 5},
            "years": {
                "y1": {
                    "headcountsByLevel": {
                        "ilkokul": {"turk_mudur": 1, "turk_egitimci": 4},
                        "ortaokul": {"turk_egitimci": 3, "yerel_destek": 2},
                    }
                }
            },
        },
        "discounts": [
            {"name": "Kardeş İndirimi", "mode": "percent", "value": 0.1, "ratio": 0.1},
            {"name": "Magis Başarı Bursu", "mode": "fixed", "value": 500, "studentCount": 2},
        ],
    }


def make_prev_report() -> Dict[str, Any]:
    return {
        "years": {
            "y1": {
                "students": {"totalStudents": 100},
                "income": {"netIncome": 100000, "totalDiscounts": 4000},
                "expenses": {"totalExpenses": 80000},
            }
        }
    }


@pytest.fixture
def scenario_config() -> Dict[str, Any]:
    return make_scenario_config()


@pytest.fixture
def prev_report() -> Dict[str, Any]:
    return make_prev_report()


@pytest.fixture
def scenario_bundle() -> Dict[str, Any]:
    """Bundle shape accepted by ``load_scenario_bundle`` and the CLI."""

    return {
        "config": make_scenario_config(),
        "school": {"name": "Ankara Koleji", "country_name": "Türkiye"},
        "scenario": {"name": "Plan A", "academic_year": "2025-2026"},
        "prevReport": make_prev_report(),
        "currencyMeta": {"input_currency": "USD"},
    }


@pytest.fixture
def usd() -> CurrencyContext:
    return CurrencyContext()


@pytest.fixture
def local_currency() -> CurrencyContext:
    """LOCAL inputs at 40 local units per USD, realized prior-year rate 32."""

    return CurrencyContext(
        input_currency="LOCAL",
        fx=40.0,
        realized_fx=32.0,
        prior_fx=None,
        local_currency_code="TRY",
    )
