from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from school_budget.infra.errors import InfraError, InputFileError, OutputWriteError
from school_budget.infra.io_utils import (
    load_scenario_bundle,
    read_json,
    write_frames_csv,
    write_json_atomic,
)


def test_read_json_missing_file(tmp_path: Path) -> None:
    with pytest.raises(InputFileError) as excinfo:
        read_json(tmp_path / "absent.json")
    assert isinstance(excinfo.value, InfraError)
    assert "input file not found" in str(excinfo.value)
    assert str(excinfo.value).endswith("absent.json")


def test_read_json_reports_position_of_syntax_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text('{\n  "a": 1,\n  oops\n}', encoding="utf-8")
    with pytest.raises(InputFileError) as excinfo:
        read_json(path)
    assert excinfo.value.message.startswith("invalid JSON at line 3")


def test_bundle_is_split_into_build_arguments(tmp_path: Path, scenario_bundle) -> None:
    path = tmp_path / "bundle.json"
    path.write_text(json.dumps(scenario_bundle, ensure_ascii=False), encoding="utf-8")

    bundle = load_scenario_bundle(path)

    assert bundle.config == scenario_bundle["config"]
    assert bundle.school["name"] == "Ankara Koleji"
    assert bundle.prev_report == scenario_bundle["prevReport"]
    assert bundle.report is None
    kwargs = bundle.build_kwargs()
    assert set(kwargs) == {
        "school",
        "scenario",
        "report",
        "prev_report",
        "currency_meta",
        "prev_currency_meta",
        "program_type",
    }
    assert kwargs["currency_meta"] == {"input_currency": "USD"}


def test_inputs_key_is_accepted_as_bundle(tmp_path: Path) -> None:
    path = tmp_path / "bundle.json"
    path.write_text(json.dumps({"inputs": {"basicInfo": {}}, "programType": "international"}), encoding="utf-8")
    bundle = load_scenario_bundle(path)
    assert bundle.config == {"basicInfo": {}}
    assert bundle.program_type == "international"


def test_bare_config_is_used_as_is(tmp_path: Path, scenario_config) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(scenario_config, ensure_ascii=False), encoding="utf-8")
    bundle = load_scenario_bundle(path)
    assert bundle.config == scenario_config
    assert bundle.school == {}
    assert bundle.prev_report is None


def test_non_object_scenario_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "list.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(InputFileError, match="must hold a JSON object"):
        load_scenario_bundle(path)


def test_write_json_atomic_sanitizes_non_finite(tmp_path: Path) -> None:
    target = tmp_path / "out" / "report.json"
    written = write_json_atomic(target, {"a": float("nan"), "b": [1.5, float("inf")], "c": "Öğrenci"})

    assert written == target
    text = target.read_text(encoding="utf-8")
    assert "Öğrenci" in text
    assert json.loads(text) == {"a": None, "b": [1.5, None], "c": "Öğrenci"}
    assert sorted(p.name for p in target.parent.iterdir()) == ["report.json"]


def test_write_json_atomic_replaces_existing_file(tmp_path: Path) -> None:
    target = tmp_path / "report.json"
    target.write_text("old", encoding="utf-8")
    write_json_atomic(target, {"v": 2})
    assert json.loads(target.read_text(encoding="utf-8")) == {"v": 2}


def test_write_json_atomic_wraps_os_errors(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(OutputWriteError):
        write_json_atomic(blocker / "report.json", {})


def test_write_frames_csv_names_files_after_output(tmp_path: Path) -> None:
    frames = {
        "tuition": pd.DataFrame({"key": ["a", "b"], "total": [1.0, pd.NA]}),
        "hr": pd.DataFrame(columns=["role", "current", "planned"]),
    }
    written = write_frames_csv(frames, tmp_path / "report.json")

    assert [p.name for p in written] == ["report-tuition.csv", "report-hr.csv"]
    tuition = pd.read_csv(written[0])
    assert tuition["key"].tolist() == ["a", "b"]
    assert pd.isna(tuition.loc[1, "total"])
    assert pd.read_csv(written[1]).columns.tolist() == ["role", "current", "planned"]
