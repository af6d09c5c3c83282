"""JSON input/output for the Infra layer.

This module only moves bytes between disk and plain Python structures; no
report logic lives here so the Core/Infra split stays intact.
"""

from __future__ import annotations

import contextlib
import json
import math
import os
import tempfile
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping

import pandas as pd

from school_budget.infra.errors import InputFileError, OutputWriteError

__all__ = [
    "ScenarioBundle",
    "load_scenario_bundle",
    "read_json",
    "write_frames_csv",
    "write_json_atomic",
]


@dataclass(frozen=True)
class ScenarioBundle:
    """Everything one report build needs, as read from a single file."""

    config: Mapping[str, Any]
    school: Mapping[str, Any] = field(default_factory=dict)
    scenario: Mapping[str, Any] = field(default_factory=dict)
    report: Mapping[str, Any] | None = None
    prev_report: Mapping[str, Any] | None = None
    currency_meta: Mapping[str, Any] | None = None
    prev_currency_meta: Mapping[str, Any] | None = None
    program_type: str | None = None

    def build_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``build_report_model`` (config excluded)."""

        return {
            "school": self.school,
            "scenario": self.scenario,
            "report": self.report,
            "prev_report": self.prev_report,
            "currency_meta": self.currency_meta,
            "prev_currency_meta": self.prev_currency_meta,
            "program_type": self.program_type,
        }


def read_json(path: Path | str | PathLike[str]) -> Any:
    """Read a UTF-8 JSON document.

    Raises:
        InputFileError: if the file is missing, unreadable or not valid JSON.
    """

    source = Path(path)
    try:
        raw = source.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise InputFileError(path=str(source), message="input file not found") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise InputFileError(path=str(source), message=f"cannot read input file ({exc})") from exc
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InputFileError(
            path=str(source), message=f"invalid JSON at line {exc.lineno} column {exc.colno}"
        ) from exc


def _optional_mapping(value: Any) -> Mapping[str, Any] | None:
    return value if isinstance(value, Mapping) else None


def load_scenario_bundle(path: Path | str | PathLike[str]) -> ScenarioBundle:
    """Load a scenario bundle, or a bare scenario configuration.

    A bundle is recognised by a ``config`` (or ``inputs``) object at the top
    level; any other object is treated as the configuration itself.

    Example::

        >>> bundle = load_scenario_bundle("scenario.json")  # doctest: +SKIP
        >>> sorted(bundle.build_kwargs())  # doctest: +SKIP
        ['currency_meta', 'prev_currency_meta', ...]
    """

    data = read_json(path)
    if not isinstance(data, Mapping):
        raise InputFileError(path=str(path), message="scenario file must hold a JSON object")

    nested = data.get("config", data.get("inputs"))
    if not isinstance(nested, Mapping):
        return ScenarioBundle(config=data)

    program_type = data.get("programType")
    return ScenarioBundle(
        config=nested,
        school=_optional_mapping(data.get("school")) or {},
        scenario=_optional_mapping(data.get("scenario")) or {},
        report=_optional_mapping(data.get("report")),
        prev_report=_optional_mapping(data.get("prevReport")),
        currency_meta=_optional_mapping(data.get("currencyMeta")),
        prev_currency_meta=_optional_mapping(data.get("prevCurrencyMeta")),
        program_type=str(program_type) if program_type else None,
    )


def _json_default(value: Any) -> Any:
    if value is pd.NA:
        return None
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _sanitize(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, Mapping):
        return {key: _sanitize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_sanitize(item) for item in value]
    return value


@contextlib.contextmanager
def _temporary_file_path(*, suffix: str = "", directory: Path | str | None = None) -> Iterator[Path]:
    """Temporary path next to the target; removed if it was not moved away."""

    fd, name = tempfile.mkstemp(suffix=suffix, dir=directory)
    os.close(fd)
    path = Path(name)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)


def write_json_atomic(path: Path | str | PathLike[str], payload: Any) -> Path:
    """Write ``payload`` as pretty UTF-8 JSON, replacing the target atomically.

    Non-finite floats are written as ``null``.
    """

    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with _temporary_file_path(suffix=".json", directory=target.parent) as tmp_path:
            text = json.dumps(_sanitize(payload), ensure_ascii=False, indent=2, default=_json_default)
            tmp_path.write_text(text + "\n", encoding="utf-8")
            os.replace(tmp_path, target)
    except OSError as exc:
        raise OutputWriteError(path=str(target), message=f"cannot write report ({exc})") from exc
    return target


def write_frames_csv(
    frames: Mapping[str, pd.DataFrame], base_path: Path | str | PathLike[str]
) -> list[Path]:
    """Write each frame to ``<stem>-<name>.csv`` beside ``base_path``."""

    base = Path(base_path)
    written: list[Path] = []
    for name, frame in frames.items():
        target = base.with_name(f"{base.stem}-{name}.csv")
        try:
            with _temporary_file_path(suffix=".csv", directory=target.parent) as tmp_path:
                frame.to_csv(tmp_path, index=False, encoding="utf-8")
                os.replace(tmp_path, target)
        except OSError as exc:
            raise OutputWriteError(path=str(target), message=f"cannot write table ({exc})") from exc
        written.append(target)
    return written
