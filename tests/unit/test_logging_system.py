"""Unit tests of the Infra logging bootstrap."""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from textwrap import dedent

import pytest

from school_budget.infra.logging import configure_logging, install_exception_hook, setup_logging


def _create_logging_config(tmp_path: Path) -> Path:
    log_path = tmp_path / "logs" / "test.log"
    config_path = tmp_path / "logging.yaml"
    config_path.write_text(
        dedent(
            f"""
            version: 1
            disable_existing_loggers: false
            formatters:
              detailed:
                format: "[%(asctime)s] %(levelname)s %(name)s | session=%(session_id)s user=%(user)s error=%(error_id)s report=%(report_path)s | %(message)s"
                datefmt: "%Y-%m-%d %H:%M:%S"
            handlers:
              file:
                class: logging.FileHandler
                level: DEBUG
                formatter: detailed
                filename: "{log_path}"
                encoding: utf-8
            loggers:
              test.logger:
                level: DEBUG
                handlers: [file]
                propagate: false
            root:
              level: WARNING
              handlers: [file]
            """
        ).strip()
    )
    return config_path


def test_configure_logging_enriches_records(tmp_path: Path) -> None:
    config_path = _create_logging_config(tmp_path)
    context = configure_logging(
        app_name="school-budget",
        app_version="0.1",
        logger_name="test.logger",
        config_path=config_path,
        log_dir=tmp_path / "logs",
    )

    logger = logging.getLogger("test.logger")
    logger.info("report built")
    logger.error("boom")
    logging.shutdown()

    content = (tmp_path / "logs" / "test.log").read_text(encoding="utf-8")
    assert context.session_id in content
    assert "report built" in content
    assert "error=" in content


def test_relative_file_handlers_move_into_log_dir(tmp_path: Path) -> None:
    config_path = tmp_path / "logging.yaml"
    config_path.write_text(
        dedent(
            """
            version: 1
            disable_existing_loggers: false
            handlers:
              file:
                class: logging.FileHandler
                filename: nested/app.log
            loggers:
              relocated.logger:
                level: INFO
                handlers: [file]
                propagate: false
            """
        ).strip()
    )
    setup_logging(config_path, tmp_path / "custom")
    logging.getLogger("relocated.logger").info("hello")
    logging.shutdown()

    assert (tmp_path / "custom" / "app.log").read_text(encoding="utf-8").strip() == "hello"


def test_missing_config_raises_unless_optional(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        setup_logging(tmp_path / "missing.yaml")
    setup_logging(tmp_path / "missing.yaml", required=False)


def test_non_mapping_config_is_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "logging.yaml"
    config_path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        setup_logging(config_path)


def test_repository_logging_config_is_valid(tmp_path: Path) -> None:
    root = Path(__file__).resolve().parents[2]
    context = configure_logging(
        app_name="school-budget",
        app_version="0.1",
        logger_name="school_budget",
        config_path=root / "config" / "logging.yaml",
        log_dir=tmp_path,
    )
    logging.getLogger("school_budget.test").info("ready")
    logging.shutdown()

    assert context.log_dir == tmp_path.resolve()
    assert "ready" in (tmp_path / "school_budget.log").read_text(encoding="utf-8")


def test_install_exception_hook_creates_error_report(tmp_path: Path) -> None:
    config_path = _create_logging_config(tmp_path)
    context = configure_logging(
        app_name="school-budget",
        app_version="0.2",
        logger_name="test.logger",
        config_path=config_path,
        log_dir=tmp_path / "logs",
    )

    logger = logging.getLogger("test.logger")
    restore = install_exception_hook(logger, context)
    try:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            exc_type, exc_value, exc_tb = sys.exc_info()
            assert exc_tb is not None
            sys.excepthook(exc_type, exc_value, exc_tb)
    finally:
        restore()
        logging.shutdown()

    reports = sorted(context.error_dir.glob("*.log"))
    assert reports, "no error report was written"
    content = reports[-1].read_text(encoding="utf-8")
    assert "RuntimeError" in content
    assert "boom" in content
    assert "application=school-budget" in content
