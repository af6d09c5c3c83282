"""Headless command line interface of the report builder.

All file handling happens here; the Core receives plain mappings and returns
an immutable :class:`~school_budget.core.common.types.ReportModel`.

Example::

    >>> from school_budget.infra import cli
    >>> cli.main(["build-report", "--input", "bundle.json", "--output", "report.json"])  # doctest: +SKIP
    0
"""

from __future__ import annotations

import argparse
import logging
import sys
import traceback
from pathlib import Path
from typing import Callable, Sequence

from school_budget import __version__
from school_budget.core.common.errors import DomainError
from school_budget.core.report_builder import build_report_model
from school_budget.core.report_frames import report_to_frames
from school_budget.core.report_policy import ReportPolicy, load_report_policy
from school_budget.infra.errors import InfraError, InputFileError
from school_budget.infra.io_utils import load_scenario_bundle, write_frames_csv, write_json_atomic
from school_budget.infra.logging import (
    DEFAULT_LOGGING_CONFIG,
    LoggingContext,
    configure_logging,
    install_exception_hook,
)

APP_NAME = "school-budget"
_DEFAULT_POLICY_PATH = Path("config/report_policy.json")

logger = logging.getLogger("school_budget.cli")

Runner = Callable[[argparse.Namespace], int]


def _load_policy(path: str | None) -> ReportPolicy:
    """Explicit policy file, else the default file when present, else defaults."""

    if path is None:
        if not _DEFAULT_POLICY_PATH.exists():
            return ReportPolicy.default()
        path = str(_DEFAULT_POLICY_PATH)
    try:
        return load_report_policy(path)
    except FileNotFoundError as exc:
        raise InputFileError(path=path, message="report policy not found") from exc
    except (TypeError, ValueError) as exc:
        raise InputFileError(path=path, message=f"invalid report policy ({exc})") from exc


def _run_build_report(args: argparse.Namespace) -> int:
    policy = _load_policy(args.policy)
    bundle = load_scenario_bundle(args.input)
    logger.info("building report from %s (policy %s)", args.input, policy.version)

    model = build_report_model(bundle.config, policy=policy, **bundle.build_kwargs())
    output = write_json_atomic(args.output, model.to_dict())
    logger.info(
        "report written to %s: revenue=%.2f expense=%.2f net=%.2f",
        output,
        model.revenue_total,
        model.expense_total,
        model.net_total,
    )

    if args.tables:
        written = write_frames_csv(report_to_frames(model), output)
        logger.info("wrote %d table files next to %s", len(written), output)
    print(f"✅ {output}")
    return 0


def _report_unexpected(context: LoggingContext, command: str, exc: Exception) -> str:
    """Write an error report for an unexpected failure and return its path."""

    error_id = context.new_error_id()
    report_path = context.write_error_report(
        error_id=error_id,
        message=f"{command}: {exc}",
        traceback_text="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    )
    logger.critical(
        "%s failed unexpectedly",
        command,
        exc_info=exc,
        extra={"error_id": error_id, "report_path": str(report_path)},
    )
    return str(report_path)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=APP_NAME, description="School financial report builder")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-config",
        default=str(DEFAULT_LOGGING_CONFIG),
        help="path of the YAML logging configuration",
    )
    parser.add_argument("--log-dir", default=None, help="directory for log files and error reports")
    sub = parser.add_subparsers(dest="command", required=True)

    build_cmd = sub.add_parser(
        "build-report",
        help="build the report model of one scenario",
        description=(
            "Read a scenario bundle (or a bare scenario configuration), build the "
            "report model and write it as JSON."
        ),
    )
    build_cmd.add_argument("--input", required=True, help="scenario bundle JSON")
    build_cmd.add_argument("--output", required=True, help="output report JSON")
    build_cmd.add_argument(
        "--policy",
        default=None,
        help=f"report policy JSON (default: {_DEFAULT_POLICY_PATH} when present)",
    )
    build_cmd.add_argument(
        "--tables",
        action="store_true",
        help="also write one CSV per report table next to the output",
    )
    return parser


def main(argv: Sequence[str] | None = None, *, build_runner: Runner | None = None) -> int:
    """CLI entry point.

    Exit code 0 means success, 2 a rejected input and 1 an unexpected
    failure, for which an error report is written under ``<log-dir>/errors``.
    """

    parser = _build_parser()
    args = parser.parse_args(argv)
    context = configure_logging(
        app_name=APP_NAME,
        app_version=__version__,
        logger_name="school_budget",
        config_path=args.log_config,
        log_dir=args.log_dir,
        required=False,
    )
    restore_hook = install_exception_hook(logger, context)

    try:
        if args.command == "build-report":
            runner = build_runner or _run_build_report
            return runner(args)
        raise RuntimeError(f"Unsupported command: {args.command}")
    except (DomainError, InfraError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        print(f"❌ {exc}", file=sys.stderr)
        return 2
    except Exception as exc:
        report_path = _report_unexpected(context, args.command, exc)
        print(f"❌ unexpected error, report written to {report_path}", file=sys.stderr)
        return 1
    finally:
        restore_hook()


if __name__ == "__main__":
    raise SystemExit(main())
