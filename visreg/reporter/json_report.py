"""JSON report output."""

from __future__ import annotations

import json
from pathlib import Path

from visreg.models.checks import CheckResult
from visreg.models.comparison import RunReport


def generate_json_report(report: RunReport, output_path: Path) -> None:
    """Write a machine-readable JSON report for one device run."""
    with open(output_path, "w") as f:
        json.dump(report.model_dump(), f, indent=2, default=str)


def generate_checks_report(results: list[CheckResult], output_path: Path) -> None:
    """Write functional check results with pass/fail/error totals."""
    report = {
        "total": len(results),
        "passed": sum(1 for r in results if r.result == "pass"),
        "failed": sum(1 for r in results if r.result == "fail"),
        "errors": sum(1 for r in results if r.result == "error"),
        "results": [r.model_dump() for r in results],
    }
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2, default=str)
