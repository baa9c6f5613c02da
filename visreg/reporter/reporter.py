"""Report generation orchestration."""

from __future__ import annotations

import logging
from pathlib import Path

from visreg.models.checks import CheckResult
from visreg.models.comparison import RunReport
from visreg.models.config import FrameworkConfig

from .html_report import generate_html_report
from .json_report import generate_checks_report, generate_json_report

logger = logging.getLogger(__name__)

CHECKS_REPORT_NAME = "functional_checks_report.json"


def report_basename(device_name: str) -> str:
    return f"visual_comparison_report_{device_name}"


class Reporter:
    """Writes report artifacts for comparison runs and functional checks."""

    def __init__(self, config: FrameworkConfig):
        self.config = config

    def generate_reports(
        self, report: RunReport, output_dir: Path | None = None,
    ) -> dict[str, str]:
        """Generate all configured report formats. Returns format -> file path."""
        out_dir = output_dir or Path(self.config.output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        generated = {}
        base = report_basename(report.device_name)

        if "html" in self.config.report_formats:
            path = out_dir / f"{base}.html"
            generate_html_report(report, path)
            generated["html"] = str(path)
            logger.info("HTML report generated: %s", path)

        if "json" in self.config.report_formats:
            path = out_dir / f"{base}.json"
            generate_json_report(report, path)
            generated["json"] = str(path)
            logger.info("JSON report generated: %s", path)

        return generated

    def generate_checks_report(
        self, results: list[CheckResult], output_dir: Path | None = None,
    ) -> str:
        out_dir = output_dir or Path(self.config.output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        path = out_dir / CHECKS_REPORT_NAME
        generate_checks_report(results, path)
        logger.info("Functional checks report generated: %s", path)
        return str(path)
