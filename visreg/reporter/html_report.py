"""HTML report generator: produces a static, self-contained visual comparison report."""

from __future__ import annotations

import html
import logging
from pathlib import Path
from urllib.parse import quote

from visreg.models.comparison import ComparisonResult, RunReport
from visreg.url_utils import screenshot_filename

logger = logging.getLogger(__name__)

STAGING_COLOR = "rgb(255, 165, 0)"
PROD_COLOR = "rgb(0, 0, 255)"


def thumbnail_path(device_name: str, environment: str, page_path: str) -> str:
    """Path of a page's screenshot relative to the output root (and the report)."""
    return f"screenshots/{device_name}/{environment}/{screenshot_filename(page_path)}"


def _thumbnail(rel_path: str, label: str, root: Path) -> str:
    if not (root / rel_path).exists():
        return '<div class="thumbnail-wrapper">N/A</div>'
    href = html.escape(quote(rel_path))
    return f'''<div class="thumbnail-wrapper">
            <a href="{href}" target="_blank"><img src="{href}" alt="{label} Thumbnail" /></a>
            <div class="thumbnail-label">{label}</div>
          </div>'''


def _status_label(status: str) -> str:
    return {"pass": "Pass", "fail": "Fail", "error": "Error"}.get(status, status.title())


def _build_row(result: ComparisonResult, device_name: str, root: Path) -> str:
    """Build one table row for a compared page."""
    thumbs = "".join(
        _thumbnail(thumbnail_path(device_name, env, result.page_path), label, root)
        for env, label in (("staging", "Staging"), ("prod", "Prod"), ("diff", "Diff"))
    )

    similarity = html.escape(result.similarity.label())
    if result.similarity.kind == "error" and result.similarity.message:
        similarity = f'<span title="{html.escape(result.similarity.message)}">{similarity}</span>'

    return f'''
      <tr>
        <td>
          <div class="page-path">{html.escape(result.page_path)}</div>
          <a href="{html.escape(result.staging_url)}" target="_blank" class="staging">Staging</a> |
          <a href="{html.escape(result.prod_url)}" target="_blank" class="prod">Prod</a>
        </td>
        <td>{similarity}</td>
        <td class="{result.status}">{_status_label(result.status)}</td>
        <td>{thumbs}</td>
      </tr>'''


def generate_html_report(report: RunReport, output_path: Path) -> None:
    """Render a RunReport to ``output_path``.

    Thumbnail links are relative to the report's directory, which is expected
    to be the output root holding the ``screenshots/`` tree.
    """
    root = output_path.parent
    device = html.escape(report.device_name)
    rows = "".join(_build_row(r, report.device_name, root) for r in report.results)

    report_html = f'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>Visual Comparison Report - {device}</title>
<style>
  body {{ font-family: Arial, sans-serif; line-height: 1.5; margin: 20px; }}
  h1, h2 {{ text-align: center; }}
  .summary {{ text-align: center; margin: 20px 0; }}
  table {{ width: 100%; border-collapse: collapse; margin: 20px 0; }}
  th, td {{ border: 1px solid #ddd; padding: 8px; text-align: center; }}
  th {{ background-color: #f2f2f2; }}
  .pass {{ color: green; font-weight: bold; }}
  .fail {{ color: red; font-weight: bold; }}
  .error {{ color: orange; font-weight: bold; }}
  img {{ max-width: 150px; cursor: pointer; margin: 5px; }}
  .staging {{ color: {STAGING_COLOR}; font-weight: bold; }}
  .prod {{ color: {PROD_COLOR}; font-weight: bold; }}
  .page-path {{ font-family: monospace; font-size: 12px; }}
  .thumbnail-wrapper {{ display: inline-block; text-align: center; margin: 5px; }}
  .thumbnail-label {{ font-size: 12px; font-weight: bold; margin-top: 5px; }}
</style>
</head>
<body>
  <h1>Visual Comparison Report</h1>
  <h2>Device: {device} ({report.viewport_width}x{report.viewport_height})</h2>
  <div class="summary">
    <p>Total Pages Tested: {report.total_pages}</p>
    <p>Passed: {report.passed}</p>
    <p>Failed: {report.failed}</p>
    <p>Errors: {report.errors}</p>
    <p>Pass Threshold: {report.pass_threshold:g}%</p>
    <p>Last Run: {html.escape(report.started_at)}</p>
    <p>Environments Tested:
      <a href="{html.escape(report.staging_url)}" target="_blank" class="staging">Staging</a>,
      <a href="{html.escape(report.prod_url)}" target="_blank" class="prod">Prod</a>
    </p>
  </div>
  <table>
    <thead>
      <tr>
        <th>Page</th>
        <th>Similarity</th>
        <th>Status</th>
        <th>Thumbnails</th>
      </tr>
    </thead>
    <tbody>{rows}
    </tbody>
  </table>
</body>
</html>'''

    with open(output_path, "w", encoding="utf-8") as f:
        f.write(report_html)
    logger.debug("Wrote HTML report with %d rows to %s", len(report.results), output_path)
