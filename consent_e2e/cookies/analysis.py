"""Cross-run analysis of exported customization results.

Each customization run can export a JSON record of the cookies observed
before and after saving preferences. This module aggregates those records
per execution project to find the cookies that reliably appear, which is how
the expectation registry entries are authored.
"""

import json
import logging
import math
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class CookieRef(BaseModel):
    """Name and domain of an exported cookie."""

    name: str
    domain: str

    @property
    def key(self) -> str:
        return f"{self.name}@{self.domain}"


class CustomizationResults(BaseModel):
    """Outcome section of an exported run record."""

    model_config = ConfigDict(populate_by_name=True)

    cookie_count_change: int = Field(default=0, alias='cookieCountChange')
    consent_cookie_updated: bool = Field(default=False, alias='consentCookieUpdated')


class RunRecord(BaseModel):
    """One exported customization run.

    Accepts both the snake_case records written by this package and
    camelCase records produced by older exporters.
    """

    model_config = ConfigDict(populate_by_name=True)

    project: str
    cookie_count_before: int = Field(default=0, alias='cookieCountBefore')
    cookie_count_after: int = Field(default=0, alias='cookieCountAfter')
    customization_results: CustomizationResults = Field(
        default_factory=CustomizationResults,
        alias='customizationResults'
    )
    cookies_after: List[CookieRef] = Field(default_factory=list, alias='cookiesAfter')


class ProjectCookieAnalysis(BaseModel):
    """Aggregated cookie behaviour of one execution project."""

    project: str
    runs: int = 0
    always_updates_consent: bool = True
    min_change: int = 0
    max_change: int = 0
    avg_change: int = 0
    consistent_cookies_after: List[str] = Field(
        default_factory=list,
        description="Cookies present after customization in every run"
    )


def load_run_records(directory: Path) -> List[RunRecord]:
    """Load every ``*.json`` run record in a directory, sorted by file name."""
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Export directory not found: {directory}")

    records = []
    for path in sorted(directory.glob('*.json')):
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        records.append(RunRecord.model_validate(data))
        logger.debug(f"Loaded run record: {path.name}")

    logger.info(f"Loaded {len(records)} run record(s) from {directory}")
    return records


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def analyze_runs(records: Iterable[RunRecord]) -> Dict[str, ProjectCookieAnalysis]:
    """Aggregate run records per project.

    Returns:
        Analysis per project, in the order projects first appear.
    """
    grouped: Dict[str, List[RunRecord]] = {}
    for record in records:
        grouped.setdefault(record.project, []).append(record)

    results = {}
    for project, runs in grouped.items():
        changes = [run.customization_results.cookie_count_change for run in runs]

        # Dicts keep first-seen order
        counts: Dict[str, int] = {}
        for run in runs:
            for key in dict.fromkeys(cookie.key for cookie in run.cookies_after):
                counts[key] = counts.get(key, 0) + 1

        results[project] = ProjectCookieAnalysis(
            project=project,
            runs=len(runs),
            always_updates_consent=all(
                run.customization_results.consent_cookie_updated for run in runs
            ),
            min_change=min(changes),
            max_change=max(changes),
            avg_change=_round_half_up(sum(changes) / len(changes)),
            consistent_cookies_after=[
                key for key, count in counts.items() if count == len(runs)
            ],
        )

    return results


def format_analysis(results: Dict[str, ProjectCookieAnalysis]) -> str:
    """Render the analysis as a human-readable report."""
    lines = ['=== COOKIE ANALYSIS RESULTS ===', '']

    for project, analysis in results.items():
        lines.append(project.upper())
        lines.append(f"   Runs analyzed: {analysis.runs}")
        lines.append(f"   Always updates consent: {str(analysis.always_updates_consent).lower()}")
        lines.append(
            f"   Cookie count change: {analysis.min_change}-{analysis.max_change} "
            f"(avg: {analysis.avg_change})"
        )
        lines.append("   Consistent cookies after customization:")
        for key in analysis.consistent_cookies_after:
            lines.append(f"     - {key}")
        lines.append('')

    return '\n'.join(lines)


def analyze_directory(directory: Path) -> Optional[Dict[str, ProjectCookieAnalysis]]:
    """Load and analyze all run records in a directory.

    Returns:
        Per-project analysis, or None when the directory holds no records.
    """
    records = load_run_records(directory)
    if not records:
        logger.warning(f"No run records found in {directory}")
        return None
    return analyze_runs(records)
