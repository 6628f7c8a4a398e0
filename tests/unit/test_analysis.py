"""Unit tests for cross-run cookie analysis."""

import json

import pytest

from consent_e2e.cookies.analysis import (
    RunRecord,
    analyze_directory,
    analyze_runs,
    format_analysis,
    load_run_records
)


def _record(project, change, updated, cookies):
    return {
        'project': project,
        'cookieCountBefore': 3,
        'cookieCountAfter': 3 + change,
        'customizationResults': {
            'cookieCountChange': change,
            'consentCookieUpdated': updated,
        },
        'cookiesAfter': [{'name': name, 'domain': domain} for name, domain in cookies],
    }


@pytest.fixture
def export_dir(tmp_path):
    """Directory of exported run records in the legacy camelCase format."""
    records = [
        _record('chromium', 4, True, [('cookieyes-consent', '.www.x.com'), ('_clck', '.x.com'), ('_uetsid', '.x.com')]),
        _record('chromium', 7, True, [('_clck', '.x.com'), ('cookieyes-consent', '.www.x.com')]),
        _record('webkit', 1, True, [('cookieyes-consent', '.www.x.com')]),
        _record('chromium', 2, False, [('cookieyes-consent', '.www.x.com'), ('_clck', '.x.com')]),
    ]
    for index, record in enumerate(records):
        (tmp_path / f"run-{index}.json").write_text(json.dumps(record))
    (tmp_path / "notes.txt").write_text("ignored")
    return tmp_path


class TestRunRecord:
    """Tests for RunRecord parsing."""

    def test_camel_case_record(self):
        record = RunRecord.model_validate(_record('firefox', 5, True, [('a', 'b')]))

        assert record.cookie_count_after == 8
        assert record.customization_results.cookie_count_change == 5
        assert record.cookies_after[0].key == "a@b"

    def test_snake_case_record(self):
        record = RunRecord.model_validate({
            'project': 'firefox',
            'customization_results': {'cookie_count_change': -1, 'consent_cookie_updated': True},
            'cookies_after': [{'name': 'a', 'domain': 'b'}],
        })

        assert record.customization_results.cookie_count_change == -1
        assert record.customization_results.consent_cookie_updated is True


class TestAnalyzeRuns:
    """Tests for analyze_runs."""

    def test_per_project_aggregation(self, export_dir):
        results = analyze_runs(load_run_records(export_dir))

        assert list(results) == ['chromium', 'webkit']

        chromium = results['chromium']
        assert chromium.runs == 3
        assert chromium.always_updates_consent is False
        assert chromium.min_change == 2
        assert chromium.max_change == 7
        assert chromium.avg_change == 4
        assert chromium.consistent_cookies_after == ['cookieyes-consent@.www.x.com', '_clck@.x.com']

        webkit = results['webkit']
        assert webkit.runs == 1
        assert webkit.always_updates_consent is True

    def test_average_rounds_half_up(self):
        records = [
            RunRecord.model_validate(_record('firefox', change, True, []))
            for change in (1, 2)
        ]

        assert analyze_runs(records)['firefox'].avg_change == 2

    def test_negative_average_rounding(self):
        records = [
            RunRecord.model_validate(_record('firefox', change, True, []))
            for change in (-2, -3)
        ]

        assert analyze_runs(records)['firefox'].avg_change == -2

    def test_duplicate_cookie_within_run_counts_once(self):
        records = [
            RunRecord.model_validate(_record('firefox', 0, True, [('a', 'b'), ('a', 'b')])),
            RunRecord.model_validate(_record('firefox', 0, True, [('c', 'd')])),
        ]

        assert analyze_runs(records)['firefox'].consistent_cookies_after == []


class TestAnalysisIO:
    """Tests for loading and formatting."""

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_run_records(tmp_path / "missing")

    def test_empty_directory(self, tmp_path):
        assert analyze_directory(tmp_path) is None

    def test_format_analysis(self, export_dir):
        report = format_analysis(analyze_directory(export_dir))

        assert report.startswith("=== COOKIE ANALYSIS RESULTS ===")
        assert "CHROMIUM" in report
        assert "Runs analyzed: 3" in report
        assert "Always updates consent: false" in report
        assert "Cookie count change: 2-7 (avg: 4)" in report
        assert "- _clck@.x.com" in report
