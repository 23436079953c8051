"""Tests for directory-scale code-quality analysis."""

import json
from pathlib import Path

import pytest

from editwise.analyzer import (
    AnalysisStatus,
    analyze_codebase,
    analyze_file,
    apply_auto_fixes,
    collect_fixable_issues,
    neutral_result,
    summarize,
)
from editwise.errors import OracleFailureError, TargetNotFoundError
from editwise.hitl import auto_decline
from editwise.models import AnalysisResult, CodeIssue, IssueSeverity, IssueType
from editwise.parsing import analysis_fallback
from editwise.session import session_log_path
from helpers.oracles import StubOracle, analysis_answer


def issue(type_: str, line: int = 1) -> dict:
    return {"line": line, "column": 0, "severity": "warning", "message": f"{type_} issue", "type": type_}


@pytest.fixture
def three_files(temp_dir: Path) -> Path:
    for name in ("a.py", "b.py", "c.py"):
        (temp_dir / name).write_text(f"# {name}\n")
    return temp_dir


class TestAnalyzeFile:
    @pytest.mark.asyncio
    async def test_ok(self, temp_dir):
        path = temp_dir / "x.py"
        path.write_text("x = 1\n")
        oracle = StubOracle(analysis_answer(issues=[issue("bug")]))
        result = await analyze_file(path, False, oracle)
        assert result.file == str(path)
        assert len(result.issues) == 1
        assert "x = 1" in oracle.requests[0].content

    @pytest.mark.asyncio
    async def test_unreadable_file_gets_neutral_result(self, temp_dir):
        path = temp_dir / "bad.py"
        path.write_bytes(b"\xff\xfe\x00bad")
        result = await analyze_file(path, False, StubOracle(analysis_answer()))
        assert result == neutral_result(str(path))
        assert result.metrics.complexity == 0
        assert result.metrics.maintainability_index == 50

    @pytest.mark.asyncio
    async def test_unparseable_answer_gets_basic_review(self, temp_dir):
        path = temp_dir / "x.py"
        path.write_text("x = 1\n")
        result = await analyze_file(path, False, StubOracle("not json"))
        assert result == analysis_fallback(str(path))


class TestAnalyzeCodebase:
    @pytest.mark.asyncio
    async def test_one_failing_file_does_not_stop_the_batch(self, three_files):
        def answer(request):
            if "# b.py" in request.content:
                return OracleFailureError("AI did not return any analysis content")
            return analysis_answer(issues=[issue("style")])

        report = await analyze_codebase(three_files, StubOracle(answer))

        assert [Path(r.file).name for r in report.results] == ["a.py", "b.py", "c.py"]
        statuses = [a.status for a in report.analyses]
        assert statuses == [AnalysisStatus.OK, AnalysisStatus.FAILED, AnalysisStatus.OK]
        assert list(report.failures) == [str(three_files / "b.py")]

        failed = report.results[1]
        assert failed.issues == []
        assert failed.metrics.complexity == 0

        summary = report.summary
        assert summary.files_analyzed == 3
        assert summary.total_issues == 2
        assert summary.average_complexity == pytest.approx((4 + 0 + 4) / 3)
        assert summary.average_maintainability == pytest.approx((80 + 50 + 80) / 3)

    @pytest.mark.asyncio
    async def test_deeply_nested_answer_degrades_one_file(self, three_files):
        def answer(request):
            if "# a.py" in request.content:
                return "[" * 100000
            return analysis_answer()

        report = await analyze_codebase(three_files, StubOracle(answer))

        statuses = [a.status for a in report.analyses]
        assert statuses == [AnalysisStatus.DEGRADED, AnalysisStatus.OK, AnalysisStatus.OK]
        assert report.results[0] == analysis_fallback(str(three_files / "a.py"))
        assert report.failures == {}

    @pytest.mark.asyncio
    async def test_missing_target_raises(self, temp_dir):
        with pytest.raises(TargetNotFoundError):
            await analyze_codebase(temp_dir / "missing", StubOracle(analysis_answer()))

    @pytest.mark.asyncio
    async def test_full_analysis_reaches_prompt(self, three_files):
        oracle = StubOracle(analysis_answer())
        await analyze_codebase(three_files / "a.py", oracle, full_analysis=True)
        assert "Testing recommendations" in oracle.requests[0].content

    @pytest.mark.asyncio
    async def test_progress_callback_and_session(self, three_files, session_settings):
        seen = []
        await analyze_codebase(
            three_files,
            StubOracle(analysis_answer()),
            settings=session_settings,
            on_file=seen.append,
        )
        assert [p.name for p in seen] == ["a.py", "b.py", "c.py"]
        record = json.loads(session_log_path(three_files).read_text().splitlines()[-1])
        assert record["kind"] == "analysis"
        assert record["details"]["files"] == 3


class TestSummaryAndFixes:
    def test_empty_summary(self):
        summary = summarize([])
        assert summary.files_analyzed == 0
        assert summary.average_complexity == 0.0
        assert summary.average_maintainability == 0.0

    def _result(self, name, *types):
        return AnalysisResult(
            file=name,
            issues=[
                CodeIssue(line=1, severity=IssueSeverity.INFO, message=t, type=IssueType(t))
                for t in types
            ],
            suggestions=[],
            metrics=neutral_result(name).metrics,
        )

    def test_collect_fixable_issues(self):
        results = [
            self._result("a.py", "style", "bug"),
            self._result("b.py", "security"),
            self._result("c.py", "maintainability"),
        ]
        fixable = collect_fixable_issues(results)
        assert list(fixable) == ["a.py", "c.py"]
        assert [i.message for i in fixable["a.py"]] == ["style"]

    def test_auto_fix_asks_once(self):
        prompts = []
        results = [self._result("a.py", "style"), self._result("b.py", "maintainability")]
        outcome = apply_auto_fixes(results, lambda p: prompts.append(p) or True)
        assert len(prompts) == 1
        assert outcome.confirmed
        assert outcome.fixed_count == 2

    def test_auto_fix_without_fixable_issues_does_not_ask(self):
        prompts = []
        outcome = apply_auto_fixes(
            [self._result("a.py", "bug")], lambda p: prompts.append(p) or True
        )
        assert prompts == []
        assert not outcome.confirmed

    def test_auto_fix_declined(self):
        outcome = apply_auto_fixes([self._result("a.py", "style")], auto_decline)
        assert not outcome.confirmed
        assert outcome.fixed == {}
