"""Tests for the command line interface."""

import json

import pytest
from typer.testing import CliRunner

from session_quality.cli import app
from session_quality.workflow import WorkflowClient

runner = CliRunner()

ENV_VARS = (
    "MONGODB_URI",
    "MONGODB_DATABASE",
    "MONGODB_COLLECTION",
    "WORKFLOW_INVOKE_URL",
    "WORKFLOW_ID",
    "WORKFLOW_AUTH_USERNAME",
    "WORKFLOW_AUTH_PASSWORD",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sessions_dir(tmp_path):
    directory = tmp_path / "sessions"
    directory.mkdir()
    (directory / "sessions.json").write_text(
        json.dumps(
            [
                {"_id": "s1", "createdAt": "2025-03-20T09:00:00Z"},
                {"_id": "s2", "createdAt": "2025-03-20T18:30:00Z"},
                {"_id": "s3", "createdAt": "2025-03-22T09:00:00Z"},
            ]
        )
    )
    return directory


def _workflow_args() -> list[str]:
    return ["--workflow-invoke-url", "http://localhost:9/invoke", "--workflow-id", "wf"]


class TestScoreCommand:
    """Tests for the score command."""

    def test_invalid_date_exits_with_error(self, sessions_dir) -> None:
        result = runner.invoke(
            app,
            ["score", "20-03-2025", "--sessions-dir", str(sessions_dir)]
            + _workflow_args(),
        )

        assert result.exit_code == 1

    def test_reversed_range_exits_with_error(self, sessions_dir) -> None:
        result = runner.invoke(
            app,
            ["score", "2025-03-20", "2025-03-19", "--sessions-dir", str(sessions_dir)]
            + _workflow_args(),
        )

        assert result.exit_code == 1

    def test_missing_workflow_settings(self, sessions_dir) -> None:
        result = runner.invoke(
            app, ["score", "2025-03-20", "--sessions-dir", str(sessions_dir)]
        )

        assert result.exit_code == 1

    def test_missing_session_source(self) -> None:
        result = runner.invoke(app, ["score", "2025-03-20"] + _workflow_args())

        assert result.exit_code == 1

    def test_missing_sessions_dir(self, tmp_path) -> None:
        result = runner.invoke(
            app,
            ["score", "2025-03-20", "--sessions-dir", str(tmp_path / "nope")]
            + _workflow_args(),
        )

        assert result.exit_code == 1

    def test_scores_sessions_and_saves_report(
        self, sessions_dir, tmp_path, monkeypatch
    ) -> None:
        calls: list[str] = []

        async def fake_analyze(self, *, session_id):
            calls.append(session_id)
            if session_id == "s2":
                return {"is_chat_completed": "No"}
            return {"is_chat_completed": "Yes", "issue_status": {"status": "resolved"}}

        monkeypatch.setattr(WorkflowClient, "analyze", fake_analyze)
        output_dir = tmp_path / "out"

        result = runner.invoke(
            app,
            [
                "score",
                "2025-03-20",
                "--sessions-dir",
                str(sessions_dir),
                "--pacing-delay",
                "0",
                "--output-dir",
                str(output_dir),
                "--output-filename",
                "report.json",
            ]
            + _workflow_args(),
        )

        assert result.exit_code == 0, result.output
        assert calls == ["s1", "s2"]
        report = json.loads((output_dir / "report.json").read_text())
        assert report["total_sessions"] == 2
        assert report["processed"] == 2
        assert report["average_score"] == 17.5
        assert report["aggregate"]["chat_completion"] == {"yes": 50, "no": 50}
        assert (output_dir / "report.csv").exists()

    def test_no_csv(self, sessions_dir, tmp_path, monkeypatch) -> None:
        async def fake_analyze(self, *, session_id):
            return {}

        monkeypatch.setattr(WorkflowClient, "analyze", fake_analyze)
        output_dir = tmp_path / "out"

        result = runner.invoke(
            app,
            [
                "score",
                "2025-03-20",
                "--sessions-dir",
                str(sessions_dir),
                "--pacing-delay",
                "0",
                "--output-dir",
                str(output_dir),
                "--output-filename",
                "report.json",
                "--no-csv",
            ]
            + _workflow_args(),
        )

        assert result.exit_code == 0, result.output
        assert [path.name for path in output_dir.iterdir()] == ["report.json"]
