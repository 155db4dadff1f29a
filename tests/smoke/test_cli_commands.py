"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output
against a throwaway SQLite file.
"""
import pytest
from sqlalchemy.orm import sessionmaker
from typer.testing import CliRunner

import cli
from lesson_srs import database

runner = CliRunner()


@pytest.fixture(autouse=True)
def temp_database(tmp_path, monkeypatch):
    engine = database.make_engine(f"sqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setattr(database, "engine", engine)
    monkeypatch.setattr(database, "SessionLocal", sessionmaker(bind=engine, autoflush=False, expire_on_commit=False))
    yield
    engine.dispose()


def invoke(*args):
    result = runner.invoke(cli.app, list(args))
    return result


@pytest.fixture
def seeded_lesson():
    assert invoke("init").exit_code == 0
    assert invoke("add-user", "--name", "Ada", "--email", "ada@example.com").exit_code == 0
    assert invoke("add-course", "--user-id", "1", "--title", "Networking", "--topic", "OSI").exit_code == 0
    assert invoke("add-lesson", "--course-id", "1", "--title", "Layer 2").exit_code == 0


class TestCLIHelp:

    def test_help_lists_commands(self):
        result = invoke("--help")
        assert result.exit_code == 0
        for command in ("record-attempt", "list-reviews", "stats", "show-review"):
            assert command in result.output


class TestReviewFlow:

    def test_record_then_list_and_stats(self, seeded_lesson):
        result = invoke("record-attempt", "--user-id", "1", "--lesson-id", "1", "--score", "90", "--today", "2025-03-10")
        assert result.exit_code == 0
        assert "2025-03-11" in result.output
        assert "New material" in result.output

        result = invoke("list-reviews", "1", "--filter", "due", "--today", "2025-03-11")
        assert result.exit_code == 0
        assert "Layer 2" in result.output

        result = invoke("list-reviews", "1", "--filter", "overdue", "--today", "2025-03-11")
        assert result.exit_code == 0
        assert "No overdue reviews" in result.output

        result = invoke("stats", "1", "--today", "2025-03-11")
        assert result.exit_code == 0
        assert "Lessons tracked: 1" in result.output
        assert "Streak: 1 days" in result.output

    def test_show_review_reports_overdue(self, seeded_lesson):
        invoke("record-attempt", "--user-id", "1", "--lesson-id", "1", "--score", "90", "--today", "2025-03-10")
        result = invoke("show-review", "1", "1", "--today", "2025-03-15")
        assert result.exit_code == 0
        assert "Overdue by 4 days" in result.output

    def test_invalid_score_fails_cleanly(self, seeded_lesson):
        result = invoke("record-attempt", "--user-id", "1", "--lesson-id", "1", "--score", "150")
        assert result.exit_code == 1
        assert "Invalid attempt" in result.output

    def test_unknown_lesson_fails_cleanly(self, seeded_lesson):
        result = invoke("record-attempt", "--user-id", "1", "--lesson-id", "42", "--score", "80")
        assert result.exit_code == 1
        assert "Lesson 42 not found" in result.output

    def test_duplicate_email_fails_cleanly(self, seeded_lesson):
        result = invoke("add-user", "--name", "Ada Again", "--email", "ada@example.com")
        assert result.exit_code == 1
        assert "Email already registered" in result.output

    def test_reset_db(self, seeded_lesson):
        result = invoke("reset-db", "--yes")
        assert result.exit_code == 0
        assert "reset complete" in result.output
