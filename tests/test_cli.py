# ABOUTME: Tests for the intent-matcher CLI using Typer's CliRunner.
# ABOUTME: Covers command structure, login, members, intents, matches, introductions and status.

import os
import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest import mock

import pytest
from sqlmodel import select
from typer.testing import CliRunner

from intent_matcher.cli import app
from intent_matcher.config import get_settings
from intent_matcher.database import DatabaseService
from intent_matcher.models import IntroductionRequest, Match, MatchStatus

VALID_KEY = "sk-test-0123456789abcdefghij"

MENTOR_ANALYSIS = {
    "intentType": "giving",
    "categories": [{"category": "mentorship", "confidence": 0.9}],
    "domains": ["DeFi", "Engineering"],
}
MENTEE_ANALYSIS = {
    "intentType": "receiving",
    "categories": [{"category": "mentorship", "confidence": 0.8}],
    "domains": ["DeFi"],
}


@pytest.fixture
def runner() -> CliRunner:
    """Create a CliRunner instance for testing Typer commands."""
    return CliRunner()


@pytest.fixture
def temp_settings_env() -> Generator[Path, None, None]:
    """Create a temporary environment with fresh settings."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "data.db"
        env_vars = {
            "INTENT_MATCHER_DB_PATH": str(db_path),
            "INTENT_MATCHER_OPENAI_API_KEY": "",
            "COLUMNS": "200",
        }
        with mock.patch.dict(os.environ, env_vars, clear=False):
            get_settings.cache_clear()
            yield db_path
        get_settings.cache_clear()


@pytest.fixture
def mock_key_manager() -> Generator[mock.MagicMock, None, None]:
    """Patch the CLI's ApiKeyManager so the real keyring is never touched."""
    with mock.patch("intent_matcher.cli.ApiKeyManager") as mock_km:
        mock_km.return_value.resolve_key.return_value = None
        mock_km.return_value.MIN_KEY_LENGTH = 20
        yield mock_km.return_value


@pytest.fixture
def mock_openai(mock_key_manager: mock.MagicMock) -> Generator[mock.MagicMock, None, None]:
    """Configure an API key and patch the OpenAI client used by the CLI."""
    mock_key_manager.resolve_key.return_value = VALID_KEY
    with mock.patch("intent_matcher.cli.OpenAIClient") as mock_client_class:
        client = mock_client_class.return_value
        client.complete_json.return_value = MENTOR_ANALYSIS
        client.complete_text.return_value = "Ada can help Grace get started in DeFi."
        yield client


@pytest.fixture
def env(temp_settings_env: Path, mock_key_manager: mock.MagicMock) -> Path:
    """Temporary settings plus a mocked key manager."""
    return temp_settings_env


def _add_members(runner: CliRunner) -> None:
    for email, first, last in (
        ("ada@example.com", "Ada", "Lovelace"),
        ("grace@example.com", "Grace", "Hopper"),
    ):
        result = runner.invoke(app, ["members", "add", email, "--first", first, "--last", last])
        assert result.exit_code == 0, result.output


def _submit_pair(runner: CliRunner, client: mock.MagicMock) -> None:
    _add_members(runner)
    client.complete_json.return_value = MENTOR_ANALYSIS
    result = runner.invoke(app, ["intent", "submit", "ada@example.com", "I mentor DeFi devs"])
    assert result.exit_code == 0, result.output
    client.complete_json.return_value = MENTEE_ANALYSIS
    result = runner.invoke(app, ["intent", "submit", "grace@example.com", "I need a mentor"])
    assert result.exit_code == 0, result.output


def _only_match(db_path: Path) -> Match:
    db_service = DatabaseService(db_path=db_path)
    with db_service.get_session() as session:
        return session.exec(select(Match)).one()


class TestCLIBasics:
    """Tests for basic CLI structure and functionality."""

    def test_app_has_help(self, runner: CliRunner, env: Path) -> None:
        """Test that the app has help text."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Usage" in result.output

    @pytest.mark.parametrize("group", ["members", "intent", "matches", "intro"])
    def test_command_groups_exist(self, runner: CliRunner, env: Path, group: str) -> None:
        """Test that each command group has help."""
        result = runner.invoke(app, [group, "--help"])
        assert result.exit_code == 0

    def test_no_command_shows_hint(self, runner: CliRunner, env: Path) -> None:
        """Test that running without a command points at --help."""
        result = runner.invoke(app, [])
        assert result.exit_code == 0
        assert "--help" in result.output


class TestLoginCommand:
    """Tests for the login command."""

    def test_login_rejects_bad_format(
        self, runner: CliRunner, env: Path, mock_key_manager: mock.MagicMock
    ) -> None:
        """Test that a malformed key is rejected before validation."""
        mock_key_manager.validate_key_format.return_value = False

        with mock.patch("intent_matcher.cli.Prompt.ask", return_value="short"):
            result = runner.invoke(app, ["login"])

        assert result.exit_code == 1
        assert "Invalid API key format" in result.output
        mock_key_manager.store_key.assert_not_called()

    def test_login_stores_valid_key(
        self, runner: CliRunner, env: Path, mock_key_manager: mock.MagicMock
    ) -> None:
        """Test that a key accepted by OpenAI is stored."""
        mock_key_manager.validate_key_format.return_value = True
        with (
            mock.patch("intent_matcher.cli.Prompt.ask", return_value=VALID_KEY),
            mock.patch("intent_matcher.cli.OpenAIClient") as mock_client_class,
        ):
            mock_client_class.return_value.validate_key.return_value = True
            result = runner.invoke(app, ["login"])

        assert result.exit_code == 0, result.output
        mock_key_manager.store_key.assert_called_once_with(VALID_KEY)

    def test_login_fails_when_key_rejected(
        self, runner: CliRunner, env: Path, mock_key_manager: mock.MagicMock
    ) -> None:
        """Test that a key OpenAI rejects is not stored."""
        mock_key_manager.validate_key_format.return_value = True
        with (
            mock.patch("intent_matcher.cli.Prompt.ask", return_value=VALID_KEY),
            mock.patch("intent_matcher.cli.OpenAIClient") as mock_client_class,
        ):
            mock_client_class.return_value.validate_key.return_value = False
            result = runner.invoke(app, ["login"])

        assert result.exit_code == 1
        assert "rejected" in result.output
        mock_key_manager.store_key.assert_not_called()

    def test_login_no_validate_skips_api_call(
        self, runner: CliRunner, env: Path, mock_key_manager: mock.MagicMock
    ) -> None:
        """Test that --no-validate stores the key without contacting OpenAI."""
        mock_key_manager.validate_key_format.return_value = True
        with (
            mock.patch("intent_matcher.cli.Prompt.ask", return_value=VALID_KEY),
            mock.patch("intent_matcher.cli.OpenAIClient") as mock_client_class,
        ):
            result = runner.invoke(app, ["login", "--no-validate"])

        assert result.exit_code == 0, result.output
        mock_client_class.assert_not_called()
        mock_key_manager.store_key.assert_called_once()


class TestLogoutCommand:
    """Tests for the logout command."""

    def test_logout_deletes_stored_key(
        self, runner: CliRunner, env: Path, mock_key_manager: mock.MagicMock
    ) -> None:
        """Test that a stored key is removed from the keyring."""
        mock_key_manager.get_key.return_value = VALID_KEY

        result = runner.invoke(app, ["logout"])

        assert result.exit_code == 0, result.output
        assert "removed" in result.output
        mock_key_manager.delete_key.assert_called_once()

    def test_logout_without_stored_key(
        self, runner: CliRunner, env: Path, mock_key_manager: mock.MagicMock
    ) -> None:
        """Test that logging out with nothing stored is a no-op."""
        mock_key_manager.get_key.return_value = None

        result = runner.invoke(app, ["logout"])

        assert result.exit_code == 0
        assert "No API key stored" in result.output
        mock_key_manager.delete_key.assert_not_called()


class TestMembersCommands:
    """Tests for the members commands."""

    def test_add_and_list(self, runner: CliRunner, env: Path) -> None:
        """Test that added members appear in the list."""
        _add_members(runner)

        result = runner.invoke(app, ["members", "list"])

        assert result.exit_code == 0
        assert "Ada Lovelace" in result.output
        assert "Grace Hopper" in result.output

    def test_duplicate_email_fails(self, runner: CliRunner, env: Path) -> None:
        """Test that adding the same email twice exits with an error."""
        _add_members(runner)
        result = runner.invoke(app, ["members", "add", "ada@example.com", "-f", "A", "-l", "B"])
        assert result.exit_code == 1

    def test_empty_list(self, runner: CliRunner, env: Path) -> None:
        """Test the message shown when nobody is registered."""
        result = runner.invoke(app, ["members", "list"])
        assert result.exit_code == 0
        assert "No members registered" in result.output


class TestIntentCommands:
    """Tests for the intent commands."""

    def test_submit_without_key_fails(self, runner: CliRunner, env: Path) -> None:
        """Test that submitting without an API key explains how to configure one."""
        _add_members(runner)

        result = runner.invoke(app, ["intent", "submit", "ada@example.com", "I mentor people"])

        assert result.exit_code == 1
        assert "No OpenAI API key configured" in result.output

    def test_submit_and_show(
        self, runner: CliRunner, env: Path, mock_openai: mock.MagicMock
    ) -> None:
        """Test that a submitted intent is analyzed and shown."""
        _add_members(runner)

        result = runner.invoke(app, ["intent", "submit", "ada@example.com", "I mentor DeFi devs"])
        assert result.exit_code == 0, result.output
        assert "Active Intent" in result.output

        result = runner.invoke(app, ["intent", "show", "ada@example.com"])
        assert result.exit_code == 0
        assert "I mentor DeFi devs" in result.output
        assert "giving" in result.output

    def test_submit_for_unknown_member(
        self, runner: CliRunner, env: Path, mock_openai: mock.MagicMock
    ) -> None:
        """Test that an unknown email is reported as an error."""
        result = runner.invoke(app, ["intent", "submit", "nobody@example.com", "Hello there"])
        assert result.exit_code == 1

    def test_submit_reports_analysis_failure(
        self, runner: CliRunner, env: Path, mock_openai: mock.MagicMock
    ) -> None:
        """Test that malformed analysis output exits with an error and saves nothing."""
        _add_members(runner)
        mock_openai.complete_json.return_value = {"intentType": "lurking"}

        result = runner.invoke(app, ["intent", "submit", "ada@example.com", "Something"])
        assert result.exit_code == 1

        result = runner.invoke(app, ["intent", "show", "ada@example.com"])
        assert "No active intent" in result.output

    def test_pause_resume_delete(
        self, runner: CliRunner, env: Path, mock_openai: mock.MagicMock
    ) -> None:
        """Test the intent lifecycle commands."""
        _add_members(runner)
        runner.invoke(app, ["intent", "submit", "ada@example.com", "I mentor DeFi devs"])

        result = runner.invoke(app, ["intent", "pause", "ada@example.com"])
        assert result.exit_code == 0
        assert "Paused Intent" in runner.invoke(app, ["intent", "show", "ada@example.com"]).output

        assert runner.invoke(app, ["intent", "resume", "ada@example.com"]).exit_code == 0
        assert runner.invoke(app, ["intent", "delete", "ada@example.com"]).exit_code == 0

        result = runner.invoke(app, ["intent", "pause", "ada@example.com"])
        assert result.exit_code == 1

    def test_visibility_and_consent(
        self, runner: CliRunner, env: Path, mock_openai: mock.MagicMock
    ) -> None:
        """Test changing visibility and consent."""
        _add_members(runner)
        runner.invoke(app, ["intent", "submit", "ada@example.com", "I mentor DeFi devs"])

        result = runner.invoke(app, ["intent", "visibility", "ada@example.com", "public"])
        assert result.exit_code == 0
        assert "public" in result.output

        result = runner.invoke(
            app, ["intent", "consent", "ada@example.com", "--no-match", "--contact"]
        )
        assert result.exit_code == 0
        assert "no match" in result.output

    def test_candidates(self, runner: CliRunner, env: Path, mock_openai: mock.MagicMock) -> None:
        """Test that complementary members are listed as candidates."""
        _submit_pair(runner, mock_openai)

        result = runner.invoke(app, ["intent", "candidates", "grace@example.com"])

        assert result.exit_code == 0
        assert "Ada Lovelace" in result.output

    def test_submit_without_key_stores_unanalyzed(
        self, runner: CliRunner, env: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that the store_unanalyzed policy keeps the text when no key is configured."""
        monkeypatch.setenv("INTENT_MATCHER_ANALYSIS_FAILURE_POLICY", "store_unanalyzed")
        get_settings.cache_clear()
        _add_members(runner)

        result = runner.invoke(app, ["intent", "submit", "ada@example.com", "I mentor people"])

        assert result.exit_code == 0, result.output
        assert "cannot be matched" in result.output
        result = runner.invoke(app, ["intent", "show", "ada@example.com"])
        assert "I mentor people" in result.output

    def test_candidates_rejects_non_positive_limit(
        self, runner: CliRunner, env: Path, mock_openai: mock.MagicMock
    ) -> None:
        """Test that a zero limit is reported as an error instead of crashing."""
        _submit_pair(runner, mock_openai)

        result = runner.invoke(app, ["intent", "candidates", "grace@example.com", "--limit", "0"])

        assert result.exit_code == 1
        assert "limit must be at least 1" in result.output


class TestMatchesCommands:
    """Tests for the matches commands."""

    def test_generate_and_list(
        self, runner: CliRunner, env: Path, mock_openai: mock.MagicMock
    ) -> None:
        """Test that generating creates a match both members can list."""
        _submit_pair(runner, mock_openai)

        result = runner.invoke(app, ["matches", "generate", "ada@example.com"])
        assert result.exit_code == 0, result.output
        assert "1 new match" in result.output

        result = runner.invoke(app, ["matches", "list", "grace@example.com"])
        assert result.exit_code == 0
        assert "Ada Lovelace" in result.output
        assert "72" in result.output

    def test_generate_without_intent(
        self, runner: CliRunner, env: Path, mock_openai: mock.MagicMock
    ) -> None:
        """Test that a member without an intent cannot generate matches."""
        _add_members(runner)
        result = runner.invoke(app, ["matches", "generate", "ada@example.com"])
        assert result.exit_code == 1

    def test_view_and_respond(
        self, runner: CliRunner, env: Path, mock_openai: mock.MagicMock
    ) -> None:
        """Test viewing a match and accepting it."""
        _submit_pair(runner, mock_openai)
        runner.invoke(app, ["matches", "generate", "ada@example.com"])
        match = _only_match(env)

        result = runner.invoke(app, ["matches", "view", "grace@example.com", str(match.id)])
        assert result.exit_code == 0, result.output
        assert "Ada can help Grace get started in DeFi." in result.output

        result = runner.invoke(
            app, ["matches", "respond", "grace@example.com", str(match.id), "accept"]
        )
        assert result.exit_code == 0, result.output
        assert "accepted" in result.output

        updated = _only_match(env)
        assert updated.status == MatchStatus.ACCEPTED
        assert updated.viewed_by_b is True

        result = runner.invoke(
            app, ["matches", "respond", "ada@example.com", str(match.id), "decline"]
        )
        assert result.exit_code == 1


class TestIntroCommands:
    """Tests for the intro commands."""

    def test_send_list_and_respond(self, runner: CliRunner, env: Path) -> None:
        """Test the full introduction request flow."""
        _add_members(runner)

        result = runner.invoke(
            app,
            [
                "intro",
                "send",
                "ada@example.com",
                "grace@example.com",
                "-m",
                "Would love to talk about compilers.",
                "-c",
                "learning",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "sent to Grace Hopper" in result.output

        result = runner.invoke(app, ["intro", "received", "grace@example.com"])
        assert result.exit_code == 0
        assert "Ada Lovelace" in result.output

        with DatabaseService(db_path=env).get_session() as session:
            request = session.exec(select(IntroductionRequest)).one()

        result = runner.invoke(app, ["intro", "view", "grace@example.com", str(request.id)])
        assert result.exit_code == 0
        assert "Would love to talk about compilers." in result.output

        result = runner.invoke(
            app, ["intro", "respond", "grace@example.com", str(request.id), "decline"]
        )
        assert result.exit_code == 0
        assert "declined" in result.output

        result = runner.invoke(app, ["intro", "cancel", "ada@example.com", str(request.id)])
        assert result.exit_code == 1

    def test_send_to_self_fails(self, runner: CliRunner, env: Path) -> None:
        """Test that members cannot introduce themselves to themselves."""
        _add_members(runner)
        result = runner.invoke(
            app,
            ["intro", "send", "ada@example.com", "ada@example.com", "-m", "Hello me, long note"],
        )
        assert result.exit_code == 1

    def test_empty_sent_list(self, runner: CliRunner, env: Path) -> None:
        """Test the message shown when nothing has been sent."""
        _add_members(runner)
        result = runner.invoke(app, ["intro", "sent", "ada@example.com"])
        assert result.exit_code == 0
        assert "No introduction requests sent" in result.output


class TestStatusAndSweep:
    """Tests for the status and sweep commands."""

    def test_status_without_key(self, runner: CliRunner, env: Path) -> None:
        """Test that status shows statistics and the missing key."""
        result = runner.invoke(app, ["status"])

        assert result.exit_code == 0
        assert "Database Statistics" in result.output
        assert "No OpenAI API key configured" in result.output

    def test_status_with_key(
        self, runner: CliRunner, env: Path, mock_key_manager: mock.MagicMock
    ) -> None:
        """Test that status reports a configured key."""
        mock_key_manager.resolve_key.return_value = VALID_KEY
        result = runner.invoke(app, ["status"])
        assert "OpenAI API key configured." in result.output

    def test_sweep(self, runner: CliRunner, env: Path) -> None:
        """Test that sweep reports expiry counts."""
        result = runner.invoke(app, ["sweep"])

        assert result.exit_code == 0
        assert "Matches expired: 0" in result.output
