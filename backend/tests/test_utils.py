import pytest
from draft_assistant.utils import (
    normalize_name,
    sanitize_error_message,
    parse_team_slot,
)


# ---------------------------------------------------------------------------
# normalize_name
# ---------------------------------------------------------------------------

class TestNormalizeName:
    def test_basic_name(self):
        assert normalize_name("Josh Allen") == "josh allen"

    def test_removes_accents(self):
        assert normalize_name("Tomás Pérez") == "tomas perez"

    def test_removes_jr_suffix(self):
        assert normalize_name("Marvin Harrison Jr.") == "marvin harrison"

    def test_removes_roman_suffixes(self):
        assert normalize_name("Michael Pittman III") == "michael pittman"

    def test_hyphen_becomes_space(self):
        assert normalize_name("Jaxon Smith-Njigba") == "jaxon smith njigba"

    def test_initials_drop_periods(self):
        assert normalize_name("A.J. Brown") == normalize_name("AJ Brown") == "aj brown"

    def test_apostrophe_removed(self):
        assert normalize_name("Ja'Marr Chase") == "jamarr chase"

    def test_collapses_inner_whitespace(self):
        assert normalize_name("Amon-Ra St. Brown") == "amon ra st brown"

    def test_empty_string(self):
        assert normalize_name("") == ""

    def test_none_input(self):
        assert normalize_name(None) == ""

    def test_strips_whitespace(self):
        assert normalize_name("  Josh Allen  ") == "josh allen"


# ---------------------------------------------------------------------------
# sanitize_error_message
# ---------------------------------------------------------------------------

class TestSanitizeErrorMessage:
    def test_hides_api_key(self):
        message = sanitize_error_message(Exception("Incorrect API key provided: sk-proj-abc123_XYZ"))
        assert "sk-" not in message
        assert "[API_KEY_HIDDEN]" in message

    def test_removes_file_paths_and_line_numbers(self):
        message = sanitize_error_message("boom in /srv/app/draft_agent.py at line 42")
        assert "/srv/app" not in message
        assert "[file]" in message
        assert "line [num]" in message

    def test_truncates_long_messages(self):
        message = sanitize_error_message("x" * 500)
        assert len(message) == 203
        assert message.endswith("...")

    def test_empty_exception_uses_class_name(self):
        assert sanitize_error_message(TimeoutError()) == "TimeoutError"


# ---------------------------------------------------------------------------
# parse_team_slot
# ---------------------------------------------------------------------------

class TestParseTeamSlot:
    @pytest.mark.parametrize("team,expected", [
        ("3", 3),
        ("Team 3", 3),
        ("team3", 3),
        ("#7", 7),
        ("Team #12", 12),
    ])
    def test_numeric_identifiers(self, team, expected):
        assert parse_team_slot(team, 12) == expected

    def test_out_of_range(self):
        assert parse_team_slot("Team 13", 12) is None
        assert parse_team_slot("0", 12) is None

    def test_named_team(self):
        assert parse_team_slot("The Gridiron Gang", 12) is None

    def test_empty(self):
        assert parse_team_slot("", 12) is None
        assert parse_team_slot(None, 12) is None
