"""
Unit and property tests for field naming conventions.

Verifies:
- Built-in mapper outputs for known names
- No leading underscore for an uppercase first character
- Resolver precedence: tag > mapper > declared name
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from iniconf_kernel.naming import (
    all_caps_underscore,
    resolve_field_name,
    title_underscore,
)

identifiers = st.from_regex(r"[A-Za-z][A-Za-z0-9]{0,20}", fullmatch=True)


class TestAllCapsUnderscore:
    """Tests for all_caps_underscore."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("age", "AGE"),
            ("Age", "AGE"),
            ("NodePath", "NODE_PATH"),
            ("nodePath", "NODE_PATH"),
            ("HTTPPort", "H_T_T_P_PORT"),
            ("Port2", "PORT2"),
            ("", ""),
        ],
    )
    def test_known_names(self, raw, expected):
        assert all_caps_underscore(raw) == expected


class TestTitleUnderscore:
    """Tests for title_underscore."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("NodePath", "node_path"),
            ("Database", "database"),
            ("age", "age"),
            ("MaxIdleConns", "max_idle_conns"),
            ("already_snake", "already_snake"),
            ("", ""),
        ],
    )
    def test_known_names(self, raw, expected):
        assert title_underscore(raw) == expected

    def test_non_ascii_uppercase_is_not_a_boundary(self):
        assert title_underscore("aÉb") == "aÉb"


@pytest.mark.property
class TestNamingProperties:
    """Properties that hold for any identifier."""

    @given(identifiers)
    def test_no_leading_underscore(self, raw):
        assert not all_caps_underscore(raw).startswith("_")
        assert not title_underscore(raw).startswith("_")

    @given(identifiers)
    def test_all_caps_is_upper_of_title(self, raw):
        assert all_caps_underscore(raw) == title_underscore(raw).upper()

    @given(identifiers)
    def test_one_underscore_per_inner_capital(self, raw):
        inner_capitals = sum(1 for ch in raw[1:] if "A" <= ch <= "Z")
        assert title_underscore(raw).count("_") == inner_capitals

    @given(identifiers)
    def test_title_has_no_ascii_capitals(self, raw):
        assert not any("A" <= ch <= "Z" for ch in title_underscore(raw))


class TestResolveFieldName:
    """Resolver precedence."""

    def test_tag_wins_over_mapper(self):
        assert resolve_field_name("Age", "years", all_caps_underscore) == "years"

    def test_tag_wins_over_declared_name(self):
        assert resolve_field_name("Age", "years") == "years"

    def test_mapper_applied_without_tag(self):
        assert resolve_field_name("NodePath", "", title_underscore) == "node_path"

    def test_none_tag_treated_as_absent(self):
        assert resolve_field_name("NodePath", None, all_caps_underscore) == "NODE_PATH"

    def test_declared_name_fallback(self):
        assert resolve_field_name("NodePath", "", None) == "NodePath"

    def test_custom_mapper(self):
        assert resolve_field_name("port", "", lambda raw: f"app.{raw}") == "app.port"
