"""Tests for the keybinding tree."""

from __future__ import annotations

import logging

import pytest

from vimongo.core.keymap import (
    COMPONENT_PATHS,
    DEFAULT_BINDINGS,
    Key,
    KeyBindings,
    normalize_key,
)

F5_OVERRIDE = {"root": {"content": {"refresh": {"keys": ["F5"]}}}}


class TestNormalizeKey:
    def test_lowercases_and_joins(self):
        assert normalize_key("Ctrl+R") == "ctrl+r"
        assert normalize_key("Shift + Tab") == "shift+tab"

    def test_aliases(self):
        assert normalize_key("Esc") == "escape"
        assert normalize_key("Return") == "enter"
        assert normalize_key("PgDn") == "pagedown"


class TestKey:
    def test_matches_key_name(self):
        key = Key(keys=("Ctrl+R",), description="Refresh")
        assert key.matches("ctrl+r")
        assert not key.matches("r", "r")

    def test_matches_rune_by_character(self):
        key = Key(runes=("G",), description="Bottom")
        assert key.matches("G", "G")
        assert not key.matches("g", "g")

    def test_non_printable_character_is_not_a_rune(self):
        key = Key(runes=("\t",), description="tab rune")
        assert not key.matches(None, "\t")

    def test_display(self):
        key = Key(keys=("Enter",), runes=("p",), description="Peek")
        assert key.display() == "Enter, p"

    def test_merged_only_replaces_non_empty_lists(self):
        key = Key(keys=("Ctrl+R",), runes=("r",), description="Refresh")

        merged = key.merged({"keys": ["F5"], "runes": []})

        assert merged.keys == ("F5",)
        assert merged.runes == ("r",)
        assert merged.description == "Refresh"

    def test_merged_ignores_wrong_types(self):
        key = Key(keys=("Ctrl+R",), description="Refresh")
        assert key.merged({"keys": "F5"}) == key
        assert key.merged({"keys": [1, ""]}) == key


class TestMerge:
    def test_f5_override_replaces_refresh_key(self):
        keybindings = KeyBindings.default()

        keybindings.merge(F5_OVERRIDE)

        assert keybindings.match("Content", "f5") == "refresh"
        assert keybindings.match("Content", "ctrl+r") is None
        # Other groups keep their defaults
        assert keybindings.match("Peeker", "ctrl+r") == "refresh"

    def test_empty_override_is_identity(self):
        keybindings = KeyBindings.default()
        keybindings.merge({})
        keybindings.merge(None)
        assert keybindings == KeyBindings.default()

    def test_merge_is_idempotent(self):
        once = KeyBindings.default()
        once.merge(F5_OVERRIDE)
        twice = KeyBindings.default()
        twice.merge(F5_OVERRIDE)
        twice.merge(F5_OVERRIDE)
        assert once == twice

    def test_unknown_paths_are_ignored(self):
        keybindings = KeyBindings.default()
        keybindings.merge({"root": {"nope": {"refresh": {"keys": ["F5"]}}}, "other": 1})
        assert keybindings == KeyBindings.default()

    def test_merge_keeps_description(self):
        keybindings = KeyBindings.default()
        keybindings.merge(F5_OVERRIDE)
        assert keybindings.get("root.content", "refresh").description == "Refresh"

    def test_merge_logs_conflicts(self, caplog):
        keybindings = KeyBindings.default()
        with caplog.at_level(logging.WARNING, logger="vimongo"):
            keybindings.merge({"root": {"content": {"refresh": {"keys": ["Ctrl+N"]}}}})
        assert "ctrl+n" in caplog.text


class TestMatch:
    def test_last_declared_action_wins(self):
        keybindings = KeyBindings(
            (
                ("root.content", "first", Key(keys=("F5",), description="first")),
                ("root.content", "second", Key(keys=("F5",), description="second")),
            )
        )
        assert keybindings.match("Content", "f5") == "second"

    def test_only_own_group_is_searched(self):
        keybindings = KeyBindings.default()
        # quit is a global binding, not a content one
        assert keybindings.match("Content", "ctrl+q") is None

    def test_unknown_component(self):
        assert KeyBindings.default().match("Nope", "ctrl+q") is None

    def test_query_and_sort_bars_share_a_group(self):
        keybindings = KeyBindings.default()
        assert keybindings.match("QueryBar", "ctrl+y") == "showHistory"
        assert keybindings.match("SortBar", "ctrl+y") == "showHistory"

    def test_contains(self):
        keybindings = KeyBindings.default()
        binding = keybindings.get("peeker", "close")
        assert keybindings.contains(binding, "escape")
        assert keybindings.contains(binding, "q", "q")
        assert not keybindings.contains(binding, "enter")


class TestGetActionsForComponent:
    def test_preserves_declaration_order(self):
        groups = KeyBindings.default().get_actions_for_component("Peeker")
        actions = [action for action, _ in groups[0].bindings]
        expected = [action for path, action, _ in DEFAULT_BINDINGS if path == "peeker"]
        assert actions == expected

    def test_nested_groups_follow_their_parent(self):
        groups = KeyBindings.default().get_actions_for_component("Content")
        assert [group.component for group in groups] == ["content", "inputBar"]

    def test_component_with_only_nested_groups(self):
        groups = KeyBindings.default().get_actions_for_component("Connector")
        assert [group.component for group in groups] == ["connectorForm", "connectorList"]

    def test_empty_component_raises(self):
        with pytest.raises(KeyError):
            KeyBindings.default().get_actions_for_component("")

    def test_unknown_component_raises(self):
        with pytest.raises(KeyError):
            KeyBindings.default().get_actions_for_component("DocModifier")

    def test_every_component_has_bindings(self):
        keybindings = KeyBindings.default()
        for component_id in COMPONENT_PATHS:
            assert keybindings.get_actions_for_component(component_id)


class TestConflicts:
    def test_defaults_have_no_conflicts(self):
        assert KeyBindings.default().find_conflicts() == []

    def test_reports_conflicting_actions(self):
        keybindings = KeyBindings(
            (
                ("help", "a", Key(runes=("x",), description="a")),
                ("help", "b", Key(runes=("x",), description="b")),
            )
        )
        assert keybindings.find_conflicts() == [("help", "rune:x", ["a", "b"])]


def test_to_dict_round_trips_through_merge():
    keybindings = KeyBindings.default()
    keybindings.merge(F5_OVERRIDE)

    fresh = KeyBindings.default()
    fresh.merge(keybindings.to_dict())

    assert fresh == keybindings
