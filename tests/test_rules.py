"""Tests for RuleSet editing and rule config loading."""

import json

import pytest

from testimony_analyzer.models import Rule
from testimony_analyzer.rules import RULES_ENV_VAR, RuleSet, load_rule_set, save_rule_set


class TestRuleSet:

    def test_add_assigns_next_id(self, rule_set):
        rule = rule_set.add("Travel", ["visa", "passport"])

        assert rule.id == 4
        assert rule.keywords == ("visa", "passport")
        assert rule_set.names()[-1] == "Travel"

    def test_add_first_rule_gets_id_one(self):
        rules = RuleSet()
        assert rules.add("Only", ["x"]).id == 1

    def test_add_from_text_splits_and_trims(self, rule_set):
        rule = rule_set.add_from_text("  Travel ", " visa,passport , ,embassy")

        assert rule.name == "Travel"
        assert rule.keywords == ("visa", "passport", "embassy")

    @pytest.mark.parametrize(
        "name,keywords_text",
        [("", "visa"), ("   ", "visa"), ("Travel", ""), ("Travel", " , ,")],
    )
    def test_invalid_input_is_ignored(self, rule_set, name, keywords_text):
        assert rule_set.add_from_text(name, keywords_text) is None
        assert len(rule_set) == 3

    def test_remove(self, rule_set):
        rule_set.remove(2)

        assert rule_set.names() == ["Healing", "Finance"]
        assert rule_set.get(2) is None

    def test_remove_unknown_id_is_noop(self, rule_set):
        rule_set.remove(99)
        assert len(rule_set) == 3

    def test_ids_stay_unique_after_removal(self, rule_set):
        rule_set.remove(3)
        rule = rule_set.add("New", ["x"])

        assert rule.id == 4
        assert [r.id for r in rule_set] == [1, 2, 4]

    def test_removed_id_is_never_reused(self):
        rules = RuleSet()
        rules.add("A", ["a"])
        b = rules.add("B", ["b"])
        rules.remove(b.id)
        c = rules.add("C", ["c"])

        assert c.id != b.id
        assert [r.id for r in rules] == [1, 3]

    def test_next_id_follows_highest_loaded_id(self):
        rules = RuleSet([Rule(id=7, name="A", keywords=("a",))])

        assert rules.add("B", ["b"]).id == 8

    def test_duplicate_id_rejected(self):
        with pytest.raises(ValueError):
            RuleSet([Rule(id=1, name="A", keywords=("a",)), Rule(id=1, name="B", keywords=("b",))])

    def test_snapshot_tracks_edits(self, rule_set):
        before = rule_set.snapshot()
        rule_set.add("New", ["x"])

        assert rule_set.snapshot() != before
        assert hash(rule_set.snapshot())


class TestRuleConfig:

    def test_packaged_defaults(self, monkeypatch):
        monkeypatch.delenv(RULES_ENV_VAR, raising=False)
        rules = load_rule_set()

        assert rules.names() == [
            "Salvation",
            "Healings/Fruit of the Womb",
            "Financial Miracles",
            "Academic and Career Upgrade",
            "Protection and Deliverance",
        ]
        assert "cancer" in rules.get(2).keywords

    def test_mapping_form(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"Healing": ["heal"], "Career": ["job", "work"]}))

        rules = load_rule_set(path)

        assert [(r.id, r.name) for r in rules] == [(1, "Healing"), (2, "Career")]
        assert rules.get(2).keywords == ("job", "work")

    def test_env_var_override(self, tmp_path, monkeypatch):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps([{"id": 7, "name": "Only", "keywords": ["x"]}]))
        monkeypatch.setenv(RULES_ENV_VAR, str(path))

        rules = load_rule_set()

        assert rules.names() == ["Only"]
        assert rules.get(7).color == "bg-slate-500"

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text("{not json")

        with pytest.raises(ValueError):
            load_rule_set(path)

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps("just a string"))

        with pytest.raises(ValueError):
            load_rule_set(path)

    def test_save_and_reload(self, rule_set, tmp_path):
        path = tmp_path / "saved.json"
        save_rule_set(rule_set, path)

        assert load_rule_set(path).snapshot() == rule_set.snapshot()
