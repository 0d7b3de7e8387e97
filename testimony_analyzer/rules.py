# testimony_analyzer/rules.py

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Iterable, Iterator

from .logging_setup import get_logger
from .models import DEFAULT_RULE_COLOR, Rule

logger = get_logger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent / "config" / "default_rules.json"
RULES_ENV_VAR = "TESTIMONY_ANALYZER_RULES"


class RuleSet:
    """
    Ordered, id-keyed list of categorization rules.

    Order matters: when two rules score the same, the earlier one wins.
    Invalid user input (blank name, no keywords, unknown id) is ignored
    rather than reported.
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: list[Rule] = []
        # only ever grows; removed ids are never handed out again
        self._next_id = 1
        for rule in rules:
            self._insert(rule)

    def _insert(self, rule: Rule) -> None:
        if any(r.id == rule.id for r in self._rules):
            raise ValueError(f"Duplicate rule id: {rule.id}")
        self._rules.append(rule)
        self._next_id = max(self._next_id, rule.id + 1)

    def __iter__(self) -> Iterator[Rule]:
        return iter(list(self._rules))

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleSet({self.names()!r})"

    def names(self) -> list[str]:
        return [r.name for r in self._rules]

    def get(self, rule_id: int) -> Rule | None:
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def next_id(self) -> int:
        return self._next_id

    def add(
        self,
        name: str,
        keywords: Iterable[str],
        color: str = DEFAULT_RULE_COLOR,
    ) -> Rule | None:
        name = (name or "").strip()
        cleaned = tuple(k.strip() for k in keywords if k and k.strip())
        if not name or not cleaned:
            return None

        rule = Rule(id=self.next_id(), name=name, keywords=cleaned, color=color)
        self._insert(rule)
        logger.info("Added rule %r with %d keywords", name, len(cleaned))
        return rule

    def add_from_text(self, name: str, keywords_text: str) -> Rule | None:
        """Add a rule from comma-separated keyword text, e.g. 'heal, doctor'."""
        return self.add(name, (keywords_text or "").split(","))

    def remove(self, rule_id: int) -> None:
        before = len(self._rules)
        self._rules = [r for r in self._rules if r.id != rule_id]
        if len(self._rules) != before:
            logger.info("Removed rule id=%s", rule_id)

    def snapshot(self) -> tuple:
        """Hashable view of the rules, used as a recomputation key."""
        return tuple((r.id, r.name, r.keywords) for r in self._rules)


# ------------------ JSON CONFIG ------------------ #

def _rules_from_json(data) -> list[Rule]:
    # Mapping form: {"Category": ["kw", ...]} with ids in file order
    if isinstance(data, dict):
        return [
            Rule(id=i, name=str(name), keywords=tuple(str(k) for k in keywords))
            for i, (name, keywords) in enumerate(data.items(), start=1)
        ]

    if not isinstance(data, list):
        raise ValueError("Rules file must hold a list of rules or a category mapping")

    rules = []
    for i, item in enumerate(data, start=1):
        if not isinstance(item, dict) or "name" not in item:
            raise ValueError(f"Rule #{i} must be an object with a 'name'")
        rules.append(
            Rule(
                id=int(item.get("id", i)),
                name=str(item["name"]),
                keywords=tuple(str(k) for k in item.get("keywords", [])),
                color=str(item.get("color", DEFAULT_RULE_COLOR)),
            )
        )
    return rules


def load_rule_set(path: str | Path | None = None) -> RuleSet:
    """
    Load rules from `path`, else from $TESTIMONY_ANALYZER_RULES, else the
    packaged defaults.
    """
    if path is None:
        path = os.getenv(RULES_ENV_VAR) or DEFAULT_RULES_PATH
    path = Path(path)

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid rules file {path}: {e}") from e

    rule_set = RuleSet(_rules_from_json(data))
    logger.info("Loaded %d rules from %s", len(rule_set), path)
    return rule_set


def save_rule_set(rule_set: RuleSet, path: str | Path) -> None:
    path = Path(path)
    data = [
        {"id": r.id, "name": r.name, "color": r.color, "keywords": list(r.keywords)}
        for r in rule_set
    ]
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
