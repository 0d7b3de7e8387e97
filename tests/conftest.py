"""Shared fixtures: small rule sets and sample testimony exports."""

import pytest

from testimony_analyzer.models import Rule
from testimony_analyzer.rules import RuleSet


@pytest.fixture
def rule_set():
    """Three small rules in a fixed order."""
    return RuleSet([
        Rule(id=1, name="Healing", keywords=("heal", "doctor", "cancer")),
        Rule(id=2, name="Career", keywords=("job", "work", "promotion")),
        Rule(id=3, name="Finance", keywords=("money", "debt", "salary")),
    ])


@pytest.fixture
def sample_csv_content():
    """Survey export with a testimony column, a name column and a date column."""
    return (
        'Name,Please share your testimony in details,Submission Date\n'
        'Ada,"I was healed, the doctor confirmed it",2025-01-15\n'
        'Job Seeker,"Got a promotion at work",Sun Feb 02 2025 09:30:00\n'
        'Bola,"My debt was cleared, money came in",2025-02-20\n'
        'Chi,"Nothing to add",\n'
    )


@pytest.fixture
def sample_csv_file(sample_csv_content, tmp_path):
    csv_file = tmp_path / "testimonies.csv"
    csv_file.write_text(sample_csv_content, encoding="utf-8")
    return csv_file
