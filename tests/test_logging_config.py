"""Tests for the structlog setup."""

import io
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1] / "python-backend"))

from policy_engine.corpus import ClauseCorpus
from policy_engine.logging_config import configure_logging


_METADATA = {
    "version": 1,
    "created_at": "2025-08-26T00:00:00Z",
    "updated_at": "2025-08-26T00:00:00Z",
    "author": "tests",
}


def test_warnings_follow_the_current_stderr(monkeypatch):
    configure_logging("INFO")
    corpus = ClauseCorpus.from_records(
        [
            {
                "id": "lonely",
                "title": "Lonely",
                "body": "Body.",
                "risk_level": "low",
                "dependencies": ["missing"],
                "metadata": _METADATA,
            }
        ]
    )

    first, second = io.StringIO(), io.StringIO()
    monkeypatch.setattr(sys, "stderr", first)
    corpus.validate()
    first.close()

    # The stream captured earlier is gone; logging must not touch it.
    monkeypatch.setattr(sys, "stderr", second)
    warnings = corpus.validate()

    assert warnings == ["lonely: unknown dependency missing"]
    assert "unknown dependency missing" in second.getvalue()


def test_level_filters_lower_levels(capsys):
    configure_logging("ERROR")
    corpus = ClauseCorpus.from_records(
        [
            {
                "id": "self-ref",
                "title": "Self",
                "body": "Body.",
                "risk_level": "low",
                "dependencies": ["self-ref"],
                "metadata": _METADATA,
            }
        ]
    )
    corpus.validate()
    assert "corpus integrity" not in capsys.readouterr().err
