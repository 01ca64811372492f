from __future__ import annotations

import os

import pytest

from medlearner_core import AssessmentConfig, ConfigError
from medlearner_core.config import load_env_file


def test_load_env_file_fills_only_unset_keys(tmp_path, monkeypatch):
    for name in ("MEDLEARNER_TEST_QUOTED", "MEDLEARNER_TEST_PLAIN"):
        # Registered with monkeypatch so whatever the file sets is undone.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("MEDLEARNER_TEST_PRESET", "from-shell")
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                "# comment",
                "MEDLEARNER_TEST_QUOTED=\"quoted value\"",
                "MEDLEARNER_TEST_PLAIN = plain=with=equals ",
                "MEDLEARNER_TEST_PRESET=from-file",
                "not a valid line",
                "1BAD=ignored",
            ]
        ),
        encoding="utf-8",
    )

    load_env_file(env_file)

    assert os.environ["MEDLEARNER_TEST_QUOTED"] == "quoted value"
    assert os.environ["MEDLEARNER_TEST_PLAIN"] == "plain=with=equals"
    assert os.environ["MEDLEARNER_TEST_PRESET"] == "from-shell"
    assert "1BAD" not in os.environ


def test_load_env_file_ignores_missing_file(tmp_path):
    load_env_file(tmp_path / "absent.env")


def test_from_env_requires_both_credentials(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "key")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(ConfigError):
        AssessmentConfig.from_env()
