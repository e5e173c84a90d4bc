"""
Tests for the settings loader.
"""

import pytest
import tempfile
from pathlib import Path

from lead_desk.settings import DEFAULTS, DotDict, load_settings, validate_settings, settings


class TestDotDict:
    """Tests for DotDict"""

    def test_dot_access(self):
        d = DotDict({"a": 1, "b": {"c": 2}})
        assert d.a == 1
        assert d.b.c == 2

    def test_missing_key_raises(self):
        d = DotDict({"a": 1})
        with pytest.raises(AttributeError):
            _ = d.nonexistent

    def test_get_nested(self):
        d = DotDict({"a": {"b": {"c": 3}}})
        assert d.get_nested("a.b.c") == 3
        assert d.get_nested("a.b.x", "default") == "default"

    def test_set_attr(self):
        d = DotDict({})
        d.foo = "bar"
        assert d["foo"] == "bar"


class TestLoadSettings:
    """Loading from YAML"""

    def test_defaults_when_no_file(self, capsys):
        loaded = load_settings(Path("/nonexistent/settings.yaml"))
        assert loaded.dialogue.typing_delay_seconds == DEFAULTS["dialogue"]["typing_delay_seconds"]
        assert "Settings file not found" in capsys.readouterr().err

    def test_yaml_overrides_defaults(self):
        yaml_content = """
dialogue:
  typing_delay_seconds: 0
  max_suggestions: 2
"""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write(yaml_content)

        loaded = load_settings(Path(f.name))
        Path(f.name).unlink()

        assert loaded.dialogue.typing_delay_seconds == 0
        assert loaded.dialogue.max_suggestions == 2
        # Untouched keys keep their defaults
        assert loaded.dialogue.timestamp_format == "%H:%M"
        assert loaded.sessions.ttl_seconds == DEFAULTS["sessions"]["ttl_seconds"]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_settings(path) == DEFAULTS

    def test_shipped_settings(self):
        assert settings.get_nested("dialogue.typing_delay_seconds") == 0.25
        assert settings.get_nested("dialogue.max_suggestions") == 3
        assert validate_settings(settings) == []


class TestValidateSettings:

    def test_defaults_are_valid(self):
        assert validate_settings(DotDict(DEFAULTS)) == []

    @pytest.mark.parametrize("path,value", [
        ("logging.level", "LOUD"),
        ("dialogue.typing_delay_seconds", -1),
        ("dialogue.max_suggestions", 0),
        ("dialogue.max_suggestions", "3"),
        ("sessions.ttl_seconds", 0),
    ])
    def test_invalid_values(self, path, value):
        section, key = path.split(".")
        config = DotDict({k: dict(v) for k, v in DEFAULTS.items()})
        config[section][key] = value

        errors = validate_settings(config)
        assert len(errors) == 1
        assert path in errors[0]

    def test_env_var_selects_file(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("sessions:\n  ttl_seconds: 5\n", encoding="utf-8")
        monkeypatch.setenv("LEAD_DESK_SETTINGS", str(path))

        assert load_settings().sessions.ttl_seconds == 5

    def test_defaults_not_mutated(self):
        loaded = load_settings(Path("/nonexistent/settings.yaml"))
        loaded["dialogue"]["max_suggestions"] = 99
        assert DEFAULTS["dialogue"]["max_suggestions"] == 3
