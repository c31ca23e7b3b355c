"""Tests for roadmap.config -- Pydantic models and environment/file settings."""

import json

import pytest
from pydantic import ValidationError

from roadmap.config.models import (
    ChatMessage,
    GeneratorConfig,
    SectionContent,
    Snapshot,
    copy_roadmap,
)
from roadmap.config.settings import build_config, get_api_key, has_api_key, load_config_file


class TestGeneratorConfig:
    def test_defaults(self):
        cfg = GeneratorConfig()
        assert cfg.provider == "anthropic"
        assert cfg.model == "claude-sonnet-4-5-20250929"
        assert cfg.max_tokens == 4000
        assert cfg.temperature is None
        assert cfg.step_delay_seconds == 4.0
        assert cfg.retry_attempts == 3
        assert cfg.research_mode == "deep"
        assert cfg.mock_mode is False

    def test_mode_normalised(self):
        assert GeneratorConfig(research_mode=" FAST ").research_mode == "fast"

    def test_invalid_mode(self):
        with pytest.raises(ValidationError):
            GeneratorConfig(research_mode="turbo")

    def test_invalid_provider(self):
        with pytest.raises(ValidationError):
            GeneratorConfig(provider="mistral")

    def test_negative_delay(self):
        with pytest.raises(ValidationError):
            GeneratorConfig(step_delay_seconds=-1)


class TestContentModels:
    def test_section_defaults(self):
        section = SectionContent()
        assert section.html == ""
        assert section.data is None
        assert not section.is_placeholder
        assert not section.is_error

    def test_copy_roadmap_is_deep(self):
        roadmap = {"research": SectionContent(html="a", data={"k": [1]})}
        copy = copy_roadmap(roadmap)
        copy["research"].data["k"].append(2)
        assert roadmap["research"].data == {"k": [1]}

    def test_snapshot_section_count(self):
        snap = Snapshot(data={"research": SectionContent()}, idea="x")
        assert snap.section_count == 1

    def test_chat_role_validated(self):
        with pytest.raises(ValidationError):
            ChatMessage(role="system", content="hi")


class TestApiKeys:
    def test_no_key(self):
        assert get_api_key() == ""
        assert not has_api_key()

    def test_primary_key(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", " sk-a ")
        monkeypatch.setenv("ROADMAP_API_KEY", "sk-b")
        assert get_api_key("anthropic") == "sk-a"

    def test_alias(self, monkeypatch):
        monkeypatch.setenv("ROADMAP_API_KEY", "sk-b")
        assert get_api_key("anthropic") == "sk-b"

    def test_other_provider(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-o")
        assert get_api_key("openai") == "sk-o"
        assert not has_api_key("google")


class TestBuildConfig:
    def test_demo_without_key(self):
        assert build_config().mock_mode is True

    def test_live_with_key(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-a")
        assert build_config().mock_mode is False

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("ROADMAP_PROVIDER", "google")
        monkeypatch.setenv("ROADMAP_STEP_DELAY", "0.5")
        cfg = build_config()
        assert cfg.provider == "google"
        assert cfg.model == "gemini-1.5-pro"
        assert cfg.step_delay_seconds == 0.5

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "roadmap.yaml"
        path.write_text("research_mode: fast\nmax_tokens: 2000\n", encoding="utf-8")
        cfg = build_config(str(path))
        assert cfg.research_mode == "fast"
        assert cfg.max_tokens == 2000

    def test_json_file_and_overrides(self, tmp_path, monkeypatch):
        path = tmp_path / "roadmap.json"
        path.write_text(json.dumps({"model": "claude-haiku-4-5-20251001", "step_delay_seconds": 9}))
        monkeypatch.setenv("ROADMAP_STEP_DELAY", "2")
        cfg = build_config(str(path), step_delay_seconds=0.0, mock_mode=None)
        assert cfg.model == "claude-haiku-4-5-20251001"
        assert cfg.step_delay_seconds == 0.0
        assert cfg.mock_mode is True

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config_file(str(path))

    def test_no_file(self):
        assert load_config_file(None) == {}
