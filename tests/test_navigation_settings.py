"""Tests for viewer settings and provider context."""

import json

from quire.navigation import ProviderContext, Settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        """Test defaults."""
        settings = Settings()

        assert settings.paging_enabled is True
        assert settings.see_also_enabled is True
        assert settings.section_mappings == {}
        assert settings.media_uri_template == "{0}{1}"

    def test_camel_case_and_snake_case(self):
        """Test camel case and snake case."""
        assert Settings(pagingEnabled=False).paging_enabled is False
        assert Settings(paging_enabled=False).paging_enabled is False

    def test_unknown_keys_are_kept(self):
        """Test unknown keys are kept."""
        settings = Settings.model_validate({"theme": "dark"})
        assert settings.model_extra["theme"] == "dark"

    def test_from_file_with_options_key(self, tmp_path):
        """Test that a full viewer config is unwrapped."""
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps({"options": {"pagingEnabled": False, "dataBaseUri": "https://x/"}}),
            encoding="utf-8",
        )
        settings = Settings.from_file(path)

        assert settings.paging_enabled is False
        assert settings.data_base_uri == "https://x/"

    def test_from_file_bare_options(self, tmp_path):
        """Test from file bare options."""
        path = tmp_path / "options.json"
        path.write_text(json.dumps({"sectionMappings": {"Chapter": "Chapitre"}}), encoding="utf-8")

        assert Settings.from_file(path).section_mappings == {"Chapter": "Chapitre"}


class TestProviderContext:
    """Tests for ProviderContext."""

    def test_defaults(self):
        """Test defaults."""
        context = ProviderContext()

        assert context.sequence_index == 0
        assert context.cors is True
        assert context.jsonp is False
        assert isinstance(context.clock(), int)
