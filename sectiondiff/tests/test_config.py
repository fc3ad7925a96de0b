"""Tests for comparison settings."""

import pytest
from sectiondiff.core.config import ComparisonConfig, load_config


ENV_VARS = [
    "SECTIONDIFF_SIMILARITY_THRESHOLD",
    "SECTIONDIFF_SNIPPET_LENGTH",
    "SECTIONDIFF_EMBED_WORKERS",
    "SECTIONDIFF_SUMMARY_WORKERS",
    "SECTIONDIFF_MAX_CHUNK_CHARS",
    "SECTIONDIFF_OVERLAP_CHARS",
    "SECTIONDIFF_EMBEDDING_MODEL",
    "OLLAMA_HOST",
    "OLLAMA_MODEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Unset every setting and return an empty .env path."""
    for name in ENV_VARS:
        # setenv first so monkeypatch restores the variable afterwards,
        # including anything load_dotenv writes
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    env_file = tmp_path / ".env"
    env_file.write_text("")
    return env_file


class TestComparisonConfig:
    """Tests for the ComparisonConfig dataclass."""

    def test_defaults(self):
        config = ComparisonConfig()
        assert config.similarity_threshold == pytest.approx(0.80)
        assert config.snippet_length == 200
        assert config.max_chunk_chars is None
        assert config.overlap_chars is None
        assert config.ollama_host == "http://localhost:11434"

    @pytest.mark.parametrize("kwargs", [
        {"similarity_threshold": 1.2},
        {"snippet_length": 0},
        {"embed_workers": 0},
        {"summary_workers": 0},
        {"max_chunk_chars": 0},
        {"overlap_chars": -5},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            ComparisonConfig(**kwargs)


class TestLoadConfig:
    """Tests for loading settings from the environment."""

    def test_defaults_without_env(self, clean_env):
        assert load_config(str(clean_env)) == ComparisonConfig()

    def test_reads_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("SECTIONDIFF_SIMILARITY_THRESHOLD", "0.75")
        monkeypatch.setenv("SECTIONDIFF_MAX_CHUNK_CHARS", "600")
        monkeypatch.setenv("OLLAMA_MODEL", "llama3.1:8b")
        config = load_config(str(clean_env))
        assert config.similarity_threshold == pytest.approx(0.75)
        assert config.max_chunk_chars == 600
        assert config.ollama_model == "llama3.1:8b"

    def test_reads_env_file(self, clean_env):
        clean_env.write_text("SECTIONDIFF_SNIPPET_LENGTH=120\nOLLAMA_HOST=http://gpu-box:11434\n")
        config = load_config(str(clean_env))
        assert config.snippet_length == 120
        assert config.ollama_host == "http://gpu-box:11434"

    def test_blank_value_uses_default(self, clean_env, monkeypatch):
        monkeypatch.setenv("SECTIONDIFF_EMBED_WORKERS", "  ")
        assert load_config(str(clean_env)).embed_workers == 4

    def test_unparseable_value(self, clean_env, monkeypatch):
        monkeypatch.setenv("SECTIONDIFF_SNIPPET_LENGTH", "long")
        with pytest.raises(ValueError, match="SECTIONDIFF_SNIPPET_LENGTH"):
            load_config(str(clean_env))

    def test_out_of_range_value(self, clean_env, monkeypatch):
        monkeypatch.setenv("SECTIONDIFF_SIMILARITY_THRESHOLD", "2")
        with pytest.raises(ValueError, match="similarity_threshold"):
            load_config(str(clean_env))
