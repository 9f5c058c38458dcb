import pytest
import yaml

from newshub.config import (
    Config,
    ConfigModel,
    PipelineConfig,
    SourceConfig,
    load_config,
    load_sources,
    save_config,
    save_sources,
)
from newshub.constants import SourceType


def test_defaults():
    config = ConfigModel()

    assert config.llm.primary.model == "gemini-2.0-flash"
    assert config.llm.fallback.base_url == "https://api.groq.com/openai/v1"
    assert config.llm.daily_soft_limit == 230
    assert config.tts.voice == "onyx"
    assert config.storage.bucket == "digests"
    assert config.pipeline.summarise_concurrency == 3
    assert config.pipeline.relevance_threshold == 5


def test_round_trip(tmp_path):
    path = tmp_path / "config.yaml"
    config = ConfigModel(pipeline={"summarise_batch_size": 25})

    save_config(config, path)

    assert load_config(path).pipeline.summarise_batch_size == 25


def test_missing_config(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_invalid_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("pipeline:\n  summarise_concurrency: 50\n")

    with pytest.raises(ValueError):
        load_config(path)


def test_expanded_window_must_be_wider():
    with pytest.raises(ValueError):
        PipelineConfig(digest_window_hours=48, digest_expanded_window_hours=24)


def test_api_keys_from_env(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    config = ConfigModel()

    assert config.llm.primary.resolve_api_key() == "from-env"
    assert config.llm.fallback.resolve_api_key() is None


def test_sources_path_sits_next_to_config(tmp_path):
    config = Config(tmp_path / "config.yaml")
    assert config.sources_path == tmp_path / "sources.yaml"


def test_source_validation():
    with pytest.raises(ValueError):
        SourceConfig(name="Feed", type=SourceType.RSS)
    with pytest.raises(ValueError):
        SourceConfig(name="Search", type=SourceType.API)


def test_fetcher_config():
    rss = SourceConfig(name="Feed", url="https://e.com/rss")
    api = SourceConfig(name="Search", type=SourceType.API, provider="gnews", query="agents", max=5)

    assert rss.fetcher_config() == {"url": "https://e.com/rss"}
    assert api.fetcher_config() == {"provider": "gnews", "query": "agents", "lang": "en", "max": 5, "page": 1}


def test_sources_skip_invalid_entries(tmp_path):
    path = tmp_path / "sources.yaml"
    path.write_text(yaml.dump({
        "sources": [
            {"name": "Good", "url": "https://e.com/rss"},
            {"name": "No URL", "type": "rss"},
            {"name": "Search", "type": "api", "provider": "gnews"},
        ]
    }))

    assert [s.name for s in load_sources(path)] == ["Good", "Search"]


def test_save_sources_round_trip(tmp_path):
    path = tmp_path / "sources.yaml"
    save_sources([SourceConfig(name="Feed", url="https://e.com/rss", enabled=False)], path)

    (source,) = load_sources(path)
    assert source.name == "Feed"
    assert not source.enabled
