# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from site_crawler.config import CrawlerConfig, load_config

REPO_DEFAULT = Path(__file__).resolve().parents[1] / "configs" / "default.yaml"


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("max_depth: 2\nmax_urls: 50", ".yaml", None),
        ("max_depth: 2\nmax_urls: 50", ".yml", None),
        (json.dumps({"max_depth": 2, "max_urls": 50}), ".json", None),
        ("max_urls: 0", ".yaml", ValidationError),
        ("max_depth: -1", ".yaml", ValidationError),
        ("unknown_key: 1", ".yaml", ValidationError),
        ("- a\n- b", ".yaml", TypeError),
        ("key: [unclosed", ".yaml", ValueError),
        ("[1, 2]", ".json", TypeError),
        ("{bad json", ".json", ValueError),
        ("max_depth = 2", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, CrawlerConfig)
        assert cfg.max_depth == 2
        assert cfg.max_urls == 50
        assert cfg.page_timeout == 10.0


def test_empty_yaml_gives_defaults(tmp_path):
    assert load_config(write_file(tmp_path, "", ".yaml")) == CrawlerConfig()


def test_explicit_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_load_config_default_missing_falls_back(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_config(None) == CrawlerConfig()


def test_load_config_default_file_is_used(tmp_path, monkeypatch):
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("max_urls: 7\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    assert load_config(None).max_urls == 7


def test_shipped_default_matches_model_defaults():
    assert load_config(REPO_DEFAULT) == CrawlerConfig()


def test_config_is_frozen_and_strict():
    cfg = CrawlerConfig(user_agent="  Agent/2.0  ")
    assert cfg.user_agent == "Agent/2.0"
    with pytest.raises(ValidationError):
        cfg.max_urls = 5
    with pytest.raises(ValidationError):
        CrawlerConfig(user_agent="   ")
    with pytest.raises(ValidationError):
        CrawlerConfig(port=70000)
