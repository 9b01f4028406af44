"""Tests for configuration loading."""

import pytest

from lessongraph.config import CONFIG_FILENAME, LessongraphConfig, load_config
from lessongraph.errors import ConfigError


def test_defaults():
    config = LessongraphConfig()
    assert config.content_prefixes == ["content/"]
    assert config.extensions == [".md"]
    assert config.exclude == []
    assert config.include_drafts is False
    assert config.strict is False


def test_no_file_gives_defaults(tmp_path):
    assert load_config(content_root=tmp_path) == LessongraphConfig()
    assert load_config() == LessongraphConfig()


def test_loads_from_content_root(tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text(
        "content_prefixes: docs/\nextensions: [md, .MARKDOWN]\nstrict: true\n",
        encoding="utf-8",
    )
    config = load_config(content_root=tmp_path)
    assert config.content_prefixes == ["docs/"]
    assert config.extensions == [".md", ".markdown"]
    assert config.strict is True


def test_explicit_path_must_exist(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml")


@pytest.mark.parametrize("content", [
    "unknown_key: 1\n",
    "- a\n- b\n",
    "strict: [not, a, bool]\n",
    "content_prefixes: [unclosed\n",
])
def test_invalid_config(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == LessongraphConfig()


def test_with_overrides_ignores_none():
    config = LessongraphConfig(strict=True)
    updated = config.with_overrides(strict=None, include_drafts=True)
    assert updated.strict is True
    assert updated.include_drafts is True
    assert config.include_drafts is False
