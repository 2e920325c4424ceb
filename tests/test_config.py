from __future__ import annotations

from pathlib import Path

import pytest

from bundle_size_tracker.config import ConfigError, TrackerConfig, load_config


def test_defaults() -> None:
    config = TrackerConfig()

    assert config.history_file == Path(".bundle-size-history.json")
    assert config.max_history == 10
    assert config.threshold == 10
    assert config.output_json is False
    assert config.report_file == "bundle-size-report.json"
    assert config.extensions == ("js", "css", "html")


def test_load_config_missing_file_uses_defaults(tmp_path: Path) -> None:
    assert load_config(tmp_path / ".bundle-size.yaml") == TrackerConfig()


def test_load_config_missing_required_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path / "custom.yaml", required=True)

    assert "not found" in str(excinfo.value)


def test_load_config_reads_yaml(tmp_path: Path) -> None:
    path = tmp_path / ".bundle-size.yaml"
    path.write_text(
        "\n".join(
            [
                "history_file: build/history.json",
                "max_history: 3",
                "threshold: 5",
                "output_json: true",
                "extensions: [.js, mjs]",
            ]
        )
        + "\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.history_file == Path("build/history.json")
    assert config.max_history == 3
    assert config.threshold == 5
    assert config.output_json is True
    assert config.extensions == ("js", "mjs")


def test_empty_yaml_yields_defaults(tmp_path: Path) -> None:
    path = tmp_path / ".bundle-size.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(path) == TrackerConfig()


@pytest.mark.parametrize(
    ("content", "fragment"),
    [
        ("max_history: 0\n", "max_history"),
        ("threshold: -1\n", "threshold"),
        ("extensions: []\n", "extensions"),
        ("unknown_key: 1\n", "unknown_key"),
    ],
)
def test_load_config_rejects_invalid_values(tmp_path: Path, content: str, fragment: str) -> None:
    path = tmp_path / ".bundle-size.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_config(path)

    assert fragment in str(excinfo.value)


def test_load_config_rejects_malformed_yaml(tmp_path: Path) -> None:
    path = tmp_path / ".bundle-size.yaml"
    path.write_text("max_history: [1, 2\n", encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_config(path)

    assert "Failed to parse" in str(excinfo.value)


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / ".bundle-size.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_with_overrides_skips_none_values() -> None:
    config = TrackerConfig(max_history=4).with_overrides(max_history=None, threshold=2.5)

    assert config.max_history == 4
    assert config.threshold == 2.5


def test_with_overrides_validates() -> None:
    with pytest.raises(ConfigError):
        TrackerConfig().with_overrides(max_history=0)


def test_resolve_history_file(tmp_path: Path) -> None:
    relative = TrackerConfig()
    absolute = TrackerConfig(history_file=tmp_path / "abs.json")

    assert relative.resolve_history_file(tmp_path) == tmp_path / ".bundle-size-history.json"
    assert absolute.resolve_history_file(Path("/elsewhere")) == tmp_path / "abs.json"
