"""Tests for configuration loading."""

from pathlib import Path

import pytest

from polymark.config import AppConfig, get_config_path, load_config


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(tmp_path / "nope.toml")
    assert config == AppConfig()
    assert config.view.max_zoom == 3.0
    assert config.export.scale == 1.5
    assert config.export.suffix == "-annotated"
    assert config.tools.color == (59, 130, 246)


def test_values_override_defaults(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        'log_level = "debug"\n'
        "[view]\n"
        "max_zoom = 4\n"
        "[tools]\n"
        "color = [220, 38, 38]\n"
        "preview_dashes = [3, 2]\n"
        "[renderer]\n"
        "invert = true\n"
        "[export]\n"
        "scale = 2.0\n"
        "unknown = 1\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.log_level == "DEBUG"
    assert config.view.max_zoom == 4.0
    assert isinstance(config.view.max_zoom, float)
    assert config.view.min_zoom == 0.25
    assert config.tools.color == (220, 38, 38)
    assert config.tools.preview_dashes == (3.0, 2.0)
    assert config.renderer.invert is True
    assert config.export.scale == 2.0


@pytest.mark.parametrize(
    "content",
    ["this is = = not toml", "[tools]\ncolor = [1, 2]\n", '[view]\nmax_zoom = "big"\n'],
)
def test_invalid_file_falls_back_to_defaults(tmp_path, content, caplog):
    path = tmp_path / "config.toml"
    path.write_text(content, encoding="utf-8")
    with caplog.at_level("WARNING"):
        assert load_config(path) == AppConfig()
    assert "Ignoring invalid config" in caplog.text


def test_config_path_is_toml():
    path = get_config_path()
    assert isinstance(path, Path)
    assert path.name == "config.toml"


@pytest.mark.parametrize(
    "content",
    [
        "[tools]\nstroke_width = 0\n",
        "[tools]\ncolor = [300, 0, 0]\n",
        "[tools]\npreview_opacity = 1.5\n",
        "[export]\nscale = 0\n",
        "[view]\ndefault_zoom = 0\n",
        "[view]\nzoom_step = -0.5\n",
        "[view]\nmin_zoom = 2.0\nmax_zoom = 1.0\n",
    ],
)
def test_out_of_range_values_fall_back_to_defaults(tmp_path, content, caplog):
    path = tmp_path / "config.toml"
    path.write_text(content, encoding="utf-8")
    with caplog.at_level("WARNING"):
        config = load_config(path)
    assert config == AppConfig()
    assert "Ignoring invalid config" in caplog.text


def test_loaded_config_starts_controllers(tmp_path, qapp):
    from polymark.controllers import AnnotationController, ViewController
    from polymark.core.annotations import AnnotationStore

    path = tmp_path / "config.toml"
    path.write_text("[tools]\nstroke_width = 0\n[export]\nscale = 0\n", encoding="utf-8")
    config = load_config(path)

    annotations = AnnotationController(AnnotationStore(), config.tools)
    view = ViewController(config.view)
    assert annotations.style.width == 2.0
    assert view.zoom_level == 1.0
    assert config.export.scale == 1.5
