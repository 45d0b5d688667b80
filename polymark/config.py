"""
Application configuration.

Settings are read from ``config.toml`` in the user config directory:
    - Windows: %LOCALAPPDATA%/Polymark/config.toml
    - macOS: ~/Library/Application Support/Polymark/config.toml
    - Linux: ~/.config/Polymark/config.toml

Every key is optional. A missing or unreadable file gives the defaults
below. Example::

    log_level = "DEBUG"

    [view]
    max_zoom = 4.0

    [tools]
    color = [220, 38, 38]
    stroke_width = 3.0

    [export]
    scale = 2.0
"""
import logging
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import platformdirs

logger = logging.getLogger(__name__)

APP_NAME = "Polymark"
CONFIG_FILE_NAME = "config.toml"


@dataclass
class RendererConfig:
    """
    Options handed to the document renderer at startup.

    Defaults:
        alpha: False (opaque white page background)
        annots: True (draw annotations already embedded in the PDF)
        invert: False (dark mode colour inversion)
    """
    alpha: bool = False
    annots: bool = True
    invert: bool = False


@dataclass
class ViewConfig:
    default_zoom: float = 1.0
    min_zoom: float = 0.25
    max_zoom: float = 3.0
    zoom_step: float = 0.25


@dataclass
class ToolConfig:
    color: Tuple[int, int, int] = (59, 130, 246)
    stroke_width: float = 2.0
    marker_radius: float = 3.0      # polygon vertex dot, canonical units
    preview_dashes: Tuple[float, float] = (5.0, 5.0)
    preview_opacity: float = 0.7
    hit_tolerance: float = 5.0      # device pixels


@dataclass
class ExportConfig:
    scale: float = 1.5              # raster scale, independent of the view zoom
    suffix: str = "-annotated"


@dataclass
class AppConfig:
    renderer: RendererConfig = field(default_factory=RendererConfig)
    view: ViewConfig = field(default_factory=ViewConfig)
    tools: ToolConfig = field(default_factory=ToolConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """Build a config from parsed TOML, ignoring unknown keys."""
        return cls(
            renderer=_section(RendererConfig, data.get("renderer")),
            view=_section(ViewConfig, data.get("view")),
            tools=_section(ToolConfig, data.get("tools")),
            export=_section(ExportConfig, data.get("export")),
            log_level=str(data.get("log_level", "INFO")).upper(),
        )

    def validate(self) -> None:
        """
        Check that the values can drive the application.

        Raises:
            ValueError: A zoom, scale or stroke setting is out of range
        """
        # Imported here: the core package imports this module
        from polymark.core.annotations.models import StrokeStyle
        from polymark.core.geometry import check_zoom

        for name in ("default_zoom", "min_zoom", "max_zoom", "zoom_step"):
            check_zoom(getattr(self.view, name))
        if self.view.min_zoom > self.view.max_zoom:
            raise ValueError(
                f"view.min_zoom {self.view.min_zoom} is above view.max_zoom {self.view.max_zoom}"
            )

        StrokeStyle(color=self.tools.color, width=self.tools.stroke_width)
        if self.tools.marker_radius <= 0:
            raise ValueError(f"tools.marker_radius must be > 0, got {self.tools.marker_radius}")
        if not 0.0 <= self.tools.preview_opacity <= 1.0:
            raise ValueError(f"tools.preview_opacity must be in [0, 1], got {self.tools.preview_opacity}")
        if self.tools.hit_tolerance < 0:
            raise ValueError(f"tools.hit_tolerance must be >= 0, got {self.tools.hit_tolerance}")

        check_zoom(self.export.scale)


def _section(cls, data: Optional[Dict[str, Any]]):
    if not isinstance(data, dict):
        return cls()

    defaults = cls()
    values = {}
    for f in fields(cls):
        if f.name not in data:
            continue
        default = getattr(defaults, f.name)
        value = data[f.name]
        # TOML has no tuples; coerce arrays back to the default's shape
        if isinstance(default, tuple):
            value = tuple(type(default[0])(v) for v in value)
            if len(value) != len(default):
                raise ValueError(f"{cls.__name__}.{f.name} needs {len(default)} values")
        elif isinstance(default, bool):
            value = bool(value)
        else:
            value = type(default)(value)
        values[f.name] = value
    return cls(**values)


def get_config_path() -> Path:
    """Path of the user's config file (it may not exist)."""
    return Path(platformdirs.user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILE_NAME


def get_log_dir() -> Path:
    return Path(platformdirs.user_log_dir(APP_NAME, appauthor=False))


def load_config(path: Optional[Path] = None) -> AppConfig:
    """
    Load configuration from TOML.

    Args:
        path: Explicit config file; defaults to the user config directory

    Returns:
        The loaded config, or defaults when the file is missing, unparsable
        or holds out-of-range values
    """
    if path is None:
        path = get_config_path()
    path = Path(path)

    if not path.exists():
        return AppConfig()

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        config = AppConfig.from_dict(data)
        config.validate()
    except (OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as e:
        logger.warning(f"Ignoring invalid config file {path}: {e}")
        return AppConfig()

    logger.debug(f"Loaded config from {path}")
    return config
