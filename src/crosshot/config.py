"""Configuration management for crosshot.

Configuration priority (highest to lowest):
1. CLI overrides (passed to load_config)
2. Environment variables (CROSSHOT_*)
3. Config file (~/.config/crosshot/config.yaml)
4. Built-in defaults
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Any

import yaml
from platformdirs import user_config_dir

from .platforms import SUPPORTED_FORMATS

ENV_PREFIX = "CROSSHOT"
CONFIG_DIR = Path(user_config_dir("crosshot"))
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.yaml"

PATH_KEYS = {"output_dir", "hooks_dir"}


@dataclass
class Config:
    """crosshot configuration."""

    # None means the current working directory at capture time
    output_dir: Optional[Path] = None
    default_format: str = "png"
    default_quality: int = 100

    # Seconds before a candidate tool is abandoned
    capture_timeout: float = 10.0
    create_dir: bool = True

    hooks_dir: Optional[Path] = field(default_factory=lambda: CONFIG_DIR / "hooks")

    def __post_init__(self):
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)
        if isinstance(self.hooks_dir, str):
            self.hooks_dir = Path(self.hooks_dir)

    def resolved_output_dir(self) -> Path:
        return self.output_dir or Path.cwd()


def _env(name: str) -> Optional[str]:
    return os.environ.get(f"{ENV_PREFIX}_{name}")


def _config_path_from_env() -> Optional[Path]:
    value = _env("CONFIG") or _env("CONFIG_PATH")
    if value:
        return Path(value).expanduser()
    return None


def _load_config_file(path: Path, strict: bool = False) -> dict:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        if strict:
            raise ValueError(f"Failed to parse config file {path}: {exc}")
        return {}

    if not isinstance(data, dict):
        if strict:
            raise ValueError(f"Config file {path} must be a mapping")
        return {}

    return data


def _expand_path(value: Any) -> Any:
    if value is None:
        return value
    return str(Path(value).expanduser())


def config_defaults() -> dict:
    return {
        "output_dir": None,
        "default_format": "png",
        "default_quality": 100,
        "capture_timeout": 10.0,
        "create_dir": True,
        "hooks_dir": str(CONFIG_DIR / "hooks"),
    }


def _load_env_overrides() -> dict:
    config: dict[str, Any] = {}

    for env_name, key in [("OUTPUT_DIR", "output_dir"), ("HOOKS_DIR", "hooks_dir")]:
        value = _env(env_name)
        if value is not None:
            config[key] = _expand_path(value)

    value = _env("DEFAULT_FORMAT")
    if value is not None:
        config["default_format"] = value.lower()

    value = _env("DEFAULT_QUALITY")
    if value is not None:
        try:
            config["default_quality"] = int(value)
        except ValueError:
            pass

    value = _env("CAPTURE_TIMEOUT")
    if value is not None:
        try:
            config["capture_timeout"] = float(value)
        except ValueError:
            pass

    value = _env("CREATE_DIR")
    if value is not None:
        config["create_dir"] = value.lower() in ("true", "1", "yes", "on")

    return config


def resolve_config_path(config_path: Optional[Path] = None) -> Path:
    return config_path or _config_path_from_env() or DEFAULT_CONFIG_PATH


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[dict] = None,
    strict: bool = False,
) -> Config:
    """Load configuration from all sources."""
    resolved_path = resolve_config_path(config_path)

    config_dict = config_defaults()
    file_config = _load_config_file(resolved_path, strict=strict)
    config_dict.update({k: v for k, v in file_config.items() if k in config_dict})
    config_dict.update(_load_env_overrides())

    if overrides:
        for key, value in overrides.items():
            if value is not None:
                config_dict[key] = value

    for key in PATH_KEYS:
        if key in config_dict and config_dict[key] is not None:
            config_dict[key] = _expand_path(config_dict[key])

    return Config(**config_dict)


def config_schema() -> dict:
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "properties": {
            "output_dir": {"type": ["string", "null"]},
            "default_format": {"type": "string", "enum": list(SUPPORTED_FORMATS)},
            "default_quality": {"type": "integer", "minimum": 1, "maximum": 100},
            "capture_timeout": {"type": "number", "exclusiveMinimum": 0},
            "create_dir": {"type": "boolean"},
            "hooks_dir": {"type": ["string", "null"]},
        },
        "additionalProperties": False,
    }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config_dict(data: Any) -> list[str]:
    errors: list[str] = []
    if not isinstance(data, dict):
        return ["Config must be a mapping/object"]

    props = config_schema()["properties"]

    for key in data.keys():
        if key not in props:
            errors.append(f"Unknown config key: {key}")

    def check_type(key: str, value: Any, expected: str) -> bool:
        if expected == "string" and not isinstance(value, str):
            errors.append(f"{key} must be a string")
        elif expected == "integer" and not _is_int(value):
            errors.append(f"{key} must be an integer")
        elif expected == "number" and not _is_number(value):
            errors.append(f"{key} must be a number")
        elif expected == "boolean" and not isinstance(value, bool):
            errors.append(f"{key} must be a boolean")
        else:
            return True
        return False

    for key, value in data.items():
        if key not in props:
            continue
        expected = props[key]["type"]
        if isinstance(expected, list):
            if value is None and "null" in expected:
                continue
            if "string" in expected and isinstance(value, str):
                continue
            errors.append(f"{key} must be one of types: {', '.join(expected)}")
            continue
        if not check_type(key, value, expected):
            continue

        if key == "default_format" and value.lower() not in SUPPORTED_FORMATS:
            errors.append(f"default_format must be one of: {', '.join(SUPPORTED_FORMATS)}")
        if key == "default_quality" and not 1 <= value <= 100:
            errors.append("default_quality must be between 1 and 100")
        if key == "capture_timeout" and value <= 0:
            errors.append("capture_timeout must be > 0")

    return errors


def validate_config_file(config_path: Optional[Path] = None) -> list[str]:
    path = resolve_config_path(config_path)
    if not path.exists():
        return []
    data = _load_config_file(path, strict=True)
    return validate_config_dict(data)


def config_to_dict(config: Config) -> dict:
    def _format(value: Any) -> Any:
        if isinstance(value, Path):
            return str(value)
        return value

    return {
        "output_dir": _format(config.output_dir),
        "default_format": config.default_format,
        "default_quality": config.default_quality,
        "capture_timeout": config.capture_timeout,
        "create_dir": config.create_dir,
        "hooks_dir": _format(config.hooks_dir),
    }
