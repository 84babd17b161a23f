"""Configuration loading for ubergen (.ubergen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import UbergenError

CONFIG_FILENAME = ".ubergen.yml"


class ConfigError(UbergenError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class UbergenConfig:
    """Represents the settings defined in .ubergen.yml, with paths resolved."""

    root: Path
    libraries_root: Path
    workspace_path: Path
    manifest_path: Path
    output_dir: Path
    scope: str = "@aws-cdk/"
    root_library: str = "core"
    python_module_prefix: str = "aws_cdk."
    ignore: List[str] = field(default_factory=list)
    strict_parse: bool = False

    @classmethod
    def defaults(cls, root: Path) -> "UbergenConfig":
        root = root.resolve()
        return cls(
            root=root,
            libraries_root=(root / ".." / ".." / "packages" / "@aws-cdk").resolve(),
            workspace_path=(root / ".." / ".." / "package.json").resolve(),
            manifest_path=root / "package.json",
            output_dir=root / "lib",
        )


def load_config(config_path: Path) -> UbergenConfig:
    """Load configuration from disk, falling back to defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    config = UbergenConfig.defaults(root)

    if not config_file.exists():
        return config

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    libraries_root = _as_str(data.get("libraries_root"))
    if libraries_root:
        config.libraries_root = (root / libraries_root).resolve()
    workspace = _as_str(data.get("workspace"))
    if workspace:
        config.workspace_path = (root / workspace).resolve()
    manifest = _as_str(data.get("manifest"))
    if manifest:
        config.manifest_path = (root / manifest).resolve()
    output_dir = _as_str(data.get("output_dir"))
    if output_dir:
        config.output_dir = (root / output_dir).resolve()

    scope = data.get("scope")
    if scope is not None:
        config.scope = _require_str(scope, "scope")
    root_library = data.get("root_library")
    if root_library is not None:
        config.root_library = _require_str(root_library, "root_library")
    prefix = data.get("python_module_prefix")
    if prefix is not None:
        config.python_module_prefix = _require_str(prefix, "python_module_prefix")

    config.ignore = _as_str_list(data.get("ignore"))

    strict = data.get("strict_parse")
    if strict is not None:
        if not isinstance(strict, bool):
            raise ConfigError("strict_parse must be a boolean")
        config.strict_parse = strict

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _require_str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{key} must be a string")
    return value


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    raise ConfigError("ignore must be a list of file names")


__all__ = ["CONFIG_FILENAME", "ConfigError", "UbergenConfig", "load_config"]
