"""Translation of per-language jsii binding targets into submodule configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from .errors import TargetConfigurationError, UnsupportedTargetError

TARGET_CONFIG_FILENAME = ".jsiirc.json"


class TargetLanguage(str, Enum):
    DOTNET = "dotnet"
    JAVA = "java"
    PYTHON = "python"


@dataclass(frozen=True)
class DotNetTarget:
    namespace: str

    def to_dict(self) -> Dict[str, str]:
        return {"namespace": self.namespace}


@dataclass(frozen=True)
class JavaTarget:
    package: str

    def to_dict(self) -> Dict[str, str]:
        return {"package": self.package}


@dataclass(frozen=True)
class PythonTarget:
    module: str

    def to_dict(self) -> Dict[str, str]:
        return {"module": self.module}


TargetConfig = Union[DotNetTarget, JavaTarget, PythonTarget]

_REQUIRED_FIELDS: Dict[TargetLanguage, str] = {
    TargetLanguage.DOTNET: "namespace",
    TargetLanguage.JAVA: "package",
    TargetLanguage.PYTHON: "module",
}

_FACTORIES = {
    TargetLanguage.DOTNET: DotNetTarget,
    TargetLanguage.JAVA: JavaTarget,
    TargetLanguage.PYTHON: PythonTarget,
}


def parse_language(name: str) -> TargetLanguage:
    try:
        return TargetLanguage(name)
    except ValueError:
        raise UnsupportedTargetError(name) from None


def parse_target(language: TargetLanguage, raw: Any) -> TargetConfig:
    key = _REQUIRED_FIELDS[language]
    value = raw.get(key) if isinstance(raw, Mapping) else None
    if not isinstance(value, str) or not value:
        raise TargetConfigurationError(
            f"Binding target '{language.value}' must declare a '{key}' string"
        )
    return _FACTORIES[language](value)


def parse_targets(raw: Optional[Mapping[str, Any]]) -> Dict[TargetLanguage, TargetConfig]:
    """Parse a library's ``jsii.targets`` block; unknown languages are fatal."""
    if not raw:
        return {}
    return {
        language: parse_target(language, config)
        for language, config in ((parse_language(name), value) for name, value in raw.items())
    }


def supported_languages(raw: Optional[Mapping[str, Any]]) -> Dict[TargetLanguage, Mapping[str, Any]]:
    """Return the uber package's known target blocks, ignoring languages it merely mentions."""
    if not raw:
        return {}
    result: Dict[TargetLanguage, Mapping[str, Any]] = {}
    for language in TargetLanguage:
        config = raw.get(language.value)
        if config is not None:
            result[language] = config if isinstance(config, Mapping) else {}
    return result


def translate_targets(
    uber_targets: Optional[Mapping[str, Any]],
    library_targets: Optional[Mapping[str, Any]],
    *,
    python_module_prefix: str = "aws_cdk.",
) -> Optional[Dict[str, Dict[str, str]]]:
    """Narrow a library's targets to the languages and fields the uber package emits."""
    if library_targets is None:
        return None

    supported = supported_languages(uber_targets)
    result: Dict[str, Dict[str, str]] = {}
    for name, raw in library_targets.items():
        language = parse_language(name)
        if language not in supported:
            continue
        target = parse_target(language, raw)
        if isinstance(target, DotNetTarget):
            result[language.value] = target.to_dict()
        elif isinstance(target, JavaTarget):
            result[language.value] = target.to_dict()
        elif isinstance(target, PythonTarget):
            uber_python = parse_target(TargetLanguage.PYTHON, supported[language])
            result[language.value] = PythonTarget(
                f"{uber_python.module}.{_strip_prefix(target.module, python_module_prefix)}"
            ).to_dict()
        else:  # pragma: no cover - TargetLanguage is closed
            raise UnsupportedTargetError(language.value)
    return result


def _strip_prefix(module: str, prefix: str) -> str:
    if prefix and module.startswith(prefix):
        return module[len(prefix):]
    return module


__all__ = [
    "DotNetTarget",
    "JavaTarget",
    "PythonTarget",
    "TARGET_CONFIG_FILENAME",
    "TargetConfig",
    "TargetLanguage",
    "parse_targets",
    "supported_languages",
    "translate_targets",
]
