"""Exception hierarchy raised by the ubergen pipeline."""


class UbergenError(RuntimeError):
    """Base class for every failure that aborts an ubergen run."""


class ConfigurationInconsistencyError(UbergenError):
    """Raised when library manifests cannot be merged consistently."""


class DependencyConflictError(ConfigurationInconsistencyError):
    """Two libraries bundle the same dependency at different versions."""

    def __init__(self, name: str, existing: str, requested: str) -> None:
        super().__init__(
            f"Required to bundle different versions of {name}: {existing} and {requested}."
        )
        self.name = name
        self.existing = existing
        self.requested = requested


class UnsupportedTargetError(ConfigurationInconsistencyError):
    """A library declares a binding language the translator does not know."""

    def __init__(self, language: str) -> None:
        super().__init__(
            f"Unsupported language for submodule configuration translation: {language}"
        )
        self.language = language


class TargetConfigurationError(ConfigurationInconsistencyError):
    """A binding block is missing the field its language requires."""


class ManifestCorrectedError(UbergenError):
    """The uber-package manifest was repaired on disk and the run must be repeated."""


class SourceParseError(UbergenError):
    """A source file could not be parsed cleanly while strict parsing is enabled."""


__all__ = [
    "ConfigurationInconsistencyError",
    "DependencyConflictError",
    "ManifestCorrectedError",
    "SourceParseError",
    "TargetConfigurationError",
    "UbergenError",
    "UnsupportedTargetError",
]
