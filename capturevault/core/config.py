"""
Capture Vault Configuration
===========================

Immutable, environment-aware configuration for the capture protection pipeline.

Features:
- Immutable configuration after initialization
- Environment variable override support (CAPTUREVAULT_ prefix)
- Sensitive-looking keys are never read from the environment
- OS-aware defaults for the encrypted store and quarantine directories
"""

from __future__ import annotations

import hashlib
import os
import platform
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, Optional


_SENSITIVE_KEYS: Final[frozenset[str]] = frozenset({
    "password", "secret", "key", "token", "private", "credential", "salt"
})

MIN_OVERWRITE_PASSES: Final[int] = 1


def _is_sensitive_key(key: str) -> bool:
    """Check if a configuration key might contain sensitive data."""
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS)


def _get_default_data_dir() -> Path:
    """Get OS-appropriate default data directory."""
    system = platform.system().lower()

    if system == "windows":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
    elif system == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:  # Linux and others
        base = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))

    return base / "CaptureVault"


def _get_default_encrypted_dir() -> Path:
    return _get_default_data_dir() / "encrypted"


def _get_default_quarantine_dir() -> Path:
    return _get_default_data_dir() / ".quarantine"


def _get_default_log_dir() -> Path:
    """Get OS-appropriate default log directory."""
    system = platform.system().lower()

    if system == "windows":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
        return base / "CaptureVault" / "Logs"
    elif system == "darwin":
        return Path.home() / "Library" / "Logs" / "CaptureVault"
    else:
        return Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state")) / "CaptureVault" / "logs"


@dataclass(frozen=True, slots=True)
class PathConfig:
    """Directories used by the pipeline."""

    encrypted_dir: Path = field(default_factory=_get_default_encrypted_dir)
    quarantine_dir: Path = field(default_factory=_get_default_quarantine_dir)
    log_dir: Path = field(default_factory=_get_default_log_dir)

    def __post_init__(self) -> None:
        for field_name in ("encrypted_dir", "quarantine_dir", "log_dir"):
            path = getattr(self, field_name)
            if not path.is_absolute():
                raise ValueError(f"{field_name} must be an absolute path: {path}")

        # Destination and quarantine paths share a file name, so the roots must differ
        if self.encrypted_dir.resolve() == self.quarantine_dir.resolve():
            raise ValueError("encrypted_dir and quarantine_dir must be different directories")


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Pipeline tuning."""

    overwrite_passes: int = 3

    def __post_init__(self) -> None:
        if self.overwrite_passes < MIN_OVERWRITE_PASSES:
            raise ValueError(f"overwrite_passes must be at least {MIN_OVERWRITE_PASSES}")


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Immutable logging configuration."""

    level: str = "INFO"
    max_file_size_bytes: int = 10 * 1024 * 1024  # 10 MB
    backup_count: int = 5
    enable_console: bool = True
    enable_file: bool = True

    def __post_init__(self) -> None:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.level.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {self.level}")


class CaptureVaultConfig:
    """
    Centralized, immutable configuration with environment override support.

    Usage:
        config = CaptureVaultConfig.load()
        config.ensure_directories()
        store = config.paths.encrypted_dir
        passes = config.pipeline.overwrite_passes
    """

    __slots__ = ("_paths", "_pipeline", "_logging", "_frozen", "_config_hash")

    _instance: Optional[CaptureVaultConfig] = None

    def __init__(
        self,
        paths: Optional[PathConfig] = None,
        pipeline: Optional[PipelineConfig] = None,
        logging: Optional[LoggingConfig] = None,
    ) -> None:
        """Initialize configuration. Use CaptureVaultConfig.load() for standard initialization."""
        object.__setattr__(self, "_frozen", False)
        object.__setattr__(self, "_paths", paths or PathConfig())
        object.__setattr__(self, "_pipeline", pipeline or PipelineConfig())
        object.__setattr__(self, "_logging", logging or LoggingConfig())
        object.__setattr__(self, "_config_hash", self._compute_hash())
        object.__setattr__(self, "_frozen", True)

    def _compute_hash(self) -> str:
        config_str = f"{self._paths}|{self._pipeline}|{self._logging}"
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @property
    def paths(self) -> PathConfig:
        return self._paths

    @property
    def pipeline(self) -> PipelineConfig:
        return self._pipeline

    @property
    def logging(self) -> LoggingConfig:
        return self._logging

    @property
    def config_hash(self) -> str:
        return self._config_hash

    @classmethod
    def load(cls, env_prefix: str = "CAPTUREVAULT") -> CaptureVaultConfig:
        """
        Load configuration with environment variable overrides.

        Environment variables use the prefix followed by SECTION__KEY.

        Examples:
            CAPTUREVAULT_PATHS__ENCRYPTED_DIR=/data/enc
            CAPTUREVAULT_PATHS__QUARANTINE_DIR=/data/tmp
            CAPTUREVAULT_PIPELINE__OVERWRITE_PASSES=1
            CAPTUREVAULT_LOGGING__LEVEL=DEBUG

        Args:
            env_prefix: Prefix for environment variables

        Returns:
            Configured CaptureVaultConfig instance
        """
        env_overrides = cls._parse_env_overrides(env_prefix)

        paths_kwargs: dict[str, Any] = {}
        for name in ("encrypted_dir", "quarantine_dir", "log_dir"):
            if f"paths.{name}" in env_overrides:
                paths_kwargs[name] = Path(env_overrides[f"paths.{name}"])

        pipeline_kwargs: dict[str, Any] = {}
        if "pipeline.overwrite_passes" in env_overrides:
            pipeline_kwargs["overwrite_passes"] = int(env_overrides["pipeline.overwrite_passes"])

        logging_kwargs: dict[str, Any] = {}
        if "logging.level" in env_overrides:
            logging_kwargs["level"] = env_overrides["logging.level"]
        if "logging.enable_console" in env_overrides:
            logging_kwargs["enable_console"] = env_overrides["logging.enable_console"].lower() == "true"
        if "logging.enable_file" in env_overrides:
            logging_kwargs["enable_file"] = env_overrides["logging.enable_file"].lower() == "true"

        return cls(
            paths=PathConfig(**paths_kwargs) if paths_kwargs else None,
            pipeline=PipelineConfig(**pipeline_kwargs) if pipeline_kwargs else None,
            logging=LoggingConfig(**logging_kwargs) if logging_kwargs else None,
        )

    @staticmethod
    def _parse_env_overrides(prefix: str) -> dict[str, str]:
        """Parse environment variables with the given prefix."""
        overrides: dict[str, str] = {}
        prefix_upper = f"{prefix.upper()}_"

        for key, value in os.environ.items():
            if key.startswith(prefix_upper):
                # CAPTUREVAULT_SECTION__KEY -> section.key
                config_key = key[len(prefix_upper):].lower().replace("__", ".")

                if _is_sensitive_key(config_key):
                    continue

                overrides[config_key] = value

        return overrides

    @classmethod
    def get_instance(cls) -> CaptureVaultConfig:
        """Get or create the process-wide configuration instance."""
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance. Use only for testing."""
        cls._instance = None

    def ensure_directories(self) -> None:
        """Create the store, quarantine and log directories owner-only."""
        directories = [
            self._paths.encrypted_dir,
            self._paths.quarantine_dir,
            self._paths.log_dir,
        ]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

            if platform.system().lower() != "windows":
                directory.chmod(stat.S_IRWXU)  # 700

    def __repr__(self) -> str:
        return f"CaptureVaultConfig(hash={self._config_hash})"

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent modification after initialization."""
        if hasattr(self, "_frozen") and self._frozen:
            raise AttributeError("CaptureVaultConfig is immutable after initialization")
        super().__setattr__(name, value)
