"""Typed settings loader for the completion pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Tuple
import json
import os


_MISSING = object()
_VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class SettingsError(ValueError):
    """Raised when settings cannot be loaded or validated."""


@dataclass(frozen=True)
class ProviderSettings:
    model: Optional[str] = None
    api_key_env: str = "FIREWORKS_API_KEY"
    base_url: Optional[str] = None

    def __post_init__(self) -> None:
        model = self.model.strip() if self.model else None
        if model == "":
            model = None

        api_key_env = self.api_key_env.strip()
        if not api_key_env:
            raise SettingsError("provider.api_key_env cannot be empty.")

        base_url = self.base_url.strip() if self.base_url else None
        if base_url == "":
            base_url = None

        object.__setattr__(self, "model", model)
        object.__setattr__(self, "api_key_env", api_key_env)
        object.__setattr__(self, "base_url", base_url)


@dataclass(frozen=True)
class TimeoutSettings:
    """Per-mode request timeout overrides in milliseconds.

    ``None`` keeps the provider preset. ``0`` disables the mode: requests
    resolve immediately with no completions.
    """

    multiline: Optional[int] = None
    singleline: Optional[int] = None

    def __post_init__(self) -> None:
        if self.multiline is not None and self.multiline < 0:
            raise SettingsError("timeouts.multiline must be >= 0.")

        if self.singleline is not None and self.singleline < 0:
            raise SettingsError("timeouts.singleline must be >= 0.")


@dataclass(frozen=True)
class RuntimeSettings:
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        log_level = self.log_level.strip().upper()
        if log_level not in _VALID_LOG_LEVELS:
            raise SettingsError(
                "runtime.log_level must be one of: " + ", ".join(sorted(_VALID_LOG_LEVELS))
            )

        object.__setattr__(self, "log_level", log_level)


@dataclass(frozen=True)
class AutocompleteSettings:
    provider: ProviderSettings
    timeouts: TimeoutSettings
    runtime: RuntimeSettings


def load_settings(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AutocompleteSettings:
    """Load validated settings from JSON config and environment overrides."""

    env = dict(environ) if environ is not None else dict(os.environ)
    config = _load_config(config_path)

    provider = ProviderSettings(
        model=_read_value(
            config,
            env,
            section="provider",
            key="model",
            env_key="INFILL_PROVIDER_MODEL",
            caster=_as_optional_str,
            default=None,
        ),
        api_key_env=_read_value(
            config,
            env,
            section="provider",
            key="api_key_env",
            env_key="INFILL_PROVIDER_API_KEY_ENV",
            caster=_as_str,
            default="FIREWORKS_API_KEY",
        ),
        base_url=_read_value(
            config,
            env,
            section="provider",
            key="base_url",
            env_key="INFILL_PROVIDER_BASE_URL",
            caster=_as_optional_str,
            default=None,
        ),
    )

    timeouts = TimeoutSettings(
        multiline=_read_value(
            config,
            env,
            section="timeouts",
            key="multiline_ms",
            env_key="INFILL_TIMEOUTS_MULTILINE_MS",
            caster=_as_optional_int,
            default=None,
        ),
        singleline=_read_value(
            config,
            env,
            section="timeouts",
            key="singleline_ms",
            env_key="INFILL_TIMEOUTS_SINGLELINE_MS",
            caster=_as_optional_int,
            default=None,
        ),
    )

    runtime = RuntimeSettings(
        log_level=_read_value(
            config,
            env,
            section="runtime",
            key="log_level",
            env_key="INFILL_RUNTIME_LOG_LEVEL",
            caster=_as_str,
            default="INFO",
        ),
    )

    return AutocompleteSettings(provider=provider, timeouts=timeouts, runtime=runtime)


def resolve_env_secret(env_name: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Resolve a secret value from environment by indirection key."""

    env = environ if environ is not None else os.environ
    value = env.get(env_name)
    if value is None:
        raise SettingsError(f"Required secret environment variable '{env_name}' is not set.")

    if not value.strip():
        raise SettingsError(f"Secret environment variable '{env_name}' cannot be empty.")

    return value


def settings_summary(settings: AutocompleteSettings) -> dict:
    """Render redacted settings for diagnostics."""

    return {
        "provider": {
            "model": settings.provider.model,
            "api_key_env": settings.provider.api_key_env,
            "base_url": settings.provider.base_url,
        },
        "timeouts": {
            "multiline_ms": settings.timeouts.multiline,
            "singleline_ms": settings.timeouts.singleline,
        },
        "runtime": {
            "log_level": settings.runtime.log_level,
        },
    }


def _load_config(config_path: Optional[Path]) -> Mapping[str, Any]:
    if config_path is None:
        return {}

    resolved = config_path.expanduser()
    if not resolved.exists():
        raise SettingsError(f"Config file does not exist: {resolved}")

    try:
        with resolved.open("r", encoding="utf-8") as handle:
            loaded = json.load(handle)
    except json.JSONDecodeError as exc:
        raise SettingsError(f"Config file is not valid JSON: {resolved}") from exc

    if not isinstance(loaded, dict):
        raise SettingsError("Config root must be an object.")

    return loaded


def _read_value(
    config: Mapping[str, Any],
    environ: Mapping[str, str],
    *,
    section: str,
    key: str,
    env_key: str,
    caster: Callable[[Any], Any],
    default: Any = _MISSING,
) -> Any:
    raw_value, source = _resolve_raw_value(
        config=config,
        environ=environ,
        section=section,
        key=key,
        env_key=env_key,
        default=default,
    )

    try:
        return caster(raw_value)
    except SettingsError:
        raise
    except (TypeError, ValueError) as exc:
        raise SettingsError(
            f"Invalid value for {section}.{key} from {source}: {raw_value!r}"
        ) from exc


def _resolve_raw_value(
    *,
    config: Mapping[str, Any],
    environ: Mapping[str, str],
    section: str,
    key: str,
    env_key: str,
    default: Any,
) -> Tuple[Any, str]:
    env_value = environ.get(env_key)
    if env_value not in (None, ""):
        return env_value, "environment"

    section_map = config.get(section)
    if section_map is not None and not isinstance(section_map, Mapping):
        raise SettingsError(f"Config section '{section}' must be an object.")

    if isinstance(section_map, Mapping) and key in section_map:
        return section_map[key], "config"

    if default is not _MISSING:
        return default, "default"

    raise SettingsError(
        f"Missing required setting '{section}.{key}'. "
        f"Provide it in config or via '{env_key}'."
    )


def _as_str(value: Any) -> str:
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise SettingsError("Value cannot be empty.")
        return text

    raise SettingsError("Expected string value.")


def _as_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        return text if text else None
    raise SettingsError("Expected string value.")


def _as_optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None

    if isinstance(value, bool):
        raise SettingsError("Boolean is not a valid integer value.")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        text = value.strip()
        return int(text) if text else None

    raise SettingsError("Expected integer value.")
