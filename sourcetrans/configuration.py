"""Prepper-backed configuration loader for sourcetrans."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Mapping, Sequence

from dotenv import dotenv_values
from prepper import (
    Field,
    IoError,
    SchemaError,
    SchemaModel,
    ValidationError,
    model_validator,
)
from prepper.config import ConfigInstance
from prepper.loaders import _parse_file, _path_to_source, discover_file_paths
from prepper.merge import merge_layer
from prepper.provenance import ProvenanceRecorder

from .errors import TranslationProviderConfigurationError
from .providers import DEFAULT_REVERSO_ENDPOINT, normalise_provider_name

APP_NAME = "SourceTrans"


class SourceTransConfig(SchemaModel):
    """Schema describing all supported configuration options."""

    SOURCETRANS_PROVIDER: Literal["reverso", "openai", "azure_openai", "echo"] = Field(
        default="reverso",
        description="Translation backend used for comments.",
    )
    REVERSO_ENDPOINT: str = Field(default=DEFAULT_REVERSO_ENDPOINT)
    REVERSO_TIMEOUT: float = Field(
        default=60.0,
        description="Seconds to wait for one Reverso response.",
    )
    SOURCETRANS_USE_CORRECTOR: bool = Field(default=True)
    SOURCETRANS_MAX_TRANSLATION_CHARS: int = Field(default=800)
    SOURCETRANS_WORKERS: int = Field(
        default=1,
        description="Concurrent translation requests; 1 keeps requests sequential.",
    )
    OPENAI_API_KEY: str | None = Field(default=None, secret=True)
    OPENAI_MODEL: str | None = Field(default=None)
    AZURE_OPENAI_API_KEY: str | None = Field(default=None, secret=True)
    AZURE_OPENAI_ENDPOINT: str | None = Field(default=None)
    AZURE_OPENAI_API_VERSION: str | None = Field(default=None)
    AZURE_OPENAI_DEPLOYMENT_NAME: str | None = Field(default=None)
    SOURCETRANS_PROVIDER_DEBUG: bool = Field(default=False)

    @model_validator(mode="before")
    def _normalise_provider(data: Any) -> Any:
        if isinstance(data, dict):
            raw_value = data.get("SOURCETRANS_PROVIDER")
            if isinstance(raw_value, str):
                data["SOURCETRANS_PROVIDER"] = normalise_provider_name(raw_value)
        return data


@lru_cache(maxsize=1)
def _load_config_instance(app_dir: Path | None = None) -> ConfigInstance:
    """Load configuration layers once and cache the immutable instance."""

    base_dir = app_dir or Path.cwd()
    try:
        provenance = ProvenanceRecorder()
        combined = _load_discovered_yaml(app_dir=base_dir, provenance=provenance)
        _merge_env_sources(
            combined,
            provenance=provenance,
            app_dir=base_dir,
            schema=SourceTransConfig,
        )

        model = SourceTransConfig.validate(combined, provenance=provenance)
        _validate_provider_settings(model)

        return ConfigInstance(
            model=model,
            provenance=provenance,
            env_prefix=None,
            schema_cls=SourceTransConfig,
        )
    except IoError as exc:
        raise TranslationProviderConfigurationError(
            f"Configuration files could not be read: {exc}"
        ) from exc
    except SchemaError as exc:
        raise TranslationProviderConfigurationError(
            f"Configuration schema error: {exc}"
        ) from exc
    except ValidationError as exc:
        issues = _format_validation_errors(exc.to_dict())
        raise TranslationProviderConfigurationError(issues) from exc


def _load_discovered_yaml(
    *,
    app_dir: Path,
    provenance: ProvenanceRecorder,
) -> dict[str, Any]:
    """Load YAML configuration files using Prepper's discovery rules."""

    result: dict[str, Any] = {}
    discovered = discover_file_paths(
        APP_NAME,
        "yaml",
        app_dir=app_dir,
        extra_paths=None,
    )
    for path, label in discovered:
        parsed = _parse_file(path, "yaml")
        if not isinstance(parsed, Mapping):
            raise IoError(
                f"Invalid configuration file {path}: expected a mapping at the root."
            )
        source = _path_to_source(label, "yaml", path)
        merge_layer(result, parsed, provenance=provenance, source=source, layer="file")
    return result


def _merge_env_sources(
    target: dict[str, Any],
    *,
    provenance: ProvenanceRecorder,
    app_dir: Path,
    schema: type[SchemaModel],
) -> None:
    """Merge .env and process environment variables into the target mapping."""

    allowed = set(schema.__field_infos__.keys())

    def merge_values(values: Mapping[str, str], *, source_prefix: str) -> None:
        for key, value in sorted(values.items()):
            if key not in allowed:
                continue
            merge_layer(
                target,
                {key: value},
                provenance=provenance,
                source=f"env:{source_prefix}:{key}",
                layer="env",
            )

    dotenv_path = app_dir / ".env"
    if dotenv_path.exists():
        dotenv_content = dotenv_values(dotenv_path)
        merge_values(
            {k: v for k, v in dotenv_content.items() if v is not None},
            source_prefix=".env",
        )

    merge_values(
        {k: v for k, v in os.environ.items() if isinstance(v, str)},
        source_prefix="process",
    )


def _validate_provider_settings(settings: SourceTransConfig) -> None:
    provider = settings.SOURCETRANS_PROVIDER
    errors: list[str] = []

    if settings.SOURCETRANS_MAX_TRANSLATION_CHARS <= 0:
        errors.append("SOURCETRANS_MAX_TRANSLATION_CHARS must be a positive number.")
    if settings.SOURCETRANS_WORKERS < 1:
        errors.append("SOURCETRANS_WORKERS must be at least 1.")

    if provider == "reverso":
        if not settings.REVERSO_ENDPOINT:
            errors.append("REVERSO_ENDPOINT is required when SOURCETRANS_PROVIDER is 'reverso'.")
    elif provider == "openai":
        if not settings.OPENAI_API_KEY:
            errors.append(
                "OPENAI_API_KEY is required when SOURCETRANS_PROVIDER is 'openai'."
            )
    elif provider == "azure_openai":
        missing = [
            name
            for name, value in {
                "AZURE_OPENAI_API_KEY": settings.AZURE_OPENAI_API_KEY,
                "AZURE_OPENAI_ENDPOINT": settings.AZURE_OPENAI_ENDPOINT,
                "AZURE_OPENAI_API_VERSION": settings.AZURE_OPENAI_API_VERSION,
                "AZURE_OPENAI_DEPLOYMENT_NAME": settings.AZURE_OPENAI_DEPLOYMENT_NAME,
            }.items()
            if not value
        ]
        if missing:
            errors.append(
                "The following Azure OpenAI settings must be provided when "
                f"SOURCETRANS_PROVIDER is 'azure_openai': {', '.join(missing)}."
            )

    if errors:
        bullet_list = "\n".join(f"- {message}" for message in errors)
        raise TranslationProviderConfigurationError(
            "Configuration validation errors detected:\n" + bullet_list
        )


def _format_validation_errors(entries: Sequence[dict[str, Any]]) -> str:
    details: list[str] = []
    for entry in entries:
        path = entry.get("path") or []
        if isinstance(path, (list, tuple)):
            location = ".".join(str(part) for part in path if part not in {None, ""})
        else:
            location = str(path)
        message = str(entry.get("message") or entry.get("msg") or "Invalid value")
        source = entry.get("source")
        origin = f" (source: {source})" if source else ""
        prefix = f"{location}: " if location else ""
        details.append(f"- {prefix}{message}{origin}")
    return "Configuration validation errors detected:\n" + "\n".join(details)


def get_config(app_dir: Path | None = None) -> ConfigInstance:
    """Return the immutable configuration instance."""

    return _load_config_instance(app_dir=app_dir)


def get_settings(app_dir: Path | None = None) -> SourceTransConfig:
    """Return the validated schema model for typed access."""

    return get_config(app_dir=app_dir).model()
