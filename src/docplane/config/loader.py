"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (DOCPLANE__SECTION__KEY)
3. Repo config (.docplane/config.yaml)
4. Global config (~/.config/docplane/config.yaml)
5. Built-in defaults (lowest priority)
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from docplane.config.constants import DOCPLANE_DIR
from docplane.config.models import (
    DocPlaneConfig,
    DocsConfig,
    IndexConfig,
    LoggingConfig,
    NamingConfig,
    OrphanConfig,
    TerminologyConfig,
)
from docplane.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/docplane/config.yaml").expanduser()


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    except OSError as e:
        raise ConfigError.parse_error(str(path), e.strerror or str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source."""

    class DocPlaneSettings(BaseSettings):
        """Root config. Env vars: DOCPLANE__LOGGING__LEVEL, DOCPLANE__DOCS__BASE_DIR, etc."""

        model_config = SettingsConfigDict(
            env_prefix="DOCPLANE__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        docs: DocsConfig = DocsConfig()
        terminology: TerminologyConfig = TerminologyConfig()
        naming: NamingConfig = NamingConfig()
        orphans: OrphanConfig = OrphanConfig()
        index: IndexConfig = IndexConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml files
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return DocPlaneSettings


def load_config(
    project_root: Path | None = None,
    *,
    config_file: Path | None = None,
    **kwargs: Any,
) -> DocPlaneConfig:
    """Load config: defaults < global yaml < repo yaml < env vars < kwargs.

    Args:
        project_root: Project root to load config from.
                      Defaults to current working directory.
        config_file: Explicit repo config, replacing .docplane/config.yaml.
                     Unlike the default location, it must exist.
        **kwargs: Override values (highest precedence).

    Returns:
        Fully resolved, frozen configuration snapshot.

    Raises:
        ConfigError: On a missing explicit config file, invalid YAML syntax
            or validation errors.
    """
    project_root = project_root or Path.cwd()

    if config_file is not None:
        if not config_file.is_file():
            raise ConfigError.file_not_found(str(config_file))
        yaml_config = _load_yaml(config_file)
    else:
        yaml_config = _load_yaml(project_root / DOCPLANE_DIR / "config.yaml")

    global_config = _load_yaml(GLOBAL_CONFIG_PATH)
    if global_config:
        yaml_config = _deep_merge(global_config, yaml_config)

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
    return DocPlaneConfig.model_validate(settings.model_dump())
