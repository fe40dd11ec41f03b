"""Whitelabel configuration system.

Configuration is primarily YAML-based with minimal CLI overrides (--output,
--permissive, --trim-blocks). Supports environment variable substitution
(${VAR}) in config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.whitelabel/config.yaml
3. ./whitelabel.yaml
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from whitelabel.templates.loader import DEFAULT_BUILTIN

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class RenderConfig:
    """Render behaviour.

    Attributes:
        strict: Fail on names missing from the context (otherwise render empty)
        trim_blocks: Remove lines holding only a section tag
    """

    strict: bool = True
    trim_blocks: bool = False


@dataclass
class TemplateConfig:
    """Template selection.

    Attributes:
        path: Template file path (takes priority over builtin)
        builtin: Name of a template shipped with the package
    """

    path: str | None = None
    builtin: str = DEFAULT_BUILTIN


@dataclass
class OutputConfig:
    """Output configuration.

    Attributes:
        filename: File name written for each customer by `build`
        directory: Output root for `build`
    """

    filename: str = "build.gradle.kts"
    directory: str = "build/whitelabel"

    def __post_init__(self) -> None:
        """Validate output configuration."""
        if not self.filename or "/" in self.filename or "\\" in self.filename:
            raise ValueError(f"Output filename must be a plain file name (got {self.filename!r})")


@dataclass
class ContextConfig:
    """Context file handling.

    Attributes:
        expand_env: Substitute ${VAR} references in context files
    """

    expand_env: bool = True


@dataclass
class CIConfig:
    """CI/CD-specific configuration.

    Attributes:
        fail_fast: Stop a build at the first failing customer
        json_output: Use JSON output format
    """

    fail_fast: bool = False
    json_output: bool = False


@dataclass
class WhitelabelConfig:
    """Top-level Whitelabel configuration.

    CLI provides only per-run overrides.

    Attributes:
        render: Render behaviour
        template: Template selection
        output: Output locations
        context: Context file handling
        ci: CI/CD settings
    """

    render: RenderConfig = field(default_factory=RenderConfig)
    template: TemplateConfig = field(default_factory=TemplateConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    context: ContextConfig = field(default_factory=ContextConfig)
    ci: CIConfig = field(default_factory=CIConfig)

    # Runtime overrides (set by CLI)
    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path

    def template_path(self) -> Path | None:
        """Resolve the configured template path relative to the config file."""
        if self.template.path is None:
            return None
        path = Path(self.template.path)
        if not path.is_absolute() and self._config_path is not None:
            base = self._config_path.parent
            if base.name == ".whitelabel":
                base = base.parent
            path = base / path
        return path


# =============================================================================
# Environment Variable Substitution
# =============================================================================

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax for environment variable substitution.
    Example: ${KEYSTORE_PASSWORD} -> value of KEYSTORE_PASSWORD

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted

    Raises:
        ValueError: If a referenced variable is not set
    """
    if isinstance(value, str):

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return _ENV_VAR_RE.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.whitelabel/config.yaml
    2. ./whitelabel.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".whitelabel" / "config.yaml",
        start_path / "whitelabel.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def load_config_from_dict(data: dict[str, Any]) -> WhitelabelConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        WhitelabelConfig instance
    """
    data = substitute_env_vars(data)

    config = WhitelabelConfig()

    if "render" in data:
        render_data = data["render"] or {}
        config.render = RenderConfig(
            strict=render_data.get("strict", config.render.strict),
            trim_blocks=render_data.get("trim_blocks", config.render.trim_blocks),
        )

    if "template" in data:
        template_data = data["template"] or {}
        config.template = TemplateConfig(
            path=template_data.get("path"),
            builtin=template_data.get("builtin", config.template.builtin),
        )

    if "output" in data:
        output_data = data["output"] or {}
        config.output = OutputConfig(
            filename=output_data.get("filename", config.output.filename),
            directory=output_data.get("directory", config.output.directory),
        )

    if "context" in data:
        context_data = data["context"] or {}
        config.context = ContextConfig(
            expand_env=context_data.get("expand_env", config.context.expand_env),
        )

    if "ci" in data:
        ci_data = data["ci"] or {}
        config.ci = CIConfig(
            fail_fast=ci_data.get("fail_fast", False),
            json_output=ci_data.get("json_output", False),
        )

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> WhitelabelConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        WhitelabelConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {found_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {found_path}")
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = WhitelabelConfig()

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return f'''# Whitelabel Configuration

# Render behaviour
render:
  strict: true         # fail on names missing from the context
  trim_blocks: false   # drop lines that only hold a section tag

# Template selection (path wins over builtin)
template:
  # path: "templates/build.gradle.kts"
  builtin: "{DEFAULT_BUILTIN}"

# Output of `whitelabel build`
output:
  filename: "build.gradle.kts"
  directory: "build/whitelabel"

# Context files
context:
  expand_env: true     # substitute ${{VAR}} from the environment

# CI/CD settings
ci:
  fail_fast: false
  json_output: false
'''
