"""Render context loading.

Contexts are YAML or JSON documents whose top level is a mapping, e.g.:

    namespace: com.acme.app
    appName: Acme
    signingConfigs:
      - name: release
        keyAlias: upload
        keyPassword: ${KEY_PASSWORD}
        storeFile: keystore.jks
        storePassword: ${STORE_PASSWORD}

A build manifest groups contexts per customer, with shared defaults:

    defaults:
      dependencies:
        - {name: implementation, value: "androidx.core:core-ktx:1.13.1"}
    customers:
      acme:
        namespace: com.acme.app
        appName: Acme
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

import yaml

from whitelabel.config import substitute_env_vars

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}
JSON_SUFFIXES = {".json"}

# Customer ids become output directory names
_CUSTOMER_ID_RE = re.compile(r"[A-Za-z0-9_.-]+")


class ContextError(ValueError):
    """Raised when a context or manifest file is unusable."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


def _read_document(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"Context file not found: {path}")

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    try:
        if suffix in JSON_SUFFIXES:
            return json.loads(text)
        if suffix in YAML_SUFFIXES:
            return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ContextError(f"Invalid {suffix[1:].upper()}: {e}", path) from e

    raise ContextError(
        f"Unsupported context format '{suffix}' (expected .yaml, .yml or .json)", path
    )


def _expand(data: Any, path: Path) -> Any:
    try:
        return substitute_env_vars(data)
    except ValueError as e:
        raise ContextError(str(e), path) from e


def load_context(path: Path, expand_env: bool = True) -> dict[str, Any]:
    """Load a render context from a YAML or JSON file.

    Args:
        path: Context file
        expand_env: Substitute ${VAR} references from the environment

    Returns:
        Context mapping

    Raises:
        FileNotFoundError: If path does not exist
        ContextError: If the file is malformed or not a mapping
    """
    data = _read_document(path)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ContextError("Top level must be a mapping", path)

    if expand_env:
        data = _expand(data, path)

    logger.debug("Loaded context from %s (%d keys)", path, len(data))
    return data


def apply_overrides(context: dict[str, Any], overrides: list[str]) -> dict[str, Any]:
    """Apply KEY=VALUE overrides to the top level of a context.

    Args:
        context: Base context (not modified)
        overrides: Entries of the form "key=value"

    Returns:
        New context with overrides applied

    Raises:
        ContextError: If an entry has no '=' or an empty key
    """
    merged = dict(context)
    for entry in overrides:
        key, sep, value = entry.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ContextError(f"Invalid override '{entry}' (expected KEY=VALUE)")
        merged[key] = value
    return merged


def load_manifest(path: Path, expand_env: bool = True) -> dict[str, dict[str, Any]]:
    """Load a multi-customer build manifest.

    Each customer context is the manifest's `defaults` overlaid by the
    customer's own keys. Customer order follows the file.

    Args:
        path: Manifest file
        expand_env: Substitute ${VAR} references from the environment

    Returns:
        Mapping of customer id to its merged context

    Raises:
        FileNotFoundError: If path does not exist
        ContextError: If the manifest structure is invalid
    """
    data = _read_document(path)
    if not isinstance(data, dict):
        raise ContextError("Top level must be a mapping", path)

    defaults = data.get("defaults") or {}
    customers = data.get("customers")
    if not isinstance(defaults, dict):
        raise ContextError("'defaults' must be a mapping", path)
    if not isinstance(customers, dict) or not customers:
        raise ContextError("'customers' must be a non-empty mapping", path)

    contexts: dict[str, dict[str, Any]] = {}
    for customer, overrides in customers.items():
        customer = str(customer)
        if not _CUSTOMER_ID_RE.fullmatch(customer) or customer in (".", ".."):
            raise ContextError(f"Invalid customer id '{customer}'", path)
        if overrides is None:
            overrides = {}
        if not isinstance(overrides, dict):
            raise ContextError(f"Customer '{customer}' must be a mapping", path)
        context = {**defaults, **overrides}
        if expand_env:
            context = _expand(context, path)
        contexts[customer] = context

    logger.debug("Loaded manifest %s with %d customers", path, len(contexts))
    return contexts
