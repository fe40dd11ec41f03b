"""Shared pytest fixtures for Whitelabel tests.

Fixtures are organized by category:
- Path fixtures: Sample contexts, manifests and templates on disk
- Configuration fixtures: Test configs for various scenarios
- Context fixtures: In-memory render contexts
"""

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Drop handlers installed by CLI runs (they hold closed test streams)."""
    yield
    logger = logging.getLogger("whitelabel")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def contexts_dir(fixtures_dir: Path) -> Path:
    """Return the path to sample context files."""
    return fixtures_dir / "contexts"


@pytest.fixture
def templates_dir(fixtures_dir: Path) -> Path:
    """Return the path to sample template files."""
    return fixtures_dir / "templates"


@pytest.fixture
def acme_context_file(contexts_dir: Path) -> Path:
    """Return the full Android context for customer 'acme'."""
    return contexts_dir / "acme.yaml"


@pytest.fixture
def manifest_file(contexts_dir: Path) -> Path:
    """Return the two-customer build manifest."""
    return contexts_dir / "customers.yaml"


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def minimal_config() -> dict[str, Any]:
    """Return a minimal valid Whitelabel configuration."""
    return {
        "render": {
            "strict": True,
        }
    }


@pytest.fixture
def full_config() -> dict[str, Any]:
    """Return a complete Whitelabel configuration with all options."""
    return {
        "render": {
            "strict": False,
            "trim_blocks": True,
        },
        "template": {
            "path": "templates/build.gradle.kts",
            "builtin": "android/build.gradle.kts",
        },
        "output": {
            "filename": "app.gradle.kts",
            "directory": "out",
        },
        "context": {
            "expand_env": False,
        },
        "ci": {
            "fail_fast": True,
            "json_output": True,
        },
    }


# =============================================================================
# Context Fixtures
# =============================================================================


@pytest.fixture
def android_context() -> dict[str, Any]:
    """Return a context covering every name in the built-in Android template."""
    return {
        "namespace": "com.acme.fieldapp",
        "appName": "Acme Field",
        "signingConfigs": [
            {
                "name": "release",
                "keyAlias": "acme-upload",
                "keyPassword": "key-secret",
                "storeFile": "keystores/acme.jks",
                "storePassword": "store-secret",
            },
        ],
        "buildTypes": [
            {
                "name": "release",
                "isMinifyEnabled": True,
                "isShrinkResources": True,
                "resValue": 'resValue("string", "flavor", "acme")',
                "signingConfig": 'signingConfigs.getByName("release")',
            },
        ],
        "dependencies": [
            {"name": "implementation", "value": "androidx.core:core-ktx:1.13.1"},
        ],
    }
