"""Loading of built-in and user-supplied templates."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

BUILTIN_DIR = Path(__file__).parent / "builtin"
DEFAULT_BUILTIN = "android/build.gradle.kts"


def list_builtin_templates() -> list[str]:
    """Return names of templates shipped with the package, sorted."""
    return sorted(
        path.relative_to(BUILTIN_DIR).as_posix()
        for path in BUILTIN_DIR.rglob("*")
        if path.is_file()
    )


def load_builtin_template(name: str = DEFAULT_BUILTIN) -> str:
    """Read a built-in template by name (e.g. "android/build.gradle.kts").

    Raises:
        ValueError: If no built-in template has that name
    """
    if name not in list_builtin_templates():
        raise ValueError(
            f"Unknown built-in template: {name}. Available: {', '.join(list_builtin_templates())}"
        )
    logger.debug("Loading built-in template %s", name)
    return (BUILTIN_DIR / name).read_text(encoding="utf-8")


def load_template_text(path: Path | None = None, builtin: str | None = None) -> str:
    """Resolve template text from a file path or a built-in name.

    A path takes priority; with neither given the default built-in is used.

    Raises:
        FileNotFoundError: If path does not exist
    """
    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"Template not found: {path}")
        return path.read_text(encoding="utf-8")
    return load_builtin_template(builtin or DEFAULT_BUILTIN)
