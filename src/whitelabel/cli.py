"""Whitelabel CLI interface.

Commands:
- render: Render one template against one context
- build: Render a template for every customer in a manifest
- validate: Check template syntax (and optionally a context against it)
- templates: List built-in templates
- init: Initialize Whitelabel configuration

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log output
- --version: Show version and exit
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer

from whitelabel import __version__
from whitelabel.config import WhitelabelConfig, create_default_config, load_config
from whitelabel.context import ContextError, apply_overrides, load_context, load_manifest
from whitelabel.templates import (
    ParseError,
    TemplateError,
    TemplateRenderer,
    list_builtin_templates,
    load_template_text,
    parse,
)
from whitelabel.utils.logging import configure_from_cli, get_logger

app = typer.Typer(
    name="whitelabel",
    help="Render per-customer build files from mustache-style templates",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: WhitelabelConfig | None = None
_logger = get_logger()


def _get_config() -> WhitelabelConfig:
    return _config if _config is not None else WhitelabelConfig()


def _resolve_template(template: Path | None, builtin: str | None) -> str:
    """Pick template text: explicit path, --builtin, then configuration."""
    config = _get_config()
    if template is not None or builtin is not None:
        return load_template_text(path=template, builtin=builtin)
    return load_template_text(path=config.template_path(), builtin=config.template.builtin)


def _fail(message: str) -> typer.Exit:
    _logger.error(message)
    return typer.Exit(1)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"whitelabel {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON log output",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Whitelabel - per-customer build file generator.

    Renders {{name}} variables and {{#name}}...{{/name}} sections of a build
    template from YAML/JSON contexts.
    """
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except (ValueError, OSError) as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


# =============================================================================
# render command
# =============================================================================


@app.command()
def render(
    template: Annotated[
        Path | None,
        typer.Argument(
            help="Template file (defaults to the configured or built-in template)",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    builtin: Annotated[
        str | None,
        typer.Option(
            "--builtin",
            "-b",
            help="Use a built-in template, e.g. android/build.gradle.kts",
        ),
    ] = None,
    context: Annotated[
        Path | None,
        typer.Option(
            "--context",
            "-x",
            help="Context file (.yaml, .yml or .json)",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    overrides: Annotated[
        list[str] | None,
        typer.Option(
            "--set",
            "-s",
            help="Override a top-level value: KEY=VALUE (repeatable)",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output file (prints to stdout when omitted)",
        ),
    ] = None,
    permissive: Annotated[
        bool,
        typer.Option(
            "--permissive",
            help="Render missing names as empty strings instead of failing",
        ),
    ] = False,
    trim_blocks: Annotated[
        bool,
        typer.Option(
            "--trim-blocks",
            help="Remove lines that only hold a section tag",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Preview output without writing files",
        ),
    ] = False,
) -> None:
    """Render a template against a single context.

    Exit codes:
        0: Rendered successfully
        1: Template, context or render error
    """
    config = _get_config()
    renderer = TemplateRenderer(
        strict=config.render.strict and not permissive,
        trim_blocks=config.render.trim_blocks or trim_blocks,
    )

    try:
        template_text = _resolve_template(template, builtin)
        data: dict[str, Any] = {}
        if context is not None:
            data = load_context(context, expand_env=config.context.expand_env)
        data = apply_overrides(data, overrides or [])
    except (FileNotFoundError, ValueError) as e:
        raise _fail(str(e))

    try:
        if dry_run:
            preview = renderer.preview(template_text, data, max_lines=100)
            typer.echo("\n--- Render Preview ---\n")
            typer.echo(preview)
            typer.echo("\n--- End Preview ---")
            _logger.info("Dry run complete - no files written")
        elif output is not None:
            renderer.render_to_file(template_text, data, output)
            _logger.info(f"Rendered to {output}")
        else:
            typer.echo(renderer.render(template_text, data), nl=False)
    except TemplateError as e:
        raise _fail(f"Render failed: {e}")
    except OSError as e:
        raise _fail(f"Could not write output: {e}")


# =============================================================================
# build command
# =============================================================================


@app.command()
def build(
    manifest: Annotated[
        Path,
        typer.Argument(
            help="Build manifest with 'defaults' and 'customers'",
            exists=True,
            dir_okay=False,
        ),
    ],
    output_dir: Annotated[
        Path | None,
        typer.Option(
            "--output-dir",
            "-o",
            help="Output root (overrides config)",
        ),
    ] = None,
    template: Annotated[
        Path | None,
        typer.Option(
            "--template",
            "-t",
            help="Template file (overrides config)",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    builtin: Annotated[
        str | None,
        typer.Option(
            "--builtin",
            "-b",
            help="Use a built-in template",
        ),
    ] = None,
    fail_fast: Annotated[
        bool,
        typer.Option(
            "--fail-fast",
            help="Stop at the first failing customer",
        ),
    ] = False,
    permissive: Annotated[
        bool,
        typer.Option(
            "--permissive",
            help="Render missing names as empty strings instead of failing",
        ),
    ] = False,
    trim_blocks: Annotated[
        bool,
        typer.Option(
            "--trim-blocks",
            help="Remove lines that only hold a section tag",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Render every customer without writing files",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print the build report as JSON",
        ),
    ] = False,
) -> None:
    """Render the template once per customer in a manifest.

    Writes <output-dir>/<customer>/<filename> for every customer.

    Exit codes:
        0: All customers rendered
        1: Error before rendering, or every customer failed
        2: Some customers failed
    """
    from whitelabel.models import BuildStatus
    from whitelabel.pipeline import BuildPipeline, PipelineOptions

    config = _get_config()
    options = PipelineOptions.from_config(config)
    options.strict = options.strict and not permissive
    options.trim_blocks = options.trim_blocks or trim_blocks
    options.fail_fast = options.fail_fast or fail_fast
    options.dry_run = dry_run
    root = output_dir or Path(config.output.directory)

    try:
        template_text = _resolve_template(template, builtin)
        contexts = load_manifest(manifest, expand_env=config.context.expand_env)
    except (FileNotFoundError, ValueError) as e:
        raise _fail(str(e))

    _logger.info(f"Manifest: {manifest} ({len(contexts)} customers)")

    try:
        report = BuildPipeline(options).run(template_text, contexts, root)
    except ParseError as e:
        raise _fail(f"Template syntax error: {e}")
    except OSError as e:
        raise _fail(f"Could not write output: {e}")

    _logger.structured(
        logging.INFO,
        "Build finished",
        status=report.status.value,
        rendered=len(report.outputs),
        failed=len(report.errors),
    )

    if json_output or config.ci.json_output:
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        typer.echo(
            f"\n📦 Build {report.status.value}: {len(report.outputs)} rendered, "
            f"{len(report.errors)} failed"
        )
        for entry in report.outputs:
            typer.echo(f"  ✅ {entry.customer} → {entry.path}")
        for error in report.errors:
            typer.echo(f"  ❌ {error.customer}: {error.message}")
        for customer in report.skipped:
            typer.echo(f"  ⏭️  {customer}: skipped")

    if report.status == BuildStatus.COMPLETED:
        raise typer.Exit(0)
    elif report.status == BuildStatus.PARTIAL:
        raise typer.Exit(2)
    else:
        raise typer.Exit(1)


# =============================================================================
# validate command
# =============================================================================


@app.command()
def validate(
    template: Annotated[
        Path,
        typer.Argument(
            help="Path to template to validate",
            exists=True,
            dir_okay=False,
        ),
    ],
    context: Annotated[
        Path | None,
        typer.Option(
            "--context",
            "-x",
            help="Also check that this context satisfies the template",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results as JSON",
        ),
    ] = False,
) -> None:
    """Validate a template.

    Checks syntax and lists the variables and sections it references. With
    --context, also renders in strict mode to catch missing or mistyped values.
    """
    _logger.info(f"Validating template: {template}")

    try:
        source = template.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise _fail(f"Cannot read template {template}: {e}")

    try:
        parsed = parse(source)
    except ParseError as e:
        _logger.error(f"Template syntax error: {e.message}")
        if json_output:
            typer.echo(json.dumps({"valid": False, "error": e.message, "name": e.name,
                                   "line": e.line, "column": e.column}, indent=2))
        else:
            typer.echo(f"❌ Template syntax error at line {e.line}, column {e.column}: {e.message}")
        raise typer.Exit(1)

    context_error: TemplateError | None = None
    if context is not None:
        try:
            data = load_context(context, expand_env=_get_config().context.expand_env)
        except (FileNotFoundError, ContextError) as e:
            raise _fail(str(e))
        try:
            parsed.render(data, strict=True)
        except TemplateError as e:
            context_error = e

    if json_output:
        typer.echo(json.dumps({
            "valid": context_error is None,
            "variables": parsed.variables(),
            "sections": parsed.sections(),
            "error": str(context_error) if context_error else None,
        }, indent=2))
    else:
        typer.echo(f"✅ Template is valid: {template}")
        typer.echo(f"   Variables: {', '.join(parsed.variables()) or '-'}")
        typer.echo(f"   Sections: {', '.join(parsed.sections()) or '-'}")
        if context_error is not None:
            typer.echo(f"❌ Context {context} does not satisfy template: {context_error}")

    raise typer.Exit(1 if context_error else 0)


# =============================================================================
# templates command
# =============================================================================


@app.command()
def templates() -> None:
    """List built-in templates."""
    for name in list_builtin_templates():
        typer.echo(name)


# =============================================================================
# init command
# =============================================================================

SAMPLE_CONTEXT = '''# Sample context for the built-in android/build.gradle.kts template
namespace: "com.example.acme"
appName: "Acme"

signingConfigs:
  - name: release
    keyAlias: "upload"
    keyPassword: "${KEY_PASSWORD}"
    storeFile: "keystores/acme.jks"
    storePassword: "${STORE_PASSWORD}"

buildTypes:
  - name: release
    isMinifyEnabled: true
    isShrinkResources: true
    resValue: 'resValue("string", "app_flavor", "acme")'
    signingConfig: "signingConfigs.getByName(\\"release\\")"

dependencies:
  - name: implementation
    value: "androidx.core:core-ktx:1.13.1"
'''


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing files",
        ),
    ] = False,
) -> None:
    """Initialize Whitelabel configuration.

    Creates .whitelabel/config.yaml and a sample context file for the
    built-in Android template.
    """
    config_dir = Path(".whitelabel")
    config_dir.mkdir(exist_ok=True)

    config_file = config_dir / "config.yaml"
    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_file.write_text(create_default_config(), encoding="utf-8")
    _logger.info(f"Created config: {config_file}")

    context_file = Path("whitelabel.context.yaml")
    if force or not context_file.exists():
        context_file.write_text(SAMPLE_CONTEXT, encoding="utf-8")
        _logger.info(f"Created sample context: {context_file}")

    typer.echo("\n✅ Whitelabel configuration initialized")
    typer.echo(f"   Config: {config_file}")
    typer.echo(f"   Context: {context_file}")
    raise typer.Exit(0)


if __name__ == "__main__":
    app()
