"""White-label build pipeline.

Renders one build file per customer of a manifest. Each customer is an
independent render and write: a failure is recorded in the report and the run
moves on to the next customer unless fail_fast is set.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from whitelabel.config import WhitelabelConfig
from whitelabel.models.build import BuildError, BuildOutput, BuildReport, BuildStatus
from whitelabel.templates import TemplateError, TemplateRenderer

logger = logging.getLogger(__name__)


@dataclass
class PipelineOptions:
    """Options for controlling a build run.

    Attributes:
        strict: Fail a customer on names missing from its context
        trim_blocks: Remove lines holding only a section tag
        fail_fast: Stop on first error (otherwise continue and collect errors)
        filename: File name written in each customer directory
        dry_run: Render without writing files
    """

    strict: bool = True
    trim_blocks: bool = False
    fail_fast: bool = False
    filename: str = "build.gradle.kts"
    dry_run: bool = False

    @classmethod
    def from_config(cls, config: WhitelabelConfig | None) -> "PipelineOptions":
        """Derive options from configuration (defaults if None)."""
        if config is None:
            return cls()
        return cls(
            strict=config.render.strict,
            trim_blocks=config.render.trim_blocks,
            fail_fast=config.ci.fail_fast,
            filename=config.output.filename,
        )


class BuildPipeline:
    """Renders a template once per customer.

    The template is parsed once before any customer is rendered, so a
    malformed template fails the whole run immediately.

    Usage:
        pipeline = BuildPipeline(options)
        report = pipeline.run(template_text, contexts, Path("build/whitelabel"))
    """

    def __init__(self, options: PipelineOptions | None = None) -> None:
        """Initialize the build pipeline.

        Args:
            options: Build options (defaults if None)
        """
        self.options = options or PipelineOptions()
        self._renderer = TemplateRenderer(
            strict=self.options.strict,
            trim_blocks=self.options.trim_blocks,
        )

    def output_path(self, output_dir: Path, customer: str) -> Path:
        """Return the file written for a customer."""
        return output_dir / customer / self.options.filename

    def run(
        self,
        template_text: str,
        contexts: Mapping[str, Mapping[str, Any]],
        output_dir: Path,
    ) -> BuildReport:
        """Render every customer context.

        Args:
            template_text: Template source
            contexts: Customer id to render context, in build order
            output_dir: Root output directory

        Returns:
            BuildReport with outputs and per-customer errors

        Raises:
            ParseError: If the template itself is malformed
        """
        report = BuildReport(output_dir=output_dir, status=BuildStatus.RUNNING)

        # Parse up front; a broken template is not a per-customer failure
        self._renderer.compile(template_text)

        logger.info("Building %d customer(s) into %s", len(contexts), output_dir)
        customers = list(contexts)

        for index, customer in enumerate(customers):
            path = self.output_path(output_dir, customer)
            try:
                content = self._renderer.render(template_text, contexts[customer])
                if not self.options.dry_run:
                    path.parent.mkdir(parents=True, exist_ok=True)
                    path.write_text(content, encoding="utf-8")
                    logger.info("Wrote %s", path)
            except (TemplateError, OSError) as e:
                logger.warning("[%s] %s", customer, e)
                report.add_error(BuildError.from_exception(customer, e))
                if self.options.fail_fast:
                    report.skipped = customers[index + 1:]
                    logger.error("Stopping build after failure in %s", customer)
                    break
                continue

            report.outputs.append(BuildOutput(customer=customer, path=path, size=len(content)))

        report.finish()
        logger.info(
            "Build %s: %d written, %d failed",
            report.status.value,
            len(report.outputs),
            len(report.errors),
        )
        return report
