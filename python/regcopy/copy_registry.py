#!/usr/bin/env python3
"""
Copy Docker images from one registry to another through a local container engine.

Workflow:
1. Log in to the source and destination registries with the container engine
2. Read the source registry catalog and keep repositories matching the include pattern
3. For every tag of every matching repository: pull, retag, push, remove the local copies
4. Log a copy summary and optionally save it as a JSON report

Failures while listing the tags of one repository or while copying one tag are
logged and the run continues with the next item. Login, catalog and pattern
failures abort the run.

Usage examples:
  # Copy everything described by ./application.yaml
  python copy_registry.py

  # Show what would be copied without touching the engine
  python copy_registry.py --dry-run

  # Use another config file and keep a report
  python copy_registry.py --config /etc/regcopy/application.yaml --output reports/copy-report.json
"""

import argparse
import sys
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Pattern

from regcopy.config_manager import ConfigManager, RegistryConfig, compile_include_pattern
from regcopy.engine_client import EngineClient
from regcopy.error_utils import ActionableError, EngineError, RegistryError
from regcopy.logging_utils import get_logger, log_exception, setup_logging
from regcopy.registry_client import RegistryClient
from regcopy.report_utils import format_failures_table, save_json

logger = get_logger(__name__)


@dataclass
class CopyResult:
    """Outcome of copying one image tag"""

    image: str
    tag: str
    success: bool
    failed_step: Optional[str] = None  # pull, tag, push or remove
    error: Optional[str] = None

    @property
    def reference(self) -> str:
        return f"{self.image}:{self.tag}"


@dataclass
class CopySummary:
    """Aggregated outcome of a copy run"""

    dry_run: bool = False
    matched_repositories: List[str] = field(default_factory=list)
    failed_repositories: List[str] = field(default_factory=list)
    results: List[CopyResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def has_failures(self) -> bool:
        return self.failed > 0 or bool(self.failed_repositories)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "repositories_matched": len(self.matched_repositories),
                "repositories_failed": len(self.failed_repositories),
                "images_copied": self.succeeded,
                "images_failed": self.failed,
                "dry_run": self.dry_run,
            },
            "failed_repositories": list(self.failed_repositories),
            "results": [asdict(r) for r in self.results],
        }


class RegistryCopier:
    """Copies image tags from the source registry to the destination registry."""

    def __init__(
        self,
        config_manager: ConfigManager,
        engine: Optional[EngineClient] = None,
        source_client: Optional[RegistryClient] = None,
        dry_run: bool = False,
    ):
        """Initialize RegistryCopier

        Args:
            config_manager: Loaded configuration
            engine: Container engine client (default: built from the configured executable)
            source_client: Registry client for the source (default: built from the config)
            dry_run: If True, only log what would be copied
        """
        self.config_manager = config_manager
        self.source: RegistryConfig = config_manager.get_source_registry()
        self.destination: RegistryConfig = config_manager.get_destination_registry()
        self.engine = engine or EngineClient(config_manager.get_executable())
        self._owns_source_client = source_client is None
        self.source_client = source_client or RegistryClient(
            self.source, timeout=config_manager.get_request_timeout()
        )
        self.cleanup_on_failure = config_manager.get_cleanup_on_failure()
        self.dry_run = dry_run
        self.logger = get_logger(self.__class__.__name__)

    def login(self) -> None:
        """Log the engine in to both registries.

        Raises:
            EngineError: If either login fails
        """
        for side, registry in (("source", self.source), ("destination", self.destination)):
            self.logger.info(f"Logging in to {side} registry {registry.host} as {registry.login}")
            try:
                self.engine.login(registry.host, registry.login, registry.password)
            except EngineError:
                self.logger.error(f"Unable to login to {side} registry {registry.host}")
                raise

    @staticmethod
    def filter_repositories(repositories: List[str], pattern: Pattern) -> List[str]:
        """Keep the repositories the include pattern matches anywhere in the name."""
        return [repo for repo in repositories if pattern.search(repo)]

    def discover_repositories(self) -> List[str]:
        """Read the source catalog and return the repositories matching the include pattern.

        Raises:
            RegistryError: If the catalog cannot be read
            ConfigValidationError: If the include pattern is invalid
        """
        catalog = self.source_client.list_repositories()
        self.logger.info(f"Source catalog lists {len(catalog)} repositories")

        pattern = compile_include_pattern(self.source.include)
        matched = self.filter_repositories(catalog, pattern)
        self.logger.info(f"{len(matched)} repositories match include pattern '{pattern.pattern}'")
        return matched

    def _cleanup(self, images: List[str]) -> None:
        try:
            self.engine.remove(*images)
            self.logger.info(f"Removed partial local images {', '.join(images)}")
        except EngineError as e:
            self.logger.warning(f"Unable to remove partial local images {', '.join(images)}: {e.message}")

    def copy_image_tag(self, image: str, tag: str) -> CopyResult:
        """Copy one tag: pull from source, retag, push to destination, remove local copies.

        Stops at the first failing step. With cleanup on failure enabled, the
        local names created before that step are removed afterwards.
        """
        source_name = f"{self.source.host}/{image}:{tag}"
        destination_name = f"{self.destination.host}/{image}:{tag}"

        if self.dry_run:
            self.logger.info(f"Would copy {source_name} to {destination_name}")
            return CopyResult(image=image, tag=tag, success=True)

        created: List[str] = []
        step = "pull"
        try:
            self.logger.info(f"pull {source_name}")
            self.engine.pull(source_name)
            created.append(source_name)

            step = "tag"
            self.logger.info(f"tag {source_name} to {destination_name}")
            self.engine.tag(source_name, destination_name)
            created.append(destination_name)

            step = "push"
            self.logger.info(f"push {destination_name}")
            self.engine.push(destination_name)

            step = "remove"
            self.logger.info(f"remove {source_name} and {destination_name}")
            self.engine.remove(source_name, destination_name)
        except EngineError as e:
            self.logger.error(f"Unable to copy {image}:{tag} ({step} failed): {e.message}")
            if e.stderr.strip():
                self.logger.debug(e.stderr.strip())
            if self.cleanup_on_failure and step != "remove" and created:
                self._cleanup(created)
            return CopyResult(image=image, tag=tag, success=False, failed_step=step, error=str(e))

        return CopyResult(image=image, tag=tag, success=True)

    def copy_repository(self, repository: str) -> List[CopyResult]:
        """Copy every tag of a repository.

        Raises:
            RegistryError: If the tags cannot be listed
        """
        tags = self.source_client.list_tags(repository)
        self.logger.info(f"tags for {repository}: {tags}")

        results = []
        for i, tag in enumerate(tags, 1):
            self.logger.info(f"[{i}/{len(tags)}] {repository}:{tag}")
            results.append(self.copy_image_tag(repository, tag))
        return results

    def run(self) -> CopySummary:
        """Run the whole copy.

        Raises:
            ActionableError: On login, catalog or include pattern failures
        """
        summary = CopySummary(dry_run=self.dry_run)

        try:
            self.login()
            summary.matched_repositories = self.discover_repositories()

            for repo_idx, repository in enumerate(summary.matched_repositories, 1):
                self.logger.info(f"[repo {repo_idx}/{len(summary.matched_repositories)}] Copying {repository}")
                try:
                    summary.results.extend(self.copy_repository(repository))
                except RegistryError as e:
                    self.logger.error(f"Unable to get tags for {repository}: {e.message}")
                    summary.failed_repositories.append(repository)
        finally:
            if self._owns_source_client:
                self.source_client.close()

        return summary


def log_summary(summary: CopySummary) -> None:
    logger.info("=" * 60)
    mode = "DRY RUN " if summary.dry_run else ""
    logger.info(f"   {mode}COPY SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Repositories matched: {len(summary.matched_repositories)}")
    if summary.failed_repositories:
        logger.info(f"Tag listing failed:   {len(summary.failed_repositories)}")
        for repository in summary.failed_repositories:
            logger.info(f"  - {repository}")
    action = "Would copy" if summary.dry_run else "Copied"
    logger.info(f"{action}:           {summary.succeeded}")
    if summary.failed:
        logger.info(f"Failed:               {summary.failed}")
        failures = [asdict(r) for r in summary.results if not r.success]
        for line in format_failures_table(failures).splitlines():
            logger.info(line)


def parse_arguments(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Copy Docker images matching a pattern from one registry to another",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Copy everything described by ./application.yaml
  regcopy

  # Show what would be copied
  regcopy --dry-run

  # Save a JSON report and exit non-zero if anything failed
  regcopy --output reports/copy-report.json --fail-on-error
        """,
    )

    parser.add_argument(
        "--config",
        help="Configuration file (default: CONFIG_FILE env var or ./application.yaml)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log in and discover tags, but only log what would be copied",
    )

    parser.add_argument(
        "--output",
        help="Write the copy summary as JSON to this file",
    )

    parser.add_argument(
        "--fail-on-error",
        action="store_true",
        help="Exit with status 1 if any tag listing or copy failed",
    )

    parser.add_argument(
        "--log-level",
        help="Logging level (default: app.logLevel from the config, else INFO)",
    )

    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Print the effective configuration and exit",
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    setup_logging(args.log_level)

    try:
        config = ConfigManager(config_file=args.config)
    except ActionableError as e:
        logger.error(f"Unable to read config file: {e}")
        return 1

    setup_logging(args.log_level or config.get_log_level())

    if args.print_config:
        config.print_config()
        return 0

    source = config.get_source_registry()
    destination = config.get_destination_registry()

    logger.info("=" * 60)
    if args.dry_run:
        logger.info("   REGISTRY COPY - DRY RUN MODE")
        logger.info("   No images will be pulled or pushed.")
    else:
        logger.info("   REGISTRY COPY")
    logger.info("=" * 60)
    logger.info(f"Source registry:      {source.host}")
    logger.info(f"Include pattern:      {source.include}")
    logger.info(f"Destination registry: {destination.host}")
    logger.info(f"Engine:               {config.get_executable()}")

    try:
        copier = RegistryCopier(config, dry_run=args.dry_run)
        summary = copier.run()
    except ActionableError as e:
        logger.error(f"Copy aborted: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Copy interrupted by user")
        return 1
    except Exception as e:
        log_exception(logger, "Error in registry copy", exc_info=e)
        return 1

    log_summary(summary)

    if args.output:
        report = summary.to_dict()
        report["metadata"] = {
            "source_registry": source.host,
            "destination_registry": destination.host,
            "include": source.include,
            "timestamp": datetime.now().isoformat(),
        }
        save_json(args.output, report)

    if args.fail_on_error and summary.has_failures:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
