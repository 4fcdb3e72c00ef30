"""
Command-line interface for the GasGuard analysis engine.

Provides commands for scanning contract sources and inspecting the
rule catalog.
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click

from gasguard import __version__
from gasguard.utils.logging_config import get_logger, setup_logging
from gasguard.utils.validation import validate_language, validate_path

logger = get_logger(__name__)

SEVERITY_CHOICES = ["critical", "high", "medium", "low", "info"]


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output"
)
@click.option(
    "--log-file",
    type=click.Path(),
    help="Path to log file"
)
@click.pass_context
def cli(ctx, verbose, log_file):
    """
    GasGuard Engine

    Scan smart-contract sources for gas inefficiencies using heuristic
    per-language detectors.
    """
    ctx.ensure_object(dict)

    from gasguard.core.config import Config

    config = Config.load_from_env()
    ctx.obj["verbose"] = verbose or config.verbose

    log_level = "DEBUG" if ctx.obj["verbose"] else "WARNING"
    setup_logging(level=log_level, log_file=Path(log_file) if log_file else None)


@cli.command()
@click.argument("paths", nargs=-1, required=True)
@click.option(
    "--language", "-l",
    help="Force a language for every file instead of detecting by extension"
)
@click.option(
    "--format", "-f",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format"
)
@click.option(
    "--output", "-o",
    type=click.Path(),
    help="Output file for the report"
)
@click.option(
    "--config", "-c", "config_path",
    type=click.Path(),
    help="Engine configuration file (JSON)"
)
@click.option(
    "--exclude",
    multiple=True,
    help="Exclude paths matching this pattern (repeatable)"
)
@click.option(
    "--disable",
    multiple=True,
    help="Disable a rule by id (repeatable)"
)
@click.option(
    "--fail-on",
    type=click.Choice(SEVERITY_CHOICES),
    help="Exit with status 1 when a finding at or above this severity exists"
)
@click.pass_context
def scan(ctx, paths, language, format, output, config_path, exclude, disable, fail_on):
    """
    Scan contract files or directories.

    Examples:

        gasguard scan contracts/

        gasguard scan src/lib.rs -f json -o report.json

        gasguard scan contracts/ --disable sol-004 --fail-on high
    """
    for path in paths:
        is_valid, error = validate_path(path)
        if not is_valid:
            click.echo(f"Error: {error}", err=True)
            sys.exit(2)

    if language:
        is_valid, error = validate_language(language)
        if not is_valid:
            click.echo(f"Error: {error}", err=True)
            sys.exit(2)

    from gasguard.analysis.models import Severity, RuleOverride
    from gasguard.analysis.registry import create_default_registry
    from gasguard.core.config import Config
    from gasguard.core.exceptions import ConfigurationError, GasGuardError
    from gasguard.ingestion.collector import SourceCollector
    from gasguard.reporting.formatter import format_result

    try:
        engine_config = Config.load_from_file(config_path) if config_path else Config.get()
    except (OSError, ValueError, TypeError) as e:
        click.echo(f"Error: could not load configuration: {e}", err=True)
        sys.exit(2)

    try:
        collector = SourceCollector(
            engine_config.scan,
            ignore_patterns=list(engine_config.scan.default_exclude_paths) + list(exclude),
        )
        files = collector.collect(paths)
        logger.debug(f"Collected {len(files)} files from {len(paths)} paths")
        if not files:
            click.echo("No supported source files found.", err=True)
            sys.exit(0)

        if language:
            languages = {file_path: language for file_path in files}
        else:
            languages = collector.detector.build_language_map(files)

        analyzer_config = engine_config.analyzer_config(
            exclude_paths=list(exclude),
        )
        for rule_id in disable:
            analyzer_config.rules[rule_id] = RuleOverride.disabled()

        registry = create_default_registry(engine_config.registry.max_workers)

        # One config is shared by every analyzer, so rule ids are checked
        # against the combined catalog instead of per analyzer.
        known_rules = {rule.id for rule in registry.get_all_rules()}
        unknown = [rule_id for rule_id in analyzer_config.rules if rule_id not in known_rules]
        if unknown:
            raise ConfigurationError([f"Unknown rule: {rule_id}" for rule_id in unknown])

        registry.initialize_all()
        try:
            result = registry.analyze_multiple(files, languages, analyzer_config)
        finally:
            registry.dispose_all()

        report = format_result(result, format, Path(output) if output else None)
        if output:
            click.echo(f"Report saved to: {output}")
        else:
            click.echo(report)

    except GasGuardError as e:
        click.echo(f"Error: {e}", err=True)
        if ctx.obj.get("verbose"):
            import traceback
            traceback.print_exc()
        sys.exit(2)

    if fail_on:
        threshold = Severity.from_value(fail_on)
        if any(f.severity.rank <= threshold.rank for f in result.findings):
            sys.exit(1)


@cli.command()
@click.option(
    "--language", "-l",
    help="Only list rules for this language"
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Print the catalog as JSON"
)
def rules(language: Optional[str], as_json: bool):
    """List the rule catalog."""
    from gasguard.analysis.registry import create_default_registry
    from gasguard.core.exceptions import DispatchError

    registry = create_default_registry()
    try:
        catalog = registry.get_all_rules(language)
    except DispatchError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    if as_json:
        click.echo(json.dumps([rule.to_dict() for rule in catalog], indent=2))
        return

    click.echo("Rules:")
    click.echo("-" * 60)
    for rule in catalog:
        state = "" if rule.enabled else " (disabled)"
        click.echo(f"  {rule.id:12} {rule.severity.value:9} {rule.name}{state}")


@cli.command()
def languages():
    """List supported languages and the analyzers serving them."""
    from gasguard.analysis.detector import LanguageDetector
    from gasguard.analysis.registry import create_default_registry

    registry = create_default_registry()
    detector = LanguageDetector()

    click.echo("Supported Languages:")
    click.echo("-" * 40)
    for language in registry.get_supported_languages():
        analyzers = registry.get_analyzers_for_language(language)
        extensions = ", ".join(detector.get_extensions_for_language(language))
        click.echo(f"  {language.value} ({extensions})")
        for analyzer in analyzers:
            click.echo(
                f"    {analyzer.get_name()} v{analyzer.get_version()}: "
                f"{analyzer.describe()}"
            )


@cli.command()
@click.option(
    "--output", "-o",
    type=click.Path(),
    default="gasguard.json",
    help="Output path for configuration file"
)
def init(output):
    """
    Initialize configuration file.

    Creates a default configuration file that can be customized.
    """
    from gasguard.core.config import Config

    Config.save_to_file(output)
    click.echo(f"Configuration saved to: {output}")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
