"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys

import click

from mod_config_analyzer.analysis_run import (
    AnalysisRequest,
    AnalysisRunError,
    execute_analysis_run,
)
from mod_config_analyzer.configuration import (
    DEFAULT_CONFIG_FILENAME,
    ConfigurationError,
    load_configuration,
    write_placeholder_configuration,
)
from mod_config_analyzer.document_acquisition import CONFIG_TYPE_NAMES
from mod_config_analyzer.results_writing import render_html_report

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="mod-config-analyzer")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log debug output.")
def cli(verbose: bool) -> None:
    """Analyze which config fields and values mods use."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML analyzer configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML analyzer configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="analyze")
@click.option(
    "--config",
    "config_path",
    required=False,
    type=click.Path(path_type=str),
    help="Path to the YAML analyzer configuration file",
)
@click.option(
    "--output-dir",
    "output_dir",
    required=False,
    type=click.Path(path_type=str),
    help="Directory for summaries and the report, overriding the configuration",
)
@click.option(
    "--skip-local-cache",
    is_flag=True,
    default=False,
    help="Ignore the local mod cache and fetch every mod from GitHub again.",
)
@click.option(
    "--local-cache-only",
    is_flag=True,
    default=False,
    help="Analyze the local mod cache without contacting GitHub.",
)
@click.option(
    "--allow",
    "allow_list",
    multiple=True,
    metavar="UNIQUE_NAME",
    help="Only fetch this mod from GitHub. Repeat for several mods.",
)
@click.option(
    "--workbook/--no-workbook",
    "write_workbook",
    default=None,
    help="Also write the field usage spreadsheet (default from configuration).",
)
def analyze(
    config_path: str | None,
    output_dir: str | None,
    skip_local_cache: bool,
    local_cache_only: bool,
    allow_list: tuple[str, ...],
    write_workbook: bool | None,
) -> None:
    """Collect mod config files, analyze their fields, and write the report."""
    try:
        outcome = execute_analysis_run(
            AnalysisRequest(
                config_path=config_path,
                output_dir=output_dir,
                skip_local_cache=skip_local_cache,
                local_cache_only=local_cache_only,
                allow_list=allow_list,
                write_workbook=write_workbook,
            )
        )
    except AnalysisRunError as exc:
        raise CliError(str(exc)) from exc
    if outcome.workbook_path is not None:
        click.echo(str(outcome.workbook_path))
    click.echo(str(outcome.report_path))


@cli.command(name="render-report")
@click.option(
    "--config",
    "config_path",
    required=False,
    type=click.Path(path_type=str),
    help="Path to the YAML analyzer configuration file",
)
@click.option(
    "--output-dir",
    "output_dir",
    required=False,
    type=click.Path(path_type=str),
    help="Directory holding previously written summaries",
)
def render_report(config_path: str | None, output_dir: str | None) -> None:
    """Render the HTML report again from previously written summaries."""
    try:
        if output_dir is None:
            output_dir = str(load_configuration(config_path).analysis.output_directory)
        report_path = render_html_report(output_dir, CONFIG_TYPE_NAMES)
    except (ConfigurationError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(report_path))


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), prog_name="mod-config-analyzer", standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
