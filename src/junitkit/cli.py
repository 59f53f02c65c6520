
import sys
from typing import Optional
import typer
from pydantic import ValidationError
from .config import load_config, ReporterOptions
from .logging import setup_logging
from .runners.runner import load_run
from .reporters.junit import JunitReporter
from .reporters.console import ConsoleReporter, count_states

app = typer.Typer(add_completion=False, help="junitkit - turn recorded test runs into JUnit XML reports")

def _options(config: Optional[str]) -> ReporterOptions:
    try:
        return load_config(config)
    except (OSError, ValidationError) as e:
        typer.echo(f"Invalid config {config}: {e}", err=True)
        raise typer.Exit(code=2)

@app.command()
def convert(
    run_dump: str = typer.Argument(..., help="Recorded run (YAML or JSON) with 'runner' and 'suites'"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to reporter options YAML"),
    output_dir: Optional[str] = typer.Option(None, "--out", "-o", help="Directory for the XML report (default: stdout)"),
    summary: bool = typer.Option(False, "--summary", help="Print per-suite results after writing the report"),
):
    opts = _options(config)
    if output_dir:
        opts.output_dir = output_dir
    log = setup_logging(opts.log_level)
    try:
        runner, suites = load_run(run_dump)
    except (OSError, ValueError) as e:
        log.error("Cannot load run dump %s: %s", run_dump, e)
        raise typer.Exit(code=2)

    reporter = JunitReporter(opts)
    reporter.suites = suites
    reporter.on_runner_end(runner)
    if reporter.unattached:
        log.warning("%d test(s) could not be attached to a suite", len(reporter.unattached))
    counts = count_states(suites)
    if summary:
        # stdout carries the XML when no output directory is set
        ConsoleReporter().emit(suites, file=None if opts.output_dir else sys.stderr)
        typer.echo(f"Done. {counts['passed']} passed, {counts['failed']} failed, "
                   f"{counts['skipped'] + counts['pending']} skipped.", err=not opts.output_dir)
    raise typer.Exit(code=0 if counts["failed"] == 0 else 1)

@app.command("show-config")
def show_config(config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to reporter options YAML")):
    opts = _options(config)
    typer.echo(opts.model_dump_json(indent=2, by_alias=True, exclude={"class_name_format"}))
