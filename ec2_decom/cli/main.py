"""Main CLI entry point using Typer."""

import logging
import signal
import sys
import threading
from typing import Optional

import typer
from rich.console import Console

from ..exceptions import InstanceNotFound
from ..models.run_report import RunMode
from ..report.renderer import ReportRenderer
from ..teardown.audit import AuditStorage
from ..teardown.decommissioner import Decommissioner
from ..utils.logging import setup_logging
from .config import DecomConfig

logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="ec2-decom",
    help="EC2 Decommission - dependency-ordered teardown of an instance and its attached resources",
    add_completion=False,
)

# Create Rich console for output
console = Console()

USAGE = "Usage: ec2-decom <instance-id> [preview|apply]"


def version_callback(value: bool) -> None:
    if value:
        import boto3

        from .. import __version__

        console.print(f"ec2-decom version {__version__}")
        console.print(f"Python {sys.version.split()[0]}")
        console.print(f"boto3 {boto3.__version__}")
        raise typer.Exit()


@app.command()
def main(
    instance_id: Optional[str] = typer.Argument(None, help="EC2 instance id to decommission"),
    mode: str = typer.Argument("preview", help="preview (default, no changes) or apply"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="AWS region (default from config)"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="AWS profile name"),
    config_file: Optional[str] = typer.Option(None, "--config", help="Path to YAML config file"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt in apply mode"),
    concurrent: bool = typer.Option(False, "--concurrent", help="Run discovery queries concurrently"),
    audit_dir: Optional[str] = typer.Option(None, "--audit-dir", help="Directory for run audit logs"),
    no_audit: bool = typer.Option(False, "--no-audit", help="Do not write an audit log"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output except errors"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
    version: bool = typer.Option(
        False, "--version", callback=version_callback, is_eager=True, help="Show version information"
    ),
):
    """Decommission an EC2 instance and the resources attached to it.

    Discovers volumes, elastic IPs, security groups, network interfaces, the IAM
    instance profile, CloudWatch alarms, Route 53 records, target group
    registrations and SSM associations, then tears them down in dependency order.

    Examples:
        # Preview what would be deleted
        ec2-decom i-0123456789abcdef0

        # Delete everything, without the confirmation prompt
        ec2-decom i-0123456789abcdef0 apply --yes
    """
    if not instance_id:
        console.print(USAGE, style="bold red")
        raise typer.Exit(code=1)

    try:
        run_mode = RunMode(mode.lower())
    except ValueError:
        console.print(f"✗ Invalid mode: {mode}. Must be 'preview' or 'apply'", style="bold red")
        console.print(USAGE)
        raise typer.Exit(code=1)

    if no_color:
        console.no_color = True

    try:
        # Load configuration, then override with CLI options
        config = DecomConfig.load(config_file)
        if region:
            config.region = region
        if profile:
            config.aws_profile = profile
        if audit_dir:
            config.audit_dir = audit_dir
        if concurrent:
            config.concurrent_discovery = True

        log_level = "ERROR" if quiet else ("DEBUG" if verbose else config.log_level)
        setup_logging(level=log_level, verbose=verbose)

        audit_storage = None
        if run_mode == RunMode.APPLY and not no_audit:
            audit_storage = AuditStorage(config.audit_dir)

        decommissioner = Decommissioner(config, audit_storage=audit_storage)
        renderer = ReportRenderer()

        console.print(f"\n=== Gathering resources for EC2 instance [bold cyan]{instance_id}[/bold cyan] in {config.region} ===\n")
        inventory = decommissioner.discover(instance_id)
        console.print(renderer.inventory_table(inventory))

        if not inventory.is_complete:
            console.print(
                "⚠ Discovery was incomplete; resources of the kinds marked unknown were not planned.",
                style="yellow",
            )

        if run_mode == RunMode.APPLY and not yes:
            if not typer.confirm(f"Delete {instance_id} and the resources listed above?", default=False):
                console.print("Aborted. No resources were changed.")
                raise typer.Exit(code=0)

        cancel_event = threading.Event()
        previous_handler = None
        if run_mode == RunMode.APPLY:
            previous_handler = _install_interrupt_handler(cancel_event)

        try:
            report = decommissioner.run(inventory, run_mode, cancel_event=cancel_event)
        finally:
            if previous_handler is not None:
                signal.signal(signal.SIGINT, previous_handler)

        console.print(renderer.results_table(report))

        if run_mode == RunMode.PREVIEW:
            console.print("\n=== Dry Run Mode: No resources deleted ===")
        elif report.failed_count or report.cancelled:
            console.print(f"\n[bold yellow]⚠ {renderer.summary_line(report)}[/bold yellow]")
            console.print("Steps marked failed or cancelled must be completed manually.")
        else:
            console.print(f"\n[bold green]✓ {renderer.summary_line(report)}[/bold green]")
            console.print(f"=== Decommission completed for {instance_id} ===")

    except typer.Exit:
        raise
    except InstanceNotFound as e:
        console.print(f"✗ Error: {e}", style="bold red")
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"✗ Error during decommission: {e}", style="bold red")
        logger.exception("Error in decommission command")
        raise typer.Exit(code=2)


def _install_interrupt_handler(cancel_event: threading.Event):
    """Route Ctrl-C to the cancel event; a second Ctrl-C interrupts immediately."""

    def handler(signum, frame):
        if cancel_event.is_set():
            raise KeyboardInterrupt
        console.print("\nInterrupt received: finishing the current step, then stopping.", style="bold yellow")
        cancel_event.set()

    return signal.signal(signal.SIGINT, handler)


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
