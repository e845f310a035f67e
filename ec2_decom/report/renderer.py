"""Inventory and run report rendering with Rich."""

from __future__ import annotations

from typing import Dict, List

from rich.console import Console
from rich.table import Table

from ..models.inventory import Inventory
from ..models.resource import ResourceKind, ResourceRecord
from ..models.run_report import RunMode, RunReport
from ..models.step_result import StepStatus

STATUS_STYLES = {
    StepStatus.SUCCEEDED: "green",
    StepStatus.FAILED: "bold red",
    StepStatus.SKIPPED: "yellow",
}


class ReportRenderer:
    """Render inventories and run reports for the terminal."""

    def group_inventory(self, inventory: Inventory) -> Dict[str, List[str]]:
        """Resource kind -> identifiers, in discovery order."""
        grouped: Dict[str, List[str]] = {}
        for record in inventory.records:
            grouped.setdefault(record.kind.value, []).append(self._display_id(record))
        return grouped

    def _display_id(self, record: ResourceRecord) -> str:
        if record.kind == ResourceKind.DNS_RECORD:
            return f"{record.metadata['name']} {record.metadata['record_type']} -> {record.metadata['value']}"
        if record.kind == ResourceKind.IAM_PROFILE:
            role = record.metadata.get("role_name") or "no role"
            return f"{record.identifier} (role: {role})"
        return record.identifier

    def inventory_table(self, inventory: Inventory) -> Table:
        details = inventory.details
        title = f"Resources for {inventory.instance}"
        if details is not None:
            title += f" [{details.state}]"

        table = Table(title=title)
        table.add_column("Kind", style="cyan")
        table.add_column("Identifiers")

        grouped = self.group_inventory(inventory)
        for kind in ResourceKind:
            if kind in (ResourceKind.INSTANCE, ResourceKind.IAM_ROLE):
                continue
            if kind in inventory.skipped_kinds:
                table.add_row(kind.value, f"[red]unknown: {inventory.skipped_kinds[kind]}[/red]")
            else:
                table.add_row(kind.value, "\n".join(grouped.get(kind.value, [])) or "[dim]none[/dim]")

        return table

    def results_table(self, report: RunReport) -> Table:
        title = "Planned actions (dry run)" if report.mode == RunMode.PREVIEW else "Teardown results"
        table = Table(title=title)
        table.add_column("#", justify="right")
        table.add_column("Action")
        table.add_column("Target")
        table.add_column("Outcome")
        table.add_column("Reason")

        for result in report.results:
            style = STATUS_STYLES[result.status]
            table.add_row(
                str(result.step.index + 1),
                f"{result.step.verb.value} {result.step.target_kind.value}",
                result.step.target_id,
                f"[{style}]{result.status.value}[/{style}]",
                result.reason or "",
            )

        return table

    def summary_line(self, report: RunReport) -> str:
        return (
            f"Run {report.run_id}: {report.status.value} - "
            f"{report.succeeded_count} succeeded, {report.failed_count} failed, {report.skipped_count} skipped"
        )

    def format_terminal(self, report: RunReport) -> str:
        """Format the inventory and step results as a string."""
        console = Console(width=120)
        with console.capture() as capture:
            console.print(self.inventory_table(report.inventory))
            console.print(self.results_table(report))
            console.print(self.summary_line(report))

        return capture.get()
