"""Audit storage for decommission runs.

Stores and retrieves run logs in YAML format so an operator can finish any step
the run could not.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

import yaml

from ..models.run_report import RunReport


class AuditStorage:
    """Audit log storage and retrieval.

    Stores run logs as YAML files organized by year/month.

    Storage structure:
        ~/.ec2-decom/audit-logs/
            2026/
                10/
                    run-run_123.yaml

    Attributes:
        storage_dir: Base directory for audit logs
    """

    def __init__(self, storage_dir: Optional[str] = None) -> None:
        """Initialize audit storage.

        Args:
            storage_dir: Base directory for audit logs (default: ~/.ec2-decom/audit-logs)
        """
        if storage_dir is None:
            storage_dir = str(Path.home() / ".ec2-decom" / "audit-logs")

        self.storage_dir = Path(storage_dir).expanduser()
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def log_run(self, report: RunReport) -> Path:
        """Write a run report to audit storage.

        Overwrites an existing log with the same run ID.

        Args:
            report: Completed run report

        Returns:
            Path of the written audit file
        """
        year_month_dir = self.storage_dir / str(report.started_at.year) / f"{report.started_at.month:02d}"
        year_month_dir.mkdir(parents=True, exist_ok=True)

        audit_data = {
            "metadata": {
                "version": "1.0",
                "log_type": "instance_decommission",
                "created_at": datetime.utcnow().isoformat() + "Z",
            },
            "run": report.to_dict(),
            "inventory": report.inventory.to_dict(),
            "steps": [result.to_dict() for result in report.results],
        }

        audit_file = year_month_dir / f"run-{report.run_id}.yaml"
        with open(audit_file, "w") as f:
            yaml.dump(audit_data, f, default_flow_style=False, sort_keys=False)

        return audit_file

    def get_run(self, run_id: str) -> Optional[dict]:
        """Retrieve run audit log by ID.

        Args:
            run_id: Run ID to retrieve

        Returns:
            Audit log dictionary if found, None otherwise
        """
        for audit_file in self.storage_dir.glob(f"*/*/run-{run_id}.yaml"):
            with open(audit_file, "r") as f:
                return yaml.safe_load(f)

        return None

    def query_runs(
        self,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        instance_id: Optional[str] = None,
    ) -> list[dict]:
        """Query runs within a date range.

        Args:
            since: Start date (inclusive), None for all
            until: End date (inclusive), None for all
            instance_id: Only runs for this instance (optional)

        Returns:
            List of run audit logs matching criteria, oldest first
        """
        results = []

        for audit_file in sorted(self.storage_dir.glob("*/*/run-*.yaml")):
            with open(audit_file, "r") as f:
                audit_data = yaml.safe_load(f)

            run = audit_data["run"]
            started_at = datetime.fromisoformat(run["started_at"].rstrip("Z"))

            if since and started_at < since:
                continue
            if until and started_at > until:
                continue
            if instance_id and run["instance_id"] != instance_id:
                continue

            results.append(audit_data)

        results.sort(key=lambda data: data["run"]["started_at"])
        return results
