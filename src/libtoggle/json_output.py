"""
JSON output formatting for libtoggle commands.

Provides utilities for serializing library state to JSON with schema versioning.
"""

import json
from typing import Any, Dict, List

from libtoggle.inspector import DriftReport, GroupStatus
from libtoggle.kinds import AssetKind
from libtoggle.organize import ScanReport


# Schema version for JSON output (follows semantic versioning)
SCHEMA_VERSION = "1.0.0"


def serialize_group_status(status: GroupStatus) -> Dict[str, Any]:
    return {
        "name": status.name,
        "active": status.active,
        "total": status.total,
        "enabled": status.enabled,
    }


def serialize_status(statuses: Dict[AssetKind, List[GroupStatus]]) -> Dict[str, Any]:
    """Serialize per-kind group status lists."""
    return {
        "schema_version": SCHEMA_VERSION,
        "groups": {
            kind.dirname: [serialize_group_status(s) for s in groups]
            for kind, groups in statuses.items()
        },
    }


def serialize_scan(report: ScanReport) -> Dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "items": [
            {"kind": item.kind.value, "identity": item.identity, "is_dir": item.is_dir}
            for item in report.items
        ],
        "groups": {kind.dirname: names for kind, names in report.groups.items()},
    }


def serialize_drift(reports: List[DriftReport]) -> Dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "drift": {
            report.kind.dirname: {
                "stray": report.stray,
                "broken": report.broken,
                "orphan": report.orphan,
                "clean": report.clean,
            }
            for report in reports
        },
    }


def to_json(data: Dict[str, Any]) -> str:
    return json.dumps(data, indent=2)
