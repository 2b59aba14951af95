"""JSON reporter for scripts and CI."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Optional

from svnbridge.svn.models import LockDetails, StatusRecord


def lock_details_to_dict(details: LockDetails) -> Optional[Dict[str, Any]]:
    if details.is_empty:
        return None
    return {
        "path": details.path,
        "owner": details.owner,
        "date": details.date,
        "message": details.message,
        "locked": details.is_locked,
    }


def record_to_dict(record: StatusRecord) -> Dict[str, Any]:
    return {
        "path": record.path,
        "status": record.status.name.lower(),
        "property_status": record.property_status.name.lower(),
        "lock_status": record.lock_status.name.lower(),
        "tree_conflict_status": record.tree_conflict_status.name.lower(),
        "remote_status": record.remote_status.name.lower(),
        "conflicted": record.is_conflicted,
        "lock_details": lock_details_to_dict(record.lock_details),
    }


def to_dict(records: Iterable[StatusRecord]) -> Dict[str, Any]:
    items = [record_to_dict(r) for r in records]
    return {
        "version": "1.0",
        "total": len(items),
        "statuses": items,
    }


def render(records: Iterable[StatusRecord]) -> str:
    """Return formatted JSON string."""
    return json.dumps(to_dict(records), indent=2)


def render_outcome(operation: str, outcome: Any, **extra: Any) -> str:
    payload: Dict[str, Any] = {"operation": operation, "outcome": getattr(outcome, "value", outcome)}
    payload.update(extra)
    return json.dumps(payload, indent=2)
