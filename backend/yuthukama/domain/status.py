"""
Message status lifecycle and its display projection.

A message is in exactly one of four states. Each state carries only the
data that makes sense for it, so a "read" message without a read time
cannot be built.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

SENDING = "sending"
DELIVERED = "delivered"
READ = "read"
ERROR = "error"

STATUSES = (SENDING, DELIVERED, READ, ERROR)

TIME_FORMAT = "%H:%M:%S"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class InvalidStatusError(ValueError):
    """Raised when wire fields describe an impossible status combination."""


@dataclass(frozen=True)
class Sending:
    name = SENDING


@dataclass(frozen=True)
class Delivered:
    at: datetime
    name = DELIVERED


@dataclass(frozen=True)
class Read:
    at: datetime
    by: Optional[str] = None
    name = READ


@dataclass(frozen=True)
class Failed:
    reason: str
    name = ERROR


MessageStatus = Union[Sending, Delivered, Read, Failed]


@dataclass(frozen=True)
class StatusView:
    label: str = ""
    icon: Optional[str] = None
    color: Optional[str] = None
    tooltip: str = ""
    caption: Optional[str] = None


NEUTRAL_VIEW = StatusView()


def status_from_fields(
    status: str,
    sent_at: Optional[datetime] = None,
    read_at: Optional[datetime] = None,
    read_by: Optional[str] = None,
    error: Optional[str] = None,
) -> Optional[MessageStatus]:
    """
    Build a status variant from the flat fields a message travels with.

    Returns None for a status this version does not know about, so newer
    servers can add states without breaking older clients.

    Raises:
        InvalidStatusError: if the fields contradict each other
    """
    if status not in STATUSES:
        return None

    if read_at is not None and status != READ:
        raise InvalidStatusError(f"read_at is only valid for read messages, got {status!r}")

    if status == SENDING:
        return Sending()
    if status == DELIVERED:
        if sent_at is None:
            raise InvalidStatusError("delivered message requires sent_at")
        return Delivered(at=sent_at)
    if status == READ:
        if read_at is None:
            raise InvalidStatusError("read message requires read_at")
        return Read(at=read_at, by=read_by or None)
    return Failed(reason=error or "")


def project_status(status: Optional[MessageStatus]) -> StatusView:
    """Map a status to its label, icon and tooltip. Pure."""
    if isinstance(status, Sending):
        label = "Sending..."
        return StatusView(label=label, icon="access_time", color="text.secondary", tooltip=label)

    if isinstance(status, Delivered):
        label = f"Delivered at {status.at.strftime(TIME_FORMAT)}"
        return StatusView(label=label, icon="check_circle_outline", color="text.secondary", tooltip=label)

    if isinstance(status, Read):
        label = f"Read at {status.at.strftime(TIME_FORMAT)}"
        tooltip = label
        if status.by:
            tooltip = f"Read by {status.by} at {status.at.strftime(DATETIME_FORMAT)}"
        return StatusView(label=label, icon="check_circle", color="primary.main", tooltip=tooltip)

    if isinstance(status, Failed):
        label = f"Failed to send: {status.reason}"
        return StatusView(label=label, icon="error", color="error.main", tooltip=label, caption="Failed")

    return NEUTRAL_VIEW


def describe_status(
    status: str,
    sent_at: Optional[datetime] = None,
    read_at: Optional[datetime] = None,
    read_by: Optional[str] = None,
    error: Optional[str] = None,
) -> StatusView:
    return project_status(status_from_fields(status, sent_at, read_at, read_by, error))
