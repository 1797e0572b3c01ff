"""
Alert data models for the liquidity monitor.

Models:
    AlertSeverity: Severity levels (critical, warning, info)
    AlertType: Stable alert type identifiers
    AlertField: One structured detail field shown alongside an alert
    AlertCandidate: Output of the evaluator, before deduplication
    AlertLogEntry: Persisted record of a candidate that passed the cooldown
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class AlertSeverity(str, Enum):
    """
    Alert severity levels.

    Attributes:
        CRITICAL: Severe condition requiring immediate attention.
        WARNING: Elevated condition requiring investigation.
        INFO: Informational, no immediate concern.
    """

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class AlertType(str, Enum):
    """
    Stable alert type identifiers.

    The value is what gets persisted and what the cooldown keys on.
    """

    SPREAD_CRITICAL = "SPREAD_CRITICAL"
    SPREAD_WARNING = "SPREAD_WARNING"
    DEPTH_CRITICAL = "DEPTH_CRITICAL"
    DEPTH_WARNING = "DEPTH_WARNING"
    VOLATILITY_EXTREME = "VOLATILITY_EXTREME"
    PRICE_CHANGE_HIGH = "PRICE_CHANGE_HIGH"
    INVENTORY_SKEW = "INVENTORY_SKEW"
    LIQUIDITY_SHARE_LOW = "LIQUIDITY_SHARE_LOW"
    VOLUME_SPIKE = "VOLUME_SPIKE"


class AlertField(BaseModel):
    """
    A name/value detail field for downstream display.

    Attributes:
        name: Field label (e.g., "Current Spread").
        value: Pre-formatted value (e.g., "3.5000%").
        inline: Whether the field may be rendered side by side.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    name: str = Field(..., min_length=1)
    value: str
    inline: bool = True


class AlertCandidate(BaseModel):
    """
    An alert produced by the evaluator.

    Candidates are subject to the cooldown check before they are notified
    and logged.

    Attributes:
        alert_type: Stable type identifier.
        severity: Severity level.
        venue: Venue the alert applies to (None means all venues).
        message: Human-readable summary.
        fields: Ordered structured detail fields.

    Example:
        >>> candidate = AlertCandidate(
        ...     alert_type=AlertType.SPREAD_WARNING,
        ...     severity=AlertSeverity.WARNING,
        ...     venue="mexc",
        ...     message="WARNING: MEXC spread at 2.00% (threshold: 1.50%)",
        ... )
    """

    model_config = {"frozen": True, "extra": "forbid"}

    alert_type: AlertType
    severity: AlertSeverity
    venue: Optional[str] = Field(default=None, max_length=20)
    message: str = Field(..., min_length=1)
    fields: List[AlertField] = Field(default_factory=list)


class AlertLogEntry(BaseModel):
    """
    Audit record of an alert that passed the cooldown check.

    Written whether or not notification delivery succeeded; also the
    lookback source for the cooldown.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    alert_type: AlertType
    severity: AlertSeverity
    venue: Optional[str] = Field(default=None, max_length=20)
    message: str
    fields: List[AlertField] = Field(default_factory=list)
    delivered: bool = False
    created_at: datetime

    @classmethod
    def from_candidate(
        cls,
        candidate: AlertCandidate,
        delivered: bool,
        created_at: datetime,
    ) -> "AlertLogEntry":
        """Build a log entry from a surviving candidate."""
        return cls(
            alert_type=candidate.alert_type,
            severity=candidate.severity,
            venue=candidate.venue,
            message=candidate.message,
            fields=list(candidate.fields),
            delivered=delivered,
            created_at=created_at,
        )
