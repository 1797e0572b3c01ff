"""
Remediation recommendation models.

At most one recommendation is active per (venue, category). A new one for
the same key supersedes the old; expired ones are swept by maintenance.
Inactive recommendations are never reactivated.

Models:
    RecommendationCategory: Grouping key (SPREAD, DEPTH, VOLATILITY, INVENTORY)
    RecommendationAction: Suggested operator action
    RecommendationRequest: What the evaluator asks the manager to upsert
    Recommendation: Stored recommendation row
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class RecommendationCategory(str, Enum):
    """Grouping key; one active recommendation per venue and category."""

    SPREAD = "SPREAD"
    DEPTH = "DEPTH"
    VOLATILITY = "VOLATILITY"
    INVENTORY = "INVENTORY"


class RecommendationAction(str, Enum):
    """Suggested operator action."""

    PULL_LIQUIDITY = "PULL_LIQUIDITY"
    ADD_LIQUIDITY = "ADD_LIQUIDITY"
    TIGHTEN_SPREAD = "TIGHTEN_SPREAD"
    REDUCE_EXPOSURE = "REDUCE_EXPOSURE"
    REBALANCE_BID = "REBALANCE_BID"
    REBALANCE_ASK = "REBALANCE_ASK"
    HOLD = "HOLD"


class RecommendationRequest(BaseModel):
    """
    Upsert request emitted by the evaluator.

    Attributes:
        venue: Venue (None applies to all venues).
        category: Supersession key together with venue.
        action: Suggested action.
        reason: Operator-facing explanation.
        priority: 1 (lowest) to 10 (highest).
        expires_in_hours: Lifetime; None means no expiry.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    venue: Optional[str] = Field(default=None, max_length=20)
    category: RecommendationCategory
    action: RecommendationAction
    reason: str = Field(..., min_length=1)
    priority: int = Field(..., ge=1, le=10)
    expires_in_hours: Optional[int] = Field(default=None, ge=1)


class Recommendation(BaseModel):
    """Stored recommendation row."""

    model_config = {"frozen": True, "extra": "forbid"}

    id: Optional[int] = None
    venue: Optional[str] = Field(default=None, max_length=20)
    category: RecommendationCategory
    action: RecommendationAction
    reason: str
    priority: int = Field(..., ge=1, le=10)
    is_active: bool = True
    created_at: datetime
    expires_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        """True when an expiry is set and has passed."""
        return self.expires_at is not None and self.expires_at <= now
