"""
Alert detection for the liquidity monitor.

Components:
    evaluator: Threshold rules producing alert candidates and recommendations
    dispatcher: Cooldown check, notification and alert logging
    recommendations: Recommendation upsert and expiry
    channels: Notification channel implementations

Example:
    >>> from mm_monitor.detection import AlertDispatcher, create_evaluator
    >>> evaluator = create_evaluator(app_config.monitoring)
    >>> result = evaluator.evaluate(settings, snapshot, depths)
    >>> await AlertDispatcher(store, channel).dispatch_all(result.alerts, now)
"""

from mm_monitor.detection.dispatcher import (
    AlertChannel,
    AlertDispatcher,
    DispatchSummary,
)
from mm_monitor.detection.evaluator import (
    AlertEvaluator,
    EvaluationResult,
    create_evaluator,
    evaluate,
)
from mm_monitor.detection.recommendations import RecommendationManager

__all__ = [
    # Evaluator
    "AlertEvaluator",
    "EvaluationResult",
    "create_evaluator",
    "evaluate",
    # Dispatcher
    "AlertChannel",
    "AlertDispatcher",
    "DispatchSummary",
    # Recommendations
    "RecommendationManager",
]
