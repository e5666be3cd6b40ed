from .clock import FixedClock, SystemClock, as_utc, elapsed_minutes
from .evaluator import (
    DEFAULT_THRESHOLDS,
    NOT_ON_SITE_REASON,
    OVER_TARGET_REASON,
    TRAVELING_REASON,
    Condition,
    Thresholds,
    classify,
    evaluate,
)
from .job import AWAITING_ACCEPTANCE_REASON, InvalidTimeline, JobRecord, Status, check_timeline
from .transitions import ACCEPTED_REASON, ON_SITE_REASON, TransitionRule, apply_transition, match_rule
