"""Recompute every derived field of a snapshot."""

from datetime import date

from learn2go.analytics.badges import earned_badge_ids, generate_badges
from learn2go.analytics.derivation import RecencyMode, compute_analytics
from learn2go.models.snapshot import PreloadedData


def with_derived(
    snapshot: PreloadedData,
    recency: RecencyMode = RecencyMode.TIMESTAMP,
    today: date | None = None,
) -> PreloadedData:
    """Return a copy of ``snapshot`` with analytics, badges and profile totals rebuilt."""
    analytics = compute_analytics(snapshot.lessons, snapshot.user_progress, recency, today)
    badges = generate_badges(snapshot.lessons, snapshot.user_progress)
    profile = snapshot.user_profile
    if profile is not None:
        profile = profile.model_copy(update={
            "progress": analytics.completion_rate,
            "badges": earned_badge_ids(badges),
        })
    return snapshot.model_copy(update={
        "analytics": analytics,
        "badges": badges,
        "user_profile": profile,
    })
