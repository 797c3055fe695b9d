"""Activity type classification and normalization."""

from typing import Optional, Sequence

from arcdiary.models.location import Sample, haversine_m
from arcdiary.models.timeline import TimelineItem

# Ordered: the first matching rule wins
CATEGORY_RULES = [
    ("stationary", ("stationary",)),
    ("walking", ("walk", "golf", "wheelchair")),
    ("hiking", ("hiking",)),
    ("running", ("running",)),
    ("cycling", ("cycling", "bicycle", "rowing", "swimming", "kayaking")),
    ("car", ("car", "automotive", "taxi")),
    ("bus", ("bus",)),
    ("motorcycle", ("motorcycle", "scooter")),
    ("airplane", ("airplane", "aircraft", "flight", "hotairballoon")),
    ("boat", ("boat", "ferry")),
    ("train", ("train", "metro", "tram", "cablecar", "funicular", "chairlift", "skilift", "railway")),
    ("skateboarding", ("skateboard",)),
    ("inlineSkating", ("inlineskating", "rollerblade")),
    ("snowboarding", ("snowboard",)),
    ("skiing", ("skiing", "ski")),
    ("horseback", ("horseback", "horse")),
    ("surfing", ("surfing", "surf")),
    ("tractor", ("tractor",)),
    ("tuktuk", ("tuktuk", "songthaew")),
]

CATEGORIES = tuple(category for category, _ in CATEGORY_RULES) + ("unknown",)

MOTORIZED_CATEGORIES = frozenset({"car", "bus", "train", "motorcycle", "boat", "airplane"})

# Speed thresholds (m/s) for inferring a trip's type from its samples
CAR_AVG_SPEED = 7.0
CAR_MAX_SPEED = 12.0
CYCLING_AVG_SPEED = 2.2


def classify_activity(activity: Optional[str]) -> str:
    """Maps a free-form activity label to one of CATEGORIES."""
    label = (activity or "").lower()
    for category, needles in CATEGORY_RULES:
        if any(needle in label for needle in needles):
            return category
    return "unknown"


def normalize_activity_type(activity: Optional[str]) -> str:
    """Lowercases a stored activity type; automotive becomes car, blank unknown."""
    label = (activity or "").strip().lower()
    if label == "automotive":
        return "car"
    return label or "unknown"


def infer_activity_type(samples: Sequence[Sample], fallback: Optional[str] = None) -> Optional[str]:
    """Guesses walking/cycling/car from sample speeds.

    Only consecutive located, timestamped pairs less than an hour apart count.
    """
    if len(samples) < 2:
        return fallback

    total_distance = 0.0
    total_time = 0.0
    max_speed = 0.0

    for prev, curr in zip(samples, samples[1:]):
        if not (prev.has_coordinates and curr.has_coordinates):
            continue
        if prev.timestamp is None or curr.timestamp is None:
            continue

        dt = (curr.timestamp - prev.timestamp).total_seconds()
        if not 0 < dt < 3600:
            continue

        d = haversine_m(prev.latitude, prev.longitude, curr.latitude, curr.longitude)
        total_distance += d
        total_time += dt
        max_speed = max(max_speed, d / dt)

    if total_time <= 0:
        return fallback

    avg_speed = total_distance / total_time
    if avg_speed > CAR_AVG_SPEED or max_speed > CAR_MAX_SPEED:
        return "car"
    if avg_speed > CYCLING_AVG_SPEED:
        return "cycling"
    return "walking"


def resolve_activity_type(item: TimelineItem) -> str:
    """Activity type to store for an item.

    Visits are stationary. A manually chosen type is kept as is; a missing or
    unknown trip type is inferred from the samples.
    """
    if item.is_visit:
        return "stationary"

    activity = normalize_activity_type(item.activity_type)
    if item.manual_activity_type or activity != "unknown":
        return activity

    return (infer_activity_type(item.samples, "unknown") or "unknown").lower()
