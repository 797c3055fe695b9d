"""Location clustering and display-name resolution."""

import string
from typing import Any, Dict, Iterable, List, Optional, Sequence

from arcdiary.core.logger import log_call, log_debug, log_result
from arcdiary.models.diary import LocationCluster
from arcdiary.models.location import haversine_m
from arcdiary.models.timeline import TimelineItem

CLUSTER_RADIUS_M = 100

_ID_KEYS = ("placeId", "id", "uuid", "identifier")
_NAME_KEYS = ("customTitle", "customName", "title", "name", "displayName")


class PlaceNames:
    """Place-id -> display name table with case-insensitive lookup."""

    def __init__(self, names: Optional[Dict[str, str]] = None):
        self._names: Dict[str, str] = {}
        for place_id, name in (names or {}).items():
            self.add(place_id, name)

    def __len__(self) -> int:
        return len(self._names)

    def add(self, place_id: Any, name: Any) -> None:
        """Adds a mapping; later additions overwrite earlier ones."""
        if not place_id or not isinstance(name, str) or not name.strip():
            return
        self._names[str(place_id)] = name.strip()

    def get(self, place_id: Optional[str]) -> Optional[str]:
        if not place_id:
            return None
        pid = str(place_id)
        return self._names.get(pid) or self._names.get(pid.upper()) or self._names.get(pid.lower())

    def update_from_json(self, node: Any) -> None:
        """Collects {id, name}-like pairs from any nested JSON structure."""
        if isinstance(node, list):
            for child in node:
                self.update_from_json(child)
            return
        if not isinstance(node, dict):
            return

        place_id = next((node[k] for k in _ID_KEYS if node.get(k)), None)
        name = next((node[k] for k in _NAME_KEYS if node.get(k)), None)
        if place_id and isinstance(name, str):
            self.add(place_id, name)

        for child in node.values():
            self.update_from_json(child)

    @classmethod
    def from_json(cls, node: Any) -> "PlaceNames":
        names = cls()
        names.update_from_json(node)
        return names


def _intrinsic_name(item: TimelineItem) -> Optional[str]:
    return item.place_name or item.custom_title or item.street_address or None


def _synthetic_label(index: int) -> str:
    """0 -> "Location A", 25 -> "Location Z", 26 -> "Location AA"."""
    letters = ""
    n = index + 1
    while n > 0:
        n, remainder = divmod(n - 1, 26)
        letters = string.ascii_uppercase[remainder] + letters
    return f"Location {letters}"


def build_location_clusters(items: Iterable[TimelineItem]) -> List[LocationCluster]:
    """Greedily groups visits with coordinates into 100 m clusters.

    A visit joins the first cluster whose running centroid is within range,
    otherwise it starts a new one. Clusters adopt the first member name they
    see; the rest get "Location A", "Location B", ... in creation order.
    """
    visits = [item for item in items if item.is_visit and item.center is not None]
    log_call("LocationClusterer", "build", visits=len(visits))

    clusters: List[LocationCluster] = []
    for visit in visits:
        lat = visit.center.latitude
        lng = visit.center.longitude
        name = _intrinsic_name(visit)

        found = None
        for cluster in clusters:
            if haversine_m(lat, lng, cluster.center_lat, cluster.center_lng) <= CLUSTER_RADIUS_M:
                found = cluster
                break

        if found is None:
            clusters.append(LocationCluster(center_lat=lat, center_lng=lng, name=name, visits=[visit]))
            continue

        found.visits.append(visit)
        if name and not found.name:
            found.name = name
        found.center_lat = sum(v.center.latitude for v in found.visits) / len(found.visits)
        found.center_lng = sum(v.center.longitude for v in found.visits) / len(found.visits)

    unnamed = 0
    for cluster in clusters:
        if not cluster.name:
            cluster.name = _synthetic_label(unnamed)
            unnamed += 1
            log_debug(
                f"cluster at ({cluster.center_lat:.4f}, {cluster.center_lng:.4f}) "
                f"with {len(cluster.visits)} visits -> {cluster.name}"
            )

    log_result("LocationClusterer", "build", f"{len(clusters)} clusters, {unnamed} unnamed")
    return clusters


def is_data_gap(item: TimelineItem) -> bool:
    """A trip with no usable activity type and no GPS samples."""
    if item.is_visit:
        return False
    activity = (item.activity_type or "").lower()
    return activity in ("", "unknown") and not item.samples


class LocationNamer:
    """Resolves display names for timeline items."""

    def __init__(
        self,
        clusters: Sequence[LocationCluster] = (),
        place_names: Optional[PlaceNames] = None,
    ):
        """
        Args:
            clusters: Clusters built from the same day's items
            place_names: External place-id -> name table
        """
        self.place_names = place_names or PlaceNames()
        self._cluster_by_item: Dict[str, LocationCluster] = {}
        for cluster in clusters:
            for visit in cluster.visits:
                self._cluster_by_item.setdefault(visit.id, cluster)

    @classmethod
    def for_items(cls, items: Sequence[TimelineItem], place_names: Optional[PlaceNames] = None) -> "LocationNamer":
        return cls(build_location_clusters(items), place_names)

    def name_for(self, item: TimelineItem) -> str:
        """Display name by descending priority of the available sources."""
        if not item.is_visit and is_data_gap(item):
            return "Data Gap"

        if item.display_name:
            return item.display_name.strip()

        mapped = self.place_names.get(item.place_id or (item.place.id if item.place else None))
        if mapped:
            return mapped

        if item.place_name:
            return item.place_name.strip()

        if item.custom_title:
            return item.custom_title.strip()

        if item.is_visit and item.street_address:
            return item.street_address.strip()

        if item.is_visit:
            cluster = self._cluster_by_item.get(item.id)
            if cluster is not None and cluster.name:
                return cluster.name
            return "Unnamed Location"

        if item.activity_type:
            return item.activity_type[0].upper() + item.activity_type[1:]

        return "Unknown Location"
