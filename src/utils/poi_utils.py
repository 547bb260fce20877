from typing import Any, Dict, Iterable, List, Optional
from models.models import Poi


def filter_pois(pois: Iterable[Poi], query: str) -> List[Poi]:
    """Case-insensitive match against name, trail name and notes."""
    needle = (query or "").strip().casefold()
    if not needle:
        return list(pois)
    return [
        poi
        for poi in pois
        if any(
            needle in (text or "").casefold()
            for text in (poi.name, poi.trail_name, poi.notes)
        )
    ]


def format_trail_stats(poi: Poi) -> str:
    parts = []
    if poi.trail_name:
        parts.append(poi.trail_name)
    if poi.distance_miles is not None:
        parts.append(f"{poi.distance_miles:g} mi")
    if poi.elevation_gain_ft is not None:
        parts.append(f"{poi.elevation_gain_ft:,.0f} ft gain")
    if poi.difficulty:
        parts.append(poi.difficulty.value)
    return " · ".join(parts)


def poi_at(
    pois: Iterable[Poi],
    clicked: Optional[Dict[str, Any]],
    tooltip: Optional[str] = None,
    tolerance: float = 1e-6,
) -> Optional[Poi]:
    """The POI behind a clicked map marker, matched by position, then by its tooltip name."""
    pois = list(pois)
    if clicked and clicked.get("lat") is not None and clicked.get("lng") is not None:
        for poi in pois:
            if abs(poi.lat - clicked["lat"]) <= tolerance and abs(poi.lng - clicked["lng"]) <= tolerance:
                return poi
    if tooltip:
        named = [poi for poi in pois if poi.name == tooltip.strip()]
        if len(named) == 1:
            return named[0]
    return None
