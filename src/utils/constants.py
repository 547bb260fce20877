from enum import Enum
from utils.geo import BoundingBox

# Catoctin Mountain Park
PARK_NAME = "Catoctin Mountain Park"
PARK_CENTER = (39.6323, -77.4558)
PARK_DEFAULT_ZOOM = 13
PARK_BOUNDS = BoundingBox(min_lng=-77.55, min_lat=39.58, max_lng=-77.36, max_lat=39.69)

OSM_TILE_URL = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"
OSM_ATTRIBUTION = "&copy; OpenStreetMap contributors"
ESRI_SATELLITE_URL = (
    "https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}"
)
ESRI_ATTRIBUTION = "Tiles &copy; Esri"

POIS_TABLE = "pois"
PHOTOS_TABLE = "poi_photos"
PROFILES_TABLE = "profiles"
PHOTO_PREFIX = "pois"
ALLOWED_PHOTO_TYPES = ["jpg", "jpeg", "png", "webp", "heic"]
PLACEHOLDER_PHOTO_TEXT = "No hero photo yet"

STATE_DEFAULTS = {
    "profile": None,
    "selected_poi_id": None,
    "search": "",
    "current_page": None,
    "map_click": None,
}


class Label(Enum):
    NAME = "Name"
    LAT = "Latitude"
    LNG = "Longitude"
    VISITED_DATE = "Visited on"
    NOTES = "Notes (optional)"
    TRAIL_NAME = "Trail name (optional)"
    DISTANCE = "Distance, miles (optional)"
    ELEVATION = "Elevation gain, ft (optional)"
    DIFFICULTY = "Difficulty (optional)"
    CAPTION = "Caption (optional)"
    FILE_UPLOAD = "Upload photo"
    SUBMIT_BUTTON = "Submit"
    MANDATORY_FIELD_MARKER = "*"


class Keys(Enum):
    NAME = "name"
    LAT = "lat"
    LNG = "lng"
    VISITED_DATE = "visited_date"
    NOTES = "notes"
    TRAIL_NAME = "trail_name"
    DISTANCE = "distance_miles"
    ELEVATION = "elevation_gain_ft"
    DIFFICULTY = "difficulty"


class Views(Enum):
    MAP = "map"
    PHOTOS = "photos"
    ADMIN = "admin"


class Pages(Enum):
    MAP = {
        "key": "map",
        "title": ":material/map: Park Map",
    }
    ADMIN = {
        "key": "admin",
        "title": ":material/edit_location_alt: Admin",
    }


ERROR_MESSAGES = {
    "validation_failed": "Some fields need fixing before this can be saved.",
    "write_rejected": "The change was not saved. Check that you are signed in as the admin and try again.",
    "not_found": "That item no longer exists. Refresh the list and try again.",
    "partial_delete_failure": "The delete only partly finished. Reload to see what is left, then delete again.",
    "fetch_failed": "Could not reach the park database. Try reloading.",
    "authentication_failed": "Sign-in failed or the session has expired. Sign in again.",
}
