from datetime import date
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class Difficulty(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"


class Profile(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)
    id: str
    display_name: str = ""
    is_admin: bool = False


class PoiFields(BaseModel):
    """Admin-editable POI attributes, as submitted from the forms."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")
    name: str = Field(min_length=1)
    lat: float = Field(allow_inf_nan=False)
    lng: float = Field(allow_inf_nan=False)
    visited_date: date
    notes: Optional[str] = None
    trail_name: Optional[str] = None
    distance_miles: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    elevation_gain_ft: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    difficulty: Optional[Difficulty] = None

    def to_row(self) -> Dict[str, Any]:
        row = self.model_dump(mode="json")
        # blank optional text is stored as null
        for key in ("notes", "trail_name"):
            if not row[key]:
                row[key] = None
        return row


class PoiPhoto(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")
    id: str
    poi_id: str
    storage_url: str
    caption: Optional[str] = None
    is_hero: bool = False


class Poi(PoiFields):
    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")
    id: str
    hero_photo: Optional[PoiPhoto] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Poi":
        data = dict(row)
        embedded = data.pop("poi_photos", None) or []
        heroes = [p for p in embedded if p.get("is_hero")]
        data["hero_photo"] = PoiPhoto.model_validate(heroes[0]) if heroes else None
        return cls.model_validate(data)
