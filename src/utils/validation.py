from typing import Any, Dict
from pydantic import ValidationError
from models.errors import ValidationFailed
from models.models import PoiFields
from utils.geo import BoundingBox


def _field_errors(exc: ValidationError) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "__all__"
        errors.setdefault(field, err["msg"])
    return errors


def validate_poi_fields(
    fields: Dict[str, Any] | PoiFields, bounds: BoundingBox
) -> PoiFields:
    """Check admin input locally; raises ValidationFailed before any network call."""
    if isinstance(fields, PoiFields):
        fields = fields.model_dump()
    try:
        parsed = PoiFields.model_validate(fields)
    except ValidationError as e:
        raise ValidationFailed(_field_errors(e)) from e

    if not bounds.contains(parsed.lat, parsed.lng):
        raise ValidationFailed(
            {"lat": "Coordinates must fall inside the park boundary."}
        )
    return parsed
