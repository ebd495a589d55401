"""
Service for the geometry-native location store.
"""
import logging
from typing import Optional, Tuple

from django.contrib.gis.geos import Point

from locations.services import GeoService
from .models import GeoPoint
from .routers import geo_alias

logger = logging.getLogger(__name__)


class GeoPointStore:
    """
    Keeps one point per user in the geo database, overwritten in place.
    Written as a mirror of the primary location store; consumers that want
    native geometry types (geofencing, map layers) read from here.
    """

    def __init__(self, using: Optional[str] = None):
        self.using = using or geo_alias()

    def get(self, user_id: int) -> Optional[GeoPoint]:
        return GeoPoint.objects.using(self.using).filter(user_id=user_id).first()

    def upsert(self, user_id: int, latitude: float, longitude: float) -> Tuple[GeoPoint, bool]:
        """
        "Update or Insert" the user's point:
        - no row for user_id: create it
        - row exists: overwrite the point and refresh updated_at

        Coordinates are validated before any query runs.

        Returns:
            (GeoPoint, created)
        """
        GeoService.validate_coordinates(latitude, longitude)

        geo_point, created = GeoPoint.objects.using(self.using).update_or_create(
            user_id=user_id,
            defaults={'point': Point(longitude, latitude, srid=4326)},
        )
        return geo_point, created
