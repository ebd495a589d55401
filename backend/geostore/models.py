from django.contrib.gis.db import models as gis_models
from django.db import models


class GeoPoint(models.Model):
    """
    One mutable point per user in the geometry-native store.
    Lives in the ``geo`` database (see geostore.routers) and is overwritten in
    place on every location update; it keeps no history. The relational
    location history in ``locations`` stays the source of truth.
    """

    # No ForeignKey: users live in another database
    user_id = models.BigIntegerField(unique=True)

    point = gis_models.PointField(
        srid=4326,
        help_text="PostGIS/SpatiaLite geometry (SRID=4326), x=longitude, y=latitude"
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'user_locations'

    def __str__(self):
        return f"{self.user_id} ({self.latitude}, {self.longitude})"

    @property
    def latitude(self):
        return self.point.y if self.point else None

    @property
    def longitude(self):
        return self.point.x if self.point else None
