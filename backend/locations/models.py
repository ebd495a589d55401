import uuid
from django.conf import settings
from django.db import models
from django.db.models import Q


class Location(models.Model):
    """
    Immutable latitude/longitude record - the primary, relational location store.
    A new row is appended for every location update; rows are never edited or
    removed, so the table doubles as the full location history.
    """

    # Primary Key
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Coordinates (decimal degrees)
    latitude = models.FloatField(help_text="Latitude in decimal degrees (-90 to 90)")
    longitude = models.FloatField(help_text="Longitude in decimal degrees (-180 to 180)")

    # Address
    city = models.CharField(max_length=100, null=True, blank=True)
    state = models.CharField(max_length=100, null=True, blank=True)
    country = models.CharField(max_length=100, null=True, blank=True)
    postal_code = models.CharField(max_length=20, null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'locations_location'
        indexes = [
            models.Index(fields=['created_at'], name='location_created_idx'),
        ]

    def __str__(self):
        return f"({self.latitude}, {self.longitude})"

    def save(self, *args, **kwargs):
        """
        Only inserts are allowed; coordinates are range-checked before the write.
        """
        if not self._state.adding:
            raise ValueError("Location records are immutable")
        if not (-90 <= self.latitude <= 90 and -180 <= self.longitude <= 180):
            raise ValueError("Invalid coordinates: latitude must be -90 to 90, longitude must be -180 to 180")

        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Location records are append-only and cannot be deleted")

    def get_lat_lon(self):
        return (self.latitude, self.longitude)


class UserLocation(models.Model):
    """
    Pointer from a user to one of their Location records.
    Exactly one row per user carries is_current=True once the user has reported
    a position; older rows stay as history with is_current=False.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='location_history',
    )
    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name='user_pointers',
    )
    is_current = models.BooleanField(default=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'locations_user_location'
        indexes = [
            models.Index(fields=['user', 'is_current'], name='userlocation_user_current_idx'),
            models.Index(fields=['is_current'], name='userlocation_current_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['user'],
                condition=Q(is_current=True),
                name='one_current_location_per_user',
            ),
        ]

    def __str__(self):
        flag = "current" if self.is_current else "past"
        return f"{self.user_id} -> {self.location_id} ({flag})"
