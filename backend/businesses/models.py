import uuid
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from locations.models import Location


class Business(models.Model):
    """
    A place that can be found nearby, liked and recommended.
    Coordinates come from its Location record; cluster_id groups businesses
    that appeal to the same preference cluster.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    business_type = models.CharField(max_length=100, blank=True, default="", db_index=True)
    rating = models.FloatField(
        default=0.0,
        validators=[MinValueValidator(0.0), MaxValueValidator(5.0)],
        help_text="Rating from 0.0 to 5.0"
    )
    location = models.ForeignKey(Location, on_delete=models.PROTECT, related_name='businesses')
    cluster_id = models.IntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'businesses_business'
        verbose_name_plural = 'businesses'
        indexes = [
            models.Index(fields=['cluster_id', '-rating'], name='business_cluster_rating_idx'),
        ]

    def __str__(self):
        return self.name

    def get_lat_lon(self):
        return self.location.get_lat_lon()


class Event(models.Model):
    """Something happening at a business between start_time and end_time."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='events')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'businesses_event'
        indexes = [
            models.Index(fields=['business', 'end_time'], name='event_business_end_idx'),
        ]

    def __str__(self):
        return f"{self.title} @ {self.business_id}"


class BusinessLike(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='business_likes')
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='likes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'businesses_like'
        unique_together = ('user', 'business')

    def __str__(self):
        return f"{self.user_id} likes {self.business_id}"
