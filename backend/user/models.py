import uuid

from django.db import models
from django.conf import settings


class Friendship(models.Model):
    """
    Friend request between two users. The requester sends it, the addressee
    accepts or rejects it; only accepted friendships grant location access.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        ACCEPTED = 'accepted', 'Accepted'
        REJECTED = 'rejected', 'Rejected'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_friend_requests"
    )
    addressee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_friend_requests"
    )
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'user_friendship'
        unique_together = ('requester', 'addressee')
        indexes = [
            models.Index(fields=['addressee', 'status'], name='friendship_addressee_idx'),
            models.Index(fields=['requester', 'status'], name='friendship_requester_idx'),
        ]

    def __str__(self):
        return f"{self.requester_id} -> {self.addressee_id} ({self.status})"

    def other_user(self, user_id):
        return self.addressee if self.requester_id == user_id else self.requester
