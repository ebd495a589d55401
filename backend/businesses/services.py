"""
Business catalog: proximity search, detail lookups and likes.
"""
import logging
from typing import List, Set

from django.db import IntegrityError, transaction
from django.utils import timezone

from common.exceptions import ConflictError, NotFoundError
from locations.dtos import PointDTO
from locations.services import GeoService, LocationService, LocationStore
from .dtos import BusinessDetail, RankedBusiness
from .models import Business, BusinessLike

logger = logging.getLogger(__name__)


def located_within(center: PointDTO, radius_km: float) -> dict:
    """Business filter narrowing candidates to the box around a circle."""
    box = GeoService.bounding_box(center, radius_km)
    return {f'location__{lookup}': value for lookup, value in box.items()}


class BusinessCatalog:
    """
    Read/write access to businesses for one primary store.
    """

    def __init__(self, store: LocationStore = None):
        self.store = store or LocationStore()

    def _businesses(self):
        return Business.objects.using(self.store.using).select_related('location')

    def find_nearby(self, user, radius_km: float, limit: int) -> List[RankedBusiness]:
        """
        Businesses strictly closer than radius_km to the user's current
        location, nearest first, at most limit of them.

        Raises:
            NoLocationError: the user has never reported a location
        """
        center = LocationService(self.store).get_center(user)

        candidates = self._businesses().filter(**located_within(center, radius_km))
        ranked = GeoService.rank_by_distance(center, candidates, radius_km=radius_km, limit=limit)

        logger.debug(f"{len(ranked)} businesses within {radius_km} km of user {user.id}")
        return [RankedBusiness(business=business, distance=distance) for business, distance in ranked]

    def get_business(self, business_id) -> Business:
        business = self._businesses().filter(id=business_id).first()
        if business is None:
            raise NotFoundError("Business not found")
        return business

    def get_detail(self, business_id) -> BusinessDetail:
        """The business plus its events that have not ended yet, soonest first."""
        business = self.get_business(business_id)
        events = list(
            business.events.using(self.store.using)
            .filter(end_time__gt=timezone.now())
            .order_by('start_time')
        )
        return BusinessDetail(business=business, events=events)

    def like(self, user, business_id) -> BusinessLike:
        business = self.get_business(business_id)

        if BusinessLike.objects.using(self.store.using).filter(user=user, business=business).exists():
            raise ConflictError("Business already liked")

        try:
            with transaction.atomic(using=self.store.using):
                like = BusinessLike(user=user, business=business)
                like.save(using=self.store.using)
        except IntegrityError:
            raise ConflictError("Business already liked")

        logger.info(f"User {user.id} liked business {business.id}")
        return like

    def unlike(self, user, business_id) -> None:
        deleted, _ = BusinessLike.objects.using(self.store.using).filter(
            user=user, business_id=business_id
        ).delete()
        if not deleted:
            raise NotFoundError("Like not found")

        logger.info(f"User {user.id} unliked business {business_id}")

    def liked(self, user):
        """The user's likes with their businesses, newest first."""
        return (
            BusinessLike.objects.using(self.store.using)
            .select_related('business', 'business__location')
            .filter(user=user)
            .order_by('-created_at')
        )

    def liked_ids(self, user) -> Set:
        return set(
            BusinessLike.objects.using(self.store.using).filter(user=user).values_list('business_id', flat=True)
        )
