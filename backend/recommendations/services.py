"""
Recommendation ranking and survey intake.
"""
import logging
from typing import List

from django.db import transaction

from businesses.dtos import RankedBusiness
from businesses.models import Business, BusinessLike
from common.exceptions import NotFoundError, ValidationError
from locations.dtos import PointDTO
from locations.services import GeoService, LocationStore
from .dtos import SurveySubmissionDTO
from .models import SurveyQuestion, SurveyResponse, UserPreference

logger = logging.getLogger(__name__)


class RecommendationRanker:
    """
    Picks businesses for a user from their preference cluster.

    The candidate set is every business in the user's cluster that the user
    has not liked yet. How it is ordered depends on what we know:
    - user has a current location: nearest first
    - otherwise: highest rated first
    """

    def __init__(self, store: LocationStore = None):
        self.store = store or LocationStore()

    def recommend(self, user, limit: int) -> List[RankedBusiness]:
        """
        Args:
            user: requesting user
            limit: maximum number of recommendations

        Returns:
            List of RankedBusiness; distance is set only for location-based ranking

        Raises:
            NotFoundError: the user has no UserPreference (survey not taken)
        """
        preference = UserPreference.objects.using(self.store.using).filter(user=user).first()
        if preference is None:
            raise NotFoundError("User preferences not found")

        liked = BusinessLike.objects.using(self.store.using).filter(user=user).values('business_id')
        candidates = (
            Business.objects.using(self.store.using)
            .select_related('location')
            .filter(cluster_id=preference.cluster_id)
            .exclude(id__in=liked)
            .order_by('-rating', 'name')
        )

        pointer = self.store.get_current_location(user.id)
        if pointer is None:
            logger.debug(f"User {user.id} has no location, ranking cluster {preference.cluster_id} by rating")
            return [RankedBusiness(business=business) for business in candidates[:limit]]

        center = PointDTO(latitude=pointer.location.latitude, longitude=pointer.location.longitude)
        # stable sort: equally distant businesses keep the rating order
        ranked = GeoService.rank_by_distance(center, candidates, limit=limit)
        return [RankedBusiness(business=business, distance=distance) for business, distance in ranked]


class SurveyService:
    """Stores survey answers and the resulting preference cluster."""

    @staticmethod
    def questions():
        return SurveyQuestion.objects.all()

    @staticmethod
    def submit(user, submission: SurveySubmissionDTO) -> UserPreference:
        """
        Saves every answer and creates or updates the user's preference in
        one transaction; nothing is stored if any part fails.

        Raises:
            ValidationError: an answer refers to a question that does not exist
        """
        question_ids = {answer.question_id for answer in submission.answers}
        questions = SurveyQuestion.objects.in_bulk(list(question_ids))
        known = {str(pk) for pk in questions}
        if question_ids - known:
            raise ValidationError("Unknown survey question")

        with transaction.atomic():
            SurveyResponse.objects.bulk_create([
                SurveyResponse(user=user, question_id=answer.question_id, answer=answer.answer)
                for answer in submission.answers
            ])
            preference, _ = UserPreference.objects.update_or_create(
                user=user,
                defaults={'cluster_id': submission.cluster_id},
            )

        logger.info(f"User {user.id} submitted {len(submission.answers)} survey answers, cluster {submission.cluster_id}")
        return preference
