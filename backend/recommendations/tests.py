"""
Tests for the recommendations module.
"""
from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from businesses.models import Business, BusinessLike
from common.exceptions import NotFoundError, ValidationError
from locations.models import Location
from locations.services import LocationStore
from recommendations.dtos import SurveyAnswerDTO, SurveySubmissionDTO
from recommendations.models import SurveyQuestion, SurveyResponse, UserPreference
from recommendations.serializers import SurveySubmissionSerializer
from recommendations.services import RecommendationRanker, SurveyService

User = get_user_model()


def make_business(name, latitude, longitude, rating, cluster_id):
    location = Location.objects.create(latitude=latitude, longitude=longitude)
    return Business.objects.create(name=name, location=location, rating=rating, cluster_id=cluster_id)


class RecommendationRankerTestCase(TestCase):
    """Test cases for RecommendationRanker"""

    def setUp(self):
        self.user = User.objects.create_user(username='testuser', password='testpass123')
        UserPreference.objects.create(user=self.user, cluster_id=3)
        self.ranker = RecommendationRanker()

        # NYC-ish cluster 3 businesses
        self.good = make_business('Good', 40.70, -74.00, rating=4.8, cluster_id=3)
        self.okay = make_business('Okay', 40.71, -74.00, rating=3.2, cluster_id=3)
        self.best = make_business('Best', 40.90, -74.00, rating=4.9, cluster_id=3)
        self.other_cluster = make_business('Elsewhere', 40.70, -74.00, rating=5.0, cluster_id=7)

    def test_without_location_ranks_by_rating(self):
        """No current location: highest rating first, distance unknown."""
        results = self.ranker.recommend(self.user, limit=10)

        self.assertEqual([r.business for r in results], [self.best, self.good, self.okay])
        self.assertTrue(all(r.distance is None for r in results))

    def test_with_location_ranks_by_distance(self):
        LocationStore().update_location(self.user.id, 40.72, -74.00)

        results = self.ranker.recommend(self.user, limit=10)

        self.assertEqual([r.business for r in results], [self.okay, self.good, self.best])
        distances = [r.distance for r in results]
        self.assertEqual(distances, sorted(distances))

    def test_excludes_liked(self):
        BusinessLike.objects.create(user=self.user, business=self.best)

        results = self.ranker.recommend(self.user, limit=10)
        self.assertNotIn(self.best, [r.business for r in results])
        self.assertEqual(len(results), 2)

    def test_limit(self):
        results = self.ranker.recommend(self.user, limit=1)
        self.assertEqual([r.business for r in results], [self.best])

        LocationStore().update_location(self.user.id, 40.72, -74.00)
        results = self.ranker.recommend(self.user, limit=2)
        self.assertEqual([r.business for r in results], [self.okay, self.good])

    def test_requires_preference(self):
        stranger = User.objects.create_user(username='stranger', password='testpass123')

        with self.assertRaises(NotFoundError):
            self.ranker.recommend(stranger, limit=10)


def make_submission(cluster_id, *answers):
    return SurveySubmissionDTO(
        answers=[SurveyAnswerDTO(question_id=str(question_id), answer=answer) for question_id, answer in answers],
        cluster_id=cluster_id,
    )


class SurveyServiceTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='newcomer', password='testpass123')
        self.q1 = SurveyQuestion.objects.create(text='Favourite cuisine?', possible_answers=['Thai', 'Italian'], position=1)
        self.q2 = SurveyQuestion.objects.create(text='Indoors or outdoors?', possible_answers=['Indoors', 'Outdoors'], position=2)

    def test_submit_creates_preference(self):
        SurveyService.submit(self.user, make_submission(3, (self.q1.id, 'Thai'), (self.q2.id, 'Outdoors')))

        self.assertEqual(UserPreference.objects.get(user=self.user).cluster_id, 3)
        self.assertEqual(SurveyResponse.objects.filter(user=self.user).count(), 2)

    def test_resubmit_updates_preference(self):
        SurveyService.submit(self.user, make_submission(3, (self.q1.id, 'Thai')))
        SurveyService.submit(self.user, make_submission(5, (self.q1.id, 'Thai')))

        self.assertEqual(UserPreference.objects.filter(user=self.user).count(), 1)
        self.assertEqual(UserPreference.objects.get(user=self.user).cluster_id, 5)

    def test_unknown_question_stores_nothing(self):
        submission = make_submission(
            3,
            (self.q1.id, 'Thai'),
            ('00000000-0000-0000-0000-000000000000', 'Maybe'),
        )

        with self.assertRaises(ValidationError):
            SurveyService.submit(self.user, submission)

        self.assertEqual(SurveyResponse.objects.count(), 0)
        self.assertFalse(UserPreference.objects.filter(user=self.user).exists())


class SurveySubmissionSerializerTestCase(TestCase):
    """Test cases for SurveySubmissionSerializer"""

    def test_valid_payload(self):
        question_id = '6f1c2a7e-8d1b-4c55-9a3e-2b7d9c0e4f11'
        serializer = SurveySubmissionSerializer(data={
            'responses': [{'questionId': question_id, 'answer': 'Thai'}],
            'clusterId': 3,
        })

        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data['clusterId'], 3)
        self.assertEqual(str(serializer.validated_data['responses'][0]['questionId']), question_id)

    def test_bad_payloads(self):
        question_id = '6f1c2a7e-8d1b-4c55-9a3e-2b7d9c0e4f11'
        bad_payloads = [
            {},
            {'responses': [], 'clusterId': 3},
            {'responses': [{'questionId': question_id, 'answer': 'Thai'}]},
            {'responses': [{'questionId': question_id, 'answer': 'Thai'}], 'clusterId': '3'},
            {'responses': [{'questionId': question_id, 'answer': 'Thai'}], 'clusterId': True},
            {'responses': [{'answer': 'Thai'}], 'clusterId': 3},
            {'responses': [{'questionId': 'not-a-uuid', 'answer': 'Thai'}], 'clusterId': 3},
            {'responses': [{'questionId': question_id, 'answer': None}], 'clusterId': 3},
            {'responses': [{'questionId': question_id, 'answer': ['Thai']}], 'clusterId': 3},
            {'responses': 'Thai', 'clusterId': 3},
        ]
        for payload in bad_payloads:
            serializer = SurveySubmissionSerializer(data=payload)
            self.assertFalse(serializer.is_valid(), payload)


class RecommendationAPITestCase(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='apiuser', password='testpass123')
        self.client.force_authenticate(user=self.user)
        self.question = SurveyQuestion.objects.create(text='Coffee or tea?', possible_answers=['Coffee', 'Tea'])

    def test_recommendations_without_survey(self):
        response = self.client.get(reverse('recommendations:recommendations'))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': 'User preferences not found'})

    def test_survey_then_recommendations(self):
        make_business('Tea House', 10.0, 10.0, rating=4.1, cluster_id=2)

        response = self.client.post(
            reverse('recommendations:survey_submit'),
            {'responses': [{'questionId': str(self.question.id), 'answer': 'Tea'}], 'clusterId': 2},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['cluster_id'], 2)

        response = self.client.get(reverse('recommendations:recommendations'), {'limit': 5})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['name'], 'Tea House')
        self.assertNotIn('distance', response.data[0])

    def test_survey_questions_public(self):
        self.client.force_authenticate(user=None)

        response = self.client.get(reverse('recommendations:survey_questions'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['possible_answers'], ['Coffee', 'Tea'])

    def test_survey_bad_payload(self):
        response = self.client.post(reverse('recommendations:survey_submit'), {'clusterId': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(
            reverse('recommendations:survey_submit'),
            {'responses': [{'questionId': str(self.question.id), 'answer': 'Tea'}], 'clusterId': '2'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'clusterId: A valid integer is required.'})
        self.assertFalse(UserPreference.objects.filter(user=self.user).exists())

    def test_survey_unknown_question(self):
        response = self.client.post(
            reverse('recommendations:survey_submit'),
            {'responses': [{'questionId': '00000000-0000-0000-0000-000000000000', 'answer': 'Tea'}], 'clusterId': 2},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'Unknown survey question'})
