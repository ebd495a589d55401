"""
Views for the recommendations module.
"""
from django.conf import settings
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from businesses.serializers import RankedBusinessSerializer
from common.params import parse_limit
from recommendations.dtos import SurveyAnswerDTO, SurveySubmissionDTO
from recommendations.serializers import (
    SurveyQuestionSerializer,
    SurveySubmissionSerializer,
    UserPreferenceSerializer,
)
from recommendations.services import RecommendationRanker, SurveyService


class RecommendationsView(APIView):
    """
    GET /api/recommendations?limit=10

    Businesses from the caller's preference cluster they have not liked yet,
    nearest first when the caller has a location, best rated first otherwise.
    """

    def get(self, request):
        limit = parse_limit(request.query_params.get('limit'), settings.RECOMMENDATION_DEFAULT_LIMIT)
        ranked = RecommendationRanker().recommend(request.user, limit)
        return Response(RankedBusinessSerializer(ranked, many=True).data)


class SurveyQuestionsView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        serializer = SurveyQuestionSerializer(SurveyService.questions(), many=True)
        return Response(serializer.data)


class SurveySubmitView(APIView):
    """
    POST /api/survey/submit
    Body:
    {
        "responses": [{"questionId": "uuid", "answer": "Outdoors"}],
        "clusterId": 3
    }
    """

    def post(self, request):
        serializer = SurveySubmissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        # Create SurveySubmissionDTO from validated data
        data = serializer.validated_data
        submission = SurveySubmissionDTO(
            answers=[
                SurveyAnswerDTO(question_id=str(item['questionId']), answer=item['answer'])
                for item in data['responses']
            ],
            cluster_id=data['clusterId'],
        )

        preference = SurveyService.submit(request.user, submission)
        payload = {'message': 'Survey responses submitted successfully'}
        payload.update(UserPreferenceSerializer(preference).data)
        return Response(payload, status=status.HTTP_201_CREATED)
