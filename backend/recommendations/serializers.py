"""
Serializers for the recommendations module.
"""
from rest_framework import serializers

from recommendations.models import SurveyQuestion, UserPreference


class SurveyQuestionSerializer(serializers.ModelSerializer):
    class Meta:
        model = SurveyQuestion
        fields = ['id', 'text', 'possible_answers', 'position']


class UserPreferenceSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserPreference
        fields = ['cluster_id', 'updated_at']


class ClusterIdField(serializers.IntegerField):
    """Integer field that rejects numeric strings and booleans."""

    def to_internal_value(self, data):
        if isinstance(data, bool) or not isinstance(data, int):
            self.fail('invalid')
        return super().to_internal_value(data)


class SurveyAnswerSerializer(serializers.Serializer):
    questionId = serializers.UUIDField()
    answer = serializers.CharField()


class SurveySubmissionSerializer(serializers.Serializer):
    """Serializer for SurveySubmissionDTO"""
    responses = SurveyAnswerSerializer(many=True, allow_empty=False)
    clusterId = ClusterIdField()
