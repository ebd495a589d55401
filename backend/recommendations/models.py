import uuid
from django.conf import settings
from django.db import models


class UserPreference(models.Model):
    """
    The preference cluster a user was assigned after the onboarding survey.
    Recommendations are drawn from businesses sharing this cluster_id.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='preference'
    )
    cluster_id = models.IntegerField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'recommendations_user_preference'

    def __str__(self):
        return f"{self.user_id} -> cluster {self.cluster_id}"


class SurveyQuestion(models.Model):
    """
    Onboarding survey question. possible_answers is a JSON list of choices.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    text = models.TextField()
    possible_answers = models.JSONField(default=list, blank=True)
    position = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'recommendations_survey_question'
        ordering = ['position', 'created_at']

    def __str__(self):
        return self.text


class SurveyResponse(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='survey_responses')
    question = models.ForeignKey(SurveyQuestion, on_delete=models.CASCADE, related_name='responses')
    answer = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'recommendations_survey_response'
        indexes = [
            models.Index(fields=['user', 'created_at'], name='survey_response_user_idx'),
        ]

    def __str__(self):
        return f"{self.user_id}: {self.answer}"
