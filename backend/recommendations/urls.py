"""
URL configuration for the recommendations module.
"""
from django.urls import path
from recommendations.views import RecommendationsView, SurveyQuestionsView, SurveySubmitView

app_name = 'recommendations'

urlpatterns = [
    path('recommendations', RecommendationsView.as_view(), name='recommendations'),
    path('survey/questions', SurveyQuestionsView.as_view(), name='survey_questions'),
    path('survey/submit', SurveySubmitView.as_view(), name='survey_submit'),
]
