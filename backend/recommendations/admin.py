"""
Django admin configuration for recommendations models.
"""
from django.contrib import admin
from recommendations.models import SurveyQuestion, SurveyResponse, UserPreference


@admin.register(UserPreference)
class UserPreferenceAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'cluster_id', 'updated_at']
    list_filter = ['cluster_id']
    search_fields = ['user__username']
    readonly_fields = ['id', 'updated_at']


@admin.register(SurveyQuestion)
class SurveyQuestionAdmin(admin.ModelAdmin):
    list_display = ['position', 'text', 'created_at']
    ordering = ['position']
    search_fields = ['text']
    readonly_fields = ['id', 'created_at']


@admin.register(SurveyResponse)
class SurveyResponseAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'question', 'answer', 'created_at']
    list_filter = ['created_at']
    search_fields = ['user__username', 'answer']
    readonly_fields = ['id', 'created_at']
