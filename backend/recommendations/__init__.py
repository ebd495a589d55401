"""
Recommendations Module Summary
==============================

Suggests businesses to a user from their preference cluster.

Key Features Implemented:
1. RecommendationRanker - cluster candidates minus liked businesses, ordered
   by distance when the user has a location and by rating otherwise
2. SurveyService - onboarding survey answers and the UserPreference upsert
3. REST API endpoints for recommendations and the survey
"""
