"""
URL routing for locations app.
"""
from django.urls import path
from .views import (
    FriendLocationView,
    HeatmapView,
    LocationHistoryView,
    PointFeedView,
    SyncStatusView,
    UserLocationView,
)

app_name = 'locations'

urlpatterns = [
    path('user/location', UserLocationView.as_view(), name='user-location'),
    path('user/location/history', LocationHistoryView.as_view(), name='location-history'),
    path('user/location/sync-status', SyncStatusView.as_view(), name='sync-status'),
    path('user/heatmap', HeatmapView.as_view(), name='heatmap'),
    path('friends/<int:friend_id>/location', FriendLocationView.as_view(), name='friend-location'),
    path('locations/points', PointFeedView.as_view(), name='points'),
]
