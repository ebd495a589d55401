"""
URL routing for businesses app.
"""
from django.urls import path
from .views import BusinessDetailView, BusinessLikeView, LikedBusinessesView, NearbyBusinessesView

app_name = 'businesses'

urlpatterns = [
    path('businesses/nearby', NearbyBusinessesView.as_view(), name='nearby'),
    path('business/<uuid:business_id>', BusinessDetailView.as_view(), name='detail'),
    path('business/<uuid:business_id>/like', BusinessLikeView.as_view(), name='like'),
    path('user/likes', LikedBusinessesView.as_view(), name='likes'),
]
