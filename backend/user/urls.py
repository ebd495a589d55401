from django.urls import path
from .views import (
    FriendListView,
    FriendRequestListView,
    FriendRequestRespondView,
    FriendRequestView,
    LoginView,
    MeView,
    RegisterView,
)

app_name = "user"

urlpatterns = [
    path("register", RegisterView.as_view(), name="register"),
    path("login", LoginView.as_view(), name="login"),
    path("user/me", MeView.as_view(), name="me"),
    path("friends", FriendListView.as_view(), name="friends"),
    path("friends/request", FriendRequestView.as_view(), name="friend-request"),
    path("friends/request/<uuid:friendship_id>", FriendRequestRespondView.as_view(), name="friend-request-respond"),
    path("friends/requests", FriendRequestListView.as_view(), name="friend-requests"),
]
