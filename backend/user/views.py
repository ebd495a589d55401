from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import FriendRequestSerializer, FriendSerializer, UserSerializer
from .services import AccountService, FriendshipService


class RegisterView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        user = AccountService.register(
            request.data.get("username"),
            request.data.get("email"),
            request.data.get("password"),
        )
        return Response(
            {"message": "User registered successfully", "userId": user.id},
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        session = AccountService.login(request.data.get("username"), request.data.get("password"))
        return Response({
            "token": session["token"],
            "refresh": session["refresh"],
            "user": UserSerializer(session["user"]).data,
        })


class MeView(APIView):

    def get(self, request):
        serializer = UserSerializer(request.user)
        return Response(serializer.data)


class FriendListView(APIView):

    def get(self, request):
        friends = FriendshipService.list_friends(request.user)
        return Response(FriendSerializer(friends, many=True).data)


class FriendRequestView(APIView):
    """POST: send a friend request by username."""

    def post(self, request):
        friendship = FriendshipService.send_request(request.user, request.data.get("friendUsername"))
        return Response(
            {"message": "Friend request sent", "friendship_id": friendship.id},
            status=status.HTTP_201_CREATED,
        )


class FriendRequestRespondView(APIView):
    """PUT: accept or reject a pending request addressed to the caller."""

    def put(self, request, friendship_id):
        friendship = FriendshipService.respond(request.user, friendship_id, request.data.get("status"))
        return Response({"message": f"Friend request {friendship.status}"})


class FriendRequestListView(APIView):

    def get(self, request):
        pending = FriendshipService.pending_requests(
            request.user, request.query_params.get("type", "received")
        )
        return Response(FriendRequestSerializer(pending, many=True).data)
