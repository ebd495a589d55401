"""
Account and friendship services.
"""
import logging
from typing import List, Optional

from django.contrib.auth import authenticate, get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q
from rest_framework_simplejwt.tokens import RefreshToken

from common.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from .models import Friendship

logger = logging.getLogger(__name__)

User = get_user_model()


class AccountService:
    """Registration and JWT login."""

    @staticmethod
    def register(username: Optional[str], email: Optional[str], password: Optional[str]):
        if not username or not email or not password:
            raise ValidationError("Username, email, and password are required")

        if User.objects.filter(Q(username=username) | Q(email=email)).exists():
            raise ConflictError("Username or email already exists")

        try:
            with transaction.atomic():
                user = User.objects.create_user(username=username, email=email, password=password)
        except IntegrityError:
            # lost a race against a concurrent registration
            raise ConflictError("Username or email already exists")

        logger.info(f"Registered user {user.id}")
        return user

    @staticmethod
    def login(username: Optional[str], password: Optional[str]) -> dict:
        """
        Returns a dict with the access token, the refresh token and the user.
        """
        if not username or not password:
            raise ValidationError("Username and password are required")

        user = authenticate(username=username, password=password)
        if user is None:
            logger.info(f"Failed login attempt for '{username}'")
            raise AuthenticationError("Invalid credentials")

        refresh = RefreshToken.for_user(user)
        return {
            'token': str(refresh.access_token),
            'refresh': str(refresh),
            'user': user,
        }


class FriendshipService:
    """
    Friend requests between users. A friendship is symmetric once accepted,
    no matter which side sent the request.
    """

    @staticmethod
    def _between(user_id: int, other_id: int):
        return Friendship.objects.filter(
            Q(requester_id=user_id, addressee_id=other_id) | Q(requester_id=other_id, addressee_id=user_id)
        )

    @staticmethod
    def are_friends(user_id: int, other_id: int) -> bool:
        return FriendshipService._between(user_id, other_id).filter(
            status=Friendship.Status.ACCEPTED
        ).exists()

    @staticmethod
    def send_request(user, friend_username: Optional[str]) -> Friendship:
        """
        Creates a pending request from user to the account named friend_username.

        Raises:
            ValidationError: no username given, or the user targets themselves
            NotFoundError: no such account
            ConflictError: a friendship already exists in either direction
                (the payload carries its current status)
        """
        if not friend_username:
            raise ValidationError("Friend username is required")

        friend = User.objects.filter(username=friend_username).first()
        if friend is None:
            raise NotFoundError("User not found")
        if friend.id == user.id:
            raise ValidationError("Cannot send friend request to yourself")

        existing = FriendshipService._between(user.id, friend.id).first()
        if existing is not None:
            raise ConflictError("Friendship already exists", status=existing.status)

        try:
            with transaction.atomic():
                friendship = Friendship.objects.create(requester=user, addressee=friend)
        except IntegrityError:
            raise ConflictError("Friendship already exists", status=Friendship.Status.PENDING)

        logger.info(f"User {user.id} sent a friend request to user {friend.id}")
        return friendship

    @staticmethod
    def respond(user, friendship_id, new_status: Optional[str]) -> Friendship:
        """
        Accepts or rejects a pending request addressed to user.
        Requests the user did not receive are reported as not found.
        """
        allowed = (Friendship.Status.ACCEPTED, Friendship.Status.REJECTED)
        if new_status not in allowed:
            raise ValidationError("Status must be 'accepted' or 'rejected'")

        with transaction.atomic():
            friendship = (
                Friendship.objects.select_for_update()
                .filter(id=friendship_id, addressee=user, status=Friendship.Status.PENDING)
                .first()
            )
            if friendship is None:
                raise NotFoundError("Friend request not found")

            friendship.status = new_status
            friendship.save(update_fields=['status', 'updated_at'])

        logger.info(f"Friend request {friendship.id} {new_status} by user {user.id}")
        return friendship

    @staticmethod
    def list_friends(user) -> List[dict]:
        friendships = (
            Friendship.objects.select_related('requester', 'addressee')
            .filter(Q(requester=user) | Q(addressee=user), status=Friendship.Status.ACCEPTED)
            .order_by('-updated_at')
        )

        friends = []
        for friendship in friendships:
            friend = friendship.other_user(user.id)
            friends.append({
                'friendship_id': friendship.id,
                'status': friendship.status,
                'created_at': friendship.created_at,
                'friend_id': friend.id,
                'friend_username': friend.username,
                'friend_email': friend.email,
            })
        return friends

    @staticmethod
    def pending_requests(user, direction: Optional[str] = 'received') -> List[dict]:
        """
        Pending requests the user received (direction='received') or sent
        (direction='sent'), newest first. Each entry describes the other user.
        """
        if direction == 'received':
            queryset = Friendship.objects.filter(addressee=user).select_related('requester')
        elif direction == 'sent':
            queryset = Friendship.objects.filter(requester=user).select_related('addressee')
        else:
            raise ValidationError("Invalid type. Use 'received' or 'sent'")

        queryset = queryset.filter(status=Friendship.Status.PENDING).order_by('-created_at')

        requests = []
        for friendship in queryset:
            other = friendship.other_user(user.id)
            requests.append({
                'friendship_id': friendship.id,
                'created_at': friendship.created_at,
                'user_id': other.id,
                'username': other.username,
            })
        return requests
