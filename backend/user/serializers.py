from django.contrib.auth import get_user_model
from rest_framework import serializers

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "username", "email"]


class FriendSerializer(serializers.Serializer):
    friendship_id = serializers.UUIDField()
    status = serializers.CharField()
    created_at = serializers.DateTimeField()
    friend_id = serializers.IntegerField()
    friend_username = serializers.CharField()
    friend_email = serializers.EmailField(allow_blank=True)


class FriendRequestSerializer(serializers.Serializer):
    friendship_id = serializers.UUIDField()
    created_at = serializers.DateTimeField()
    user_id = serializers.IntegerField()
    username = serializers.CharField()
