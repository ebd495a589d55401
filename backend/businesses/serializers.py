"""
DRF serializers for businesses, events and likes.
"""
from rest_framework import serializers

from .models import Business, BusinessLike, Event


class BusinessSerializer(serializers.ModelSerializer):
    """Business flattened with the coordinates and address of its location."""
    latitude = serializers.FloatField(source='location.latitude', read_only=True)
    longitude = serializers.FloatField(source='location.longitude', read_only=True)
    city = serializers.CharField(source='location.city', read_only=True)
    state = serializers.CharField(source='location.state', read_only=True)
    country = serializers.CharField(source='location.country', read_only=True)

    class Meta:
        model = Business
        fields = [
            'id',
            'name',
            'description',
            'business_type',
            'rating',
            'cluster_id',
            'latitude',
            'longitude',
            'city',
            'state',
            'country',
        ]


class RankedBusinessSerializer(serializers.Serializer):
    """
    Lightweight output for ranked lists: the business fields plus ``distance``
    (omitted when the ranking did not use a location).
    """

    def to_representation(self, instance):
        data = BusinessSerializer(instance.business).data
        if instance.distance is not None:
            data['distance'] = instance.distance
        return data


class EventSerializer(serializers.ModelSerializer):
    class Meta:
        model = Event
        fields = ['id', 'title', 'description', 'start_time', 'end_time']


class BusinessDetailSerializer(BusinessSerializer):
    postal_code = serializers.CharField(source='location.postal_code', read_only=True)

    class Meta(BusinessSerializer.Meta):
        fields = BusinessSerializer.Meta.fields + ['postal_code', 'created_at']

    def to_representation(self, instance):
        data = super().to_representation(instance.business)
        data['events'] = EventSerializer(instance.events, many=True).data
        return data


class LikedBusinessSerializer(serializers.ModelSerializer):
    """A like, shown as the liked business plus when it was liked."""
    liked_at = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = BusinessLike
        fields = ['liked_at']

    def to_representation(self, instance):
        data = BusinessSerializer(instance.business).data
        data.update(super().to_representation(instance))
        return data
