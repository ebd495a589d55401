"""
DRF serializers for location payloads.
"""
from rest_framework import serializers

from .models import UserLocation


class AddressSerializer(serializers.Serializer):
    """Optional address fields sent alongside a location update."""
    city = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    country = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    postal_code = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)


class UserLocationSerializer(serializers.ModelSerializer):
    """
    A user's location pointer flattened together with its Location record.
    """
    location_id = serializers.UUIDField(source='location.id', read_only=True)
    latitude = serializers.FloatField(source='location.latitude', read_only=True)
    longitude = serializers.FloatField(source='location.longitude', read_only=True)
    city = serializers.CharField(source='location.city', read_only=True)
    state = serializers.CharField(source='location.state', read_only=True)
    country = serializers.CharField(source='location.country', read_only=True)
    postal_code = serializers.CharField(source='location.postal_code', read_only=True)

    class Meta:
        model = UserLocation
        fields = [
            'location_id',
            'latitude',
            'longitude',
            'city',
            'state',
            'country',
            'postal_code',
            'timestamp',
            'is_current',
        ]


class PointSerializer(serializers.Serializer):
    latitude = serializers.FloatField()
    longitude = serializers.FloatField()


class MirrorResultSerializer(serializers.Serializer):
    status = serializers.CharField()
    latitude = serializers.FloatField(allow_null=True)
    longitude = serializers.FloatField(allow_null=True)
    updated_at = serializers.DateTimeField(allow_null=True)
    error = serializers.CharField(allow_null=True)

    def to_representation(self, instance):
        # keep the failure payload small: no empty coordinate keys
        data = super().to_representation(instance)
        return {key: value for key, value in data.items() if value is not None}


class LocationUpdateSerializer(serializers.Serializer):
    """Response body of a location update."""
    locationId = serializers.UUIDField(source='location_id')
    userLocationId = serializers.UUIDField(source='user_location_id')
    latitude = serializers.FloatField()
    longitude = serializers.FloatField()
    geo = MirrorResultSerializer(source='mirror')


class HeatmapPointSerializer(serializers.Serializer):
    location_id = serializers.UUIDField()
    latitude = serializers.FloatField()
    longitude = serializers.FloatField()
    city = serializers.CharField(allow_null=True)
    state = serializers.CharField(allow_null=True)
    country = serializers.CharField(allow_null=True)
    postal_code = serializers.CharField(allow_null=True)
    timestamp = serializers.DateTimeField()
    is_current = serializers.BooleanField()
    distance = serializers.FloatField()


class HeatmapTileSerializer(serializers.Serializer):
    geohash = serializers.CharField()
    latitude = serializers.FloatField()
    longitude = serializers.FloatField()
    count = serializers.IntegerField()


class HeatmapSerializer(serializers.Serializer):
    locations = HeatmapPointSerializer(many=True)
    count = serializers.IntegerField()
    center = PointSerializer(allow_null=True)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if instance.tiles is not None:
            data['tiles'] = HeatmapTileSerializer(instance.tiles, many=True).data
        if instance.message:
            data['message'] = instance.message
        return data


class SyncStatusSerializer(serializers.Serializer):
    status = serializers.CharField()
    primary = PointSerializer(allow_null=True)
    geo = PointSerializer(allow_null=True)
    geo_updated_at = serializers.DateTimeField(allow_null=True)
