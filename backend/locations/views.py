"""
API views for locations app endpoints.
"""
from django.conf import settings
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from common.params import parse_limit, parse_precision, parse_radius
from geostore.services import GeoPointStore
from .permissions import AllowedIPPermission
from .serializers import (
    AddressSerializer,
    HeatmapSerializer,
    LocationUpdateSerializer,
    SyncStatusSerializer,
    UserLocationSerializer,
)
from .services import HeatmapService, LocationService, LocationStore


def location_service():
    """LocationService wired to the primary database and the geo mirror."""
    return LocationService(LocationStore(), GeoPointStore())


class UserLocationView(APIView):
    """
    POST: record a new current location for the caller.
    GET: the caller's current location.
    """

    def post(self, request):
        address = AddressSerializer(data=request.data)
        address.is_valid(raise_exception=True)

        result = location_service().update_location(
            request.user,
            request.data.get('latitude'),
            request.data.get('longitude'),
            address.validated_data,
        )

        payload = {'message': 'Location updated successfully'}
        payload.update(LocationUpdateSerializer(result).data)
        return Response(payload, status=status.HTTP_201_CREATED)

    def get(self, request):
        pointer = location_service().get_current_location(request.user)
        return Response(UserLocationSerializer(pointer).data)


class LocationHistoryView(APIView):

    def get(self, request):
        limit = parse_limit(request.query_params.get('limit'), settings.QUERY_MAX_LIMIT)
        history = LocationStore().history(request.user.id, limit)
        return Response(UserLocationSerializer(history, many=True).data)


class SyncStatusView(APIView):
    """Compares the caller's primary location with their geo point."""

    def get(self, request):
        sync = location_service().sync_status(request.user.id)
        return Response(SyncStatusSerializer(sync).data)


class HeatmapView(APIView):
    """
    Current positions of other users around the caller.

    Query parameters:
    - radius: km, exclusive (default LOCATION_DEFAULT_RADIUS_KM)
    - precision: optional geohash precision (1-12) for tile aggregation
    """

    def get(self, request):
        radius = parse_radius(request.query_params.get('radius'))
        precision = parse_precision(request.query_params.get('precision'))

        heatmap = HeatmapService(LocationStore()).build(request.user, radius, precision)
        return Response(HeatmapSerializer(heatmap).data)


class FriendLocationView(APIView):

    def get(self, request, friend_id):
        pointer = location_service().get_friend_location(request.user, friend_id)
        return Response(UserLocationSerializer(pointer).data)


class PointFeedView(APIView):
    """
    Raw latitude/longitude of every recorded location, for trusted hosts.
    No token; access is limited by client address.
    """
    authentication_classes = []
    permission_classes = [AllowAny, AllowedIPPermission]

    def get(self, request):
        points = list(LocationStore().all_points())
        return Response({'data': points})
