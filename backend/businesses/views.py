"""
API views for businesses app endpoints.
"""
from django.conf import settings
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from common.params import parse_limit, parse_radius
from .serializers import BusinessDetailSerializer, LikedBusinessSerializer, RankedBusinessSerializer
from .services import BusinessCatalog


class NearbyBusinessesView(APIView):
    """
    Businesses around the caller's current location.

    Query parameters:
    - radius: km, exclusive (default LOCATION_DEFAULT_RADIUS_KM)
    - limit: int (default NEARBY_DEFAULT_LIMIT)
    """

    def get(self, request):
        radius = parse_radius(request.query_params.get('radius'))
        limit = parse_limit(request.query_params.get('limit'), settings.NEARBY_DEFAULT_LIMIT)

        ranked = BusinessCatalog().find_nearby(request.user, radius, limit)
        return Response(RankedBusinessSerializer(ranked, many=True).data)


class BusinessDetailView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, business_id):
        detail = BusinessCatalog().get_detail(business_id)
        return Response(BusinessDetailSerializer(detail).data)


class BusinessLikeView(APIView):

    def post(self, request, business_id):
        BusinessCatalog().like(request.user, business_id)
        return Response({'message': 'Business liked successfully'}, status=status.HTTP_201_CREATED)

    def delete(self, request, business_id):
        BusinessCatalog().unlike(request.user, business_id)
        return Response({'message': 'Business unliked successfully'})


class LikedBusinessesView(APIView):

    def get(self, request):
        likes = BusinessCatalog().liked(request.user)
        return Response(LikedBusinessSerializer(likes, many=True).data)
