"""
Domain services for the locations app: distance math, the relational
location store, the dual-store update flow and heatmap aggregation.
"""
import logging
import math
from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import geohash2
from django.contrib.auth import get_user_model
from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction

from common.exceptions import (
    AuthorizationError,
    NoLocationError,
    NotFoundError,
    StoreFailure,
    ValidationError,
)
from user.services import FriendshipService
from .dtos import HeatmapDTO, HeatmapTile, LocationUpdateResult, MirrorResult, PointDTO, SyncStatus
from .models import Location, UserLocation

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
ADDRESS_FIELDS = ('city', 'state', 'country', 'postal_code')

# Coordinates closer than this (degrees) count as the same point
SYNC_TOLERANCE_DEG = 1e-6

# Slack added to bounding boxes so rounding never cuts off an in-radius point
BOX_MARGIN_DEG = 1e-9


class GeoService:
    """
    Stateless spatial helpers: coordinate validation, great-circle distance,
    radius filtering/ranking and geohash bucketing.
    """

    @staticmethod
    def validate_coordinates(lat: Any, lon: Any) -> None:
        """
        Raises ValidationError unless both values are finite numbers inside
        the latitude/longitude ranges. Values are never clamped.
        """
        for value in (lat, lon):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValidationError("Latitude and longitude must be numbers")
            try:
                finite = math.isfinite(value)
            except OverflowError:
                # ints too large for a float, e.g. a 400-digit JSON number
                finite = False
            if not finite:
                raise ValidationError("Latitude and longitude must be numbers")

        if lat < -90 or lat > 90:
            raise ValidationError("Latitude must be between -90 and 90 degrees")
        if lon < -180 or lon > 180:
            raise ValidationError("Longitude must be between -180 and 180 degrees")

    @staticmethod
    def parse_coordinates(latitude: Any, longitude: Any) -> Tuple[float, float]:
        """
        Turns raw request values (numbers or numeric strings) into a validated
        (lat, lon) pair.
        """
        if latitude is None or longitude is None or latitude == '' or longitude == '':
            raise ValidationError("Latitude and longitude are required")

        parsed = []
        for value in (latitude, longitude):
            if isinstance(value, bool):
                raise ValidationError("Latitude and longitude must be numbers")
            if isinstance(value, str):
                try:
                    value = float(value)
                except ValueError:
                    raise ValidationError("Latitude and longitude must be numbers")
            parsed.append(value)

        lat, lon = parsed
        GeoService.validate_coordinates(lat, lon)
        return float(lat), float(lon)

    @staticmethod
    def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """
        Great-circle distance in kilometers (haversine, sphere of radius 6371 km).

        Raises:
            ValidationError: if any coordinate is missing or out of range
        """
        GeoService.validate_coordinates(lat1, lon1)
        GeoService.validate_coordinates(lat2, lon2)

        phi1 = math.radians(lat1)
        phi2 = math.radians(lat2)
        dphi = math.radians(lat2 - lat1)
        dlambda = math.radians(lon2 - lon1)

        h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
        # rounding can push h a hair above 1 for antipodal points
        h = min(1.0, h)
        return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))

    @staticmethod
    def rank_by_distance(
        center: PointDTO,
        candidates: Iterable[Any],
        radius_km: Optional[float] = None,
        limit: Optional[int] = None,
        coordinates: Callable[[Any], Tuple[float, float]] = lambda c: c.get_lat_lon(),
    ) -> List[Tuple[Any, float]]:
        """
        Computes the distance from center to every candidate, keeps those
        strictly closer than radius_km (all of them when radius_km is None),
        orders them nearest first and caps the result at limit.

        Args:
            center: PointDTO to measure from
            candidates: any iterable of objects
            radius_km: exclusive radius; a candidate exactly on the boundary is dropped
            limit: maximum number of results (None = unlimited)
            coordinates: maps a candidate to its (lat, lon)

        Returns:
            List of (candidate, distance_km) tuples, ascending by distance
        """
        ranked = []
        for candidate in candidates:
            lat, lon = coordinates(candidate)
            distance = GeoService.distance_km(center.latitude, center.longitude, lat, lon)
            if radius_km is not None and not distance < radius_km:
                continue
            ranked.append((candidate, distance))

        ranked.sort(key=lambda item: item[1])
        if limit is not None:
            ranked = ranked[:limit]
        return ranked

    @staticmethod
    def bounding_box(center: PointDTO, radius_km: float) -> Dict[str, float]:
        """
        Latitude/longitude range lookups that contain every point within
        radius_km of center, for narrowing a query before exact ranking.
        The longitude range is left out when the circle reaches a pole or
        wraps across the antimeridian.
        """
        angular = radius_km / EARTH_RADIUS_KM
        min_lat = center.latitude - math.degrees(angular) - BOX_MARGIN_DEG
        max_lat = center.latitude + math.degrees(angular) + BOX_MARGIN_DEG

        bounds = {'latitude__gte': max(min_lat, -90.0), 'latitude__lte': min(max_lat, 90.0)}
        if min_lat <= -90 or max_lat >= 90 or angular >= math.pi / 2:
            return bounds

        ratio = math.sin(angular) / math.cos(math.radians(center.latitude))
        if ratio >= 1:
            return bounds
        delta_lon = math.degrees(math.asin(ratio)) + BOX_MARGIN_DEG
        min_lon = center.longitude - delta_lon
        max_lon = center.longitude + delta_lon
        if min_lon < -180 or max_lon > 180:
            return bounds

        bounds.update({'longitude__gte': min_lon, 'longitude__lte': max_lon})
        return bounds

    @staticmethod
    def encode_geohash(lat: float, lon: float, precision: int = 6) -> str:
        return geohash2.encode(lat, lon, precision)

    @staticmethod
    def aggregate_tiles(points: Iterable[Tuple[float, float]], precision: int) -> List[HeatmapTile]:
        """
        Buckets (lat, lon) points into geohash cells of the given precision.
        Tiles are sorted by count (highest first), then by geohash.
        """
        counts = Counter(GeoService.encode_geohash(lat, lon, precision) for lat, lon in points)

        tiles = []
        for cell, count in counts.items():
            lat, lon, _lat_err, _lon_err = geohash2.decode_exactly(cell)
            tiles.append(HeatmapTile(geohash=cell, latitude=float(lat), longitude=float(lon), count=count))

        tiles.sort(key=lambda tile: (-tile.count, tile.geohash))
        return tiles


class LocationStore:
    """
    Primary, relational location store.
    Every update appends a Location and moves the user's current pointer in a
    single transaction on the alias given at construction.
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    def update_location(
        self,
        user_id: int,
        latitude: Any,
        longitude: Any,
        address: Optional[Dict[str, Optional[str]]] = None,
    ) -> UserLocation:
        """
        Records a new current location for the user.

        Steps (one transaction):
        1. Lock the user's row so concurrent updates for the same user serialize
        2. Insert the immutable Location record
        3. Flip every is_current=True pointer of the user to False
        4. Insert the new is_current=True pointer

        Raises:
            ValidationError: coordinates missing, non numeric or out of range
            StoreFailure: anything failed inside the transaction (fully rolled back)
        """
        latitude, longitude = GeoService.parse_coordinates(latitude, longitude)
        address = address or {}
        address_values = {name: address.get(name) or None for name in ADDRESS_FIELDS}

        User = get_user_model()
        try:
            with transaction.atomic(using=self.using):
                locked = list(
                    User.objects.using(self.using).select_for_update().filter(pk=user_id).values_list('pk', flat=True)
                )
                if not locked:
                    raise NotFoundError("User not found")

                location = Location(latitude=latitude, longitude=longitude, **address_values)
                location.save(using=self.using)

                UserLocation.objects.using(self.using).filter(
                    user_id=user_id, is_current=True
                ).update(is_current=False)

                pointer = UserLocation(user_id=user_id, location=location, is_current=True)
                pointer.save(using=self.using)
        except DatabaseError as e:
            logger.error(f"Location update for user {user_id} rolled back: {str(e)}")
            raise StoreFailure("Failed to update location") from e

        return pointer

    def get_current_location(self, user_id: int) -> Optional[UserLocation]:
        return (
            UserLocation.objects.using(self.using)
            .select_related('location')
            .filter(user_id=user_id, is_current=True)
            .first()
        )

    def current_locations(self, exclude_user_id: Optional[int] = None):
        """QuerySet of every user's current pointer (with its Location)."""
        queryset = UserLocation.objects.using(self.using).select_related('location').filter(is_current=True)
        if exclude_user_id is not None:
            queryset = queryset.exclude(user_id=exclude_user_id)
        return queryset

    def history(self, user_id: int, limit: Optional[int] = None):
        queryset = (
            UserLocation.objects.using(self.using)
            .select_related('location')
            .filter(user_id=user_id)
            .order_by('-timestamp', '-location__created_at')
        )
        if limit is not None:
            queryset = queryset[:limit]
        return list(queryset)

    def all_points(self):
        """Every recorded (latitude, longitude), oldest first."""
        return Location.objects.using(self.using).order_by('created_at').values('latitude', 'longitude')


class LocationService:
    """
    Orchestrates a location update across both stores: the primary store is
    written transactionally, then the new point is mirrored into the geometry
    store outside the transaction. Both store handles are passed in.
    """

    MIRROR_FAILED_MESSAGE = "Geo store update failed"

    def __init__(self, store: LocationStore, mirror=None):
        """
        Args:
            store: primary LocationStore
            mirror: geostore.services.GeoPointStore (anything with upsert/get);
                only needed by the update and sync operations
        """
        self.store = store
        self.mirror = mirror

    def update_location(self, user, latitude: Any, longitude: Any, address: Optional[Dict] = None) -> LocationUpdateResult:
        pointer = self.store.update_location(user.id, latitude, longitude, address)
        location = pointer.location
        logger.info(f"Location {location.id} recorded as current for user {user.id}")

        mirror = self.mirror_point(user.id, location.latitude, location.longitude)

        return LocationUpdateResult(
            location_id=location.id,
            user_location_id=pointer.id,
            latitude=location.latitude,
            longitude=location.longitude,
            mirror=mirror,
        )

    def mirror_point(self, user_id: int, latitude: float, longitude: float) -> MirrorResult:
        """
        Best-effort upsert into the geometry store. Never raises: a failure is
        logged and returned as MirrorResult(status='failed'). Not retried.
        """
        try:
            geo_point, created = self.mirror.upsert(user_id, latitude, longitude)
        except Exception as e:
            logger.warning(f"Geo mirror write failed for user {user_id}, stores may drift: {str(e)}")
            return MirrorResult.failed(self.MIRROR_FAILED_MESSAGE)

        logger.info(f"Geo point {'created' if created else 'updated'} for user {user_id}")
        return MirrorResult.synced(geo_point)

    def get_current_location(self, user) -> UserLocation:
        pointer = self.store.get_current_location(user.id)
        if pointer is None:
            raise NoLocationError("Current location not found")
        return pointer

    def get_center(self, user) -> PointDTO:
        """The user's current position, or NoLocationError."""
        pointer = self.store.get_current_location(user.id)
        if pointer is None:
            raise NoLocationError()
        return PointDTO(latitude=pointer.location.latitude, longitude=pointer.location.longitude)

    def get_friend_location(self, user, friend_id: int) -> UserLocation:
        if not FriendshipService.are_friends(user.id, friend_id):
            raise AuthorizationError("Not authorized to view this user's location")

        pointer = self.store.get_current_location(friend_id)
        if pointer is None:
            raise NotFoundError("Friend's location not found")
        return pointer

    def sync_status(self, user_id: int) -> SyncStatus:
        """
        Compares the authoritative current location with the mirrored point.
        """
        pointer = self.store.get_current_location(user_id)
        geo_point = self.mirror.get(user_id)

        geo = None
        geo_updated_at = None
        if geo_point is not None:
            geo = PointDTO(latitude=geo_point.latitude, longitude=geo_point.longitude)
            geo_updated_at = geo_point.updated_at

        if pointer is None:
            return SyncStatus(status=SyncStatus.NO_LOCATION, geo=geo, geo_updated_at=geo_updated_at)

        primary = PointDTO(latitude=pointer.location.latitude, longitude=pointer.location.longitude)
        if geo is None:
            status = SyncStatus.MISSING
        elif (
            abs(primary.latitude - geo.latitude) <= SYNC_TOLERANCE_DEG
            and abs(primary.longitude - geo.longitude) <= SYNC_TOLERANCE_DEG
        ):
            status = SyncStatus.IN_SYNC
        else:
            status = SyncStatus.DRIFTED
            logger.warning(f"Geo point for user {user_id} drifted from the primary store")

        return SyncStatus(status=status, primary=primary, geo=geo, geo_updated_at=geo_updated_at)

    def reconcile(self, user_id: int) -> Optional[MirrorResult]:
        """
        Re-mirrors the user's current location when the geo point is missing
        or drifted. Returns None when nothing had to be done.
        """
        status = self.sync_status(user_id)
        if not status.needs_repair:
            return None
        return self.mirror_point(user_id, status.primary.latitude, status.primary.longitude)


class HeatmapService:
    """
    Collects the current positions of other users around the requesting
    user's current location.
    """

    NO_DATA_MESSAGE = "No location data available"

    def __init__(self, store: LocationStore):
        self.store = store

    def build(self, user, radius_km: float, precision: Optional[int] = None) -> HeatmapDTO:
        """
        Args:
            user: requesting user (their current location is the center)
            radius_km: exclusive search radius
            precision: optional geohash precision for tile aggregation

        Returns:
            HeatmapDTO; empty (count 0, no center) when the user has no location
        """
        pointer = self.store.get_current_location(user.id)
        if pointer is None:
            return HeatmapDTO(
                locations=[],
                tiles=[] if precision is not None else None,
                message=self.NO_DATA_MESSAGE,
            )

        center = PointDTO(latitude=pointer.location.latitude, longitude=pointer.location.longitude)
        box = GeoService.bounding_box(center, radius_km)
        candidates = self.store.current_locations(exclude_user_id=user.id).filter(
            **{f'location__{lookup}': value for lookup, value in box.items()}
        )
        ranked = GeoService.rank_by_distance(
            center,
            candidates,
            radius_km=radius_km,
            coordinates=lambda p: p.location.get_lat_lon(),
        )

        locations = [self._to_point(current, distance) for current, distance in ranked]
        tiles = None
        if precision is not None:
            tiles = GeoService.aggregate_tiles(
                ((point['latitude'], point['longitude']) for point in locations),
                precision,
            )

        return HeatmapDTO(locations=locations, center=center, tiles=tiles)

    @staticmethod
    def _to_point(pointer: UserLocation, distance: float) -> dict:
        location = pointer.location
        return {
            'location_id': location.id,
            'latitude': location.latitude,
            'longitude': location.longitude,
            'city': location.city,
            'state': location.state,
            'country': location.country,
            'postal_code': location.postal_code,
            'timestamp': pointer.timestamp,
            'is_current': True,
            'distance': distance,
        }
