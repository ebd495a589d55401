from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from common.exceptions import AuthorizationError, NoLocationError, NotFoundError, StoreFailure, ValidationError
from geostore.models import GeoPoint
from geostore.services import GeoPointStore
from user.models import Friendship
from .dtos import MirrorResult, PointDTO, SyncStatus
from .models import Location, UserLocation
from .services import GeoService, HeatmapService, LocationService, LocationStore

User = get_user_model()


class GeoServiceTests(TestCase):

    def test_distance_zero_for_same_point(self):
        self.assertEqual(GeoService.distance_km(40.0, -75.0, 40.0, -75.0), 0.0)

    def test_distance_is_symmetric(self):
        forward = GeoService.distance_km(40.0, -75.0, 51.5, -0.12)
        backward = GeoService.distance_km(51.5, -0.12, 40.0, -75.0)
        self.assertEqual(forward, backward)

    def test_distance_one_hundredth_degree(self):
        """0.01 degrees of latitude is roughly 1.11 km."""
        distance = GeoService.distance_km(0.0, 0.0, 0.01, 0.0)
        self.assertAlmostEqual(distance, 1.112, places=2)

    def test_distance_antipodal(self):
        distance = GeoService.distance_km(0.0, 0.0, 0.0, 180.0)
        self.assertAlmostEqual(distance, 3.141592653589793 * 6371.0, places=3)

    def test_distance_rejects_out_of_range(self):
        """Out-of-range coordinates raise instead of being clamped."""
        with self.assertRaises(ValidationError):
            GeoService.distance_km(91.0, 0.0, 0.0, 0.0)
        with self.assertRaises(ValidationError):
            GeoService.distance_km(0.0, 0.0, 0.0, -180.5)

    def test_parse_coordinates(self):
        self.assertEqual(GeoService.parse_coordinates("40.5", "-75.25"), (40.5, -75.25))
        self.assertEqual(GeoService.parse_coordinates(0, 0), (0.0, 0.0))

        with self.assertRaises(ValidationError):
            GeoService.parse_coordinates(None, 10)
        with self.assertRaises(ValidationError):
            GeoService.parse_coordinates("north", 10)
        with self.assertRaises(ValidationError):
            GeoService.parse_coordinates(True, 10)
        with self.assertRaises(ValidationError):
            GeoService.parse_coordinates(10 ** 400, 0)
        with self.assertRaises(ValidationError):
            GeoService.distance_km(0, 10 ** 400, 0, 0)

    def test_rank_by_distance_excludes_boundary(self):
        """A candidate exactly radius_km away is not included."""
        center = PointDTO(latitude=0.0, longitude=0.0)
        edge = (0.01, 0.0)
        radius = GeoService.distance_km(0.0, 0.0, *edge)

        ranked = GeoService.rank_by_distance(center, [edge], radius_km=radius, coordinates=lambda c: c)
        self.assertEqual(ranked, [])

        ranked = GeoService.rank_by_distance(center, [edge], radius_km=radius + 1e-9, coordinates=lambda c: c)
        self.assertEqual(len(ranked), 1)

    def test_rank_by_distance_orders_and_limits(self):
        center = PointDTO(latitude=0.0, longitude=0.0)
        candidates = [(0.03, 0.0), (0.01, 0.0), (0.02, 0.0), (5.0, 0.0)]

        ranked = GeoService.rank_by_distance(center, candidates, radius_km=10, limit=2, coordinates=lambda c: c)

        self.assertEqual([c for c, _ in ranked], [(0.01, 0.0), (0.02, 0.0)])
        distances = [d for _, d in ranked]
        self.assertEqual(distances, sorted(distances))

    def test_bounding_box_contains_radius(self):
        """Points just inside the radius in each direction fall inside the box."""
        center = PointDTO(latitude=40.0, longitude=-75.0)
        box = GeoService.bounding_box(center, 10)

        self.assertLess(box['latitude__gte'], 40.0 - 0.0899)
        self.assertGreater(box['latitude__lte'], 40.0 + 0.0899)
        # one degree of longitude is shorter at 40N, so the box is wider than tall
        self.assertLess(box['longitude__gte'], -75.0 - 0.117)
        self.assertGreater(box['longitude__lte'], -75.0 + 0.117)

    def test_bounding_box_drops_longitude_near_antimeridian_and_poles(self):
        box = GeoService.bounding_box(PointDTO(latitude=0.0, longitude=179.99), 5)
        self.assertNotIn('longitude__gte', box)

        box = GeoService.bounding_box(PointDTO(latitude=89.99, longitude=0.0), 5)
        self.assertNotIn('longitude__gte', box)
        self.assertEqual(box['latitude__lte'], 90.0)

    def test_aggregate_tiles(self):
        """Identical points share a cell; tiles are sorted by count."""
        points = [(40.01, -75.0), (40.01, -75.0), (40.2, -75.3)]

        tiles = GeoService.aggregate_tiles(points, precision=6)

        self.assertEqual(len(tiles), 2)
        self.assertEqual(tiles[0].count, 2)
        self.assertEqual(tiles[0].geohash, GeoService.encode_geohash(40.01, -75.0, 6))
        self.assertEqual(sum(tile.count for tile in tiles), 3)
        self.assertAlmostEqual(tiles[0].latitude, 40.01, places=2)


class LocationModelTests(TestCase):

    def test_location_is_immutable(self):
        """Saved Location rows cannot be edited or deleted."""
        location = Location.objects.create(latitude=10.0, longitude=20.0)

        location.latitude = 11.0
        with self.assertRaises(ValueError):
            location.save()
        with self.assertRaises(ValueError):
            location.delete()

    def test_invalid_coordinates(self):
        with self.assertRaises(ValueError):
            Location(latitude=100.0, longitude=200.0).save()


class LocationStoreTests(TestCase):
    def setUp(self):
        self.store = LocationStore()
        self.user = User.objects.create_user(username='walker', password='password123', id=5)

    def assert_single_current(self, user_id):
        self.assertEqual(UserLocation.objects.filter(user_id=user_id, is_current=True).count(), 1)

    def test_two_updates_keep_latest_current(self):
        """The second update becomes current and both records are kept."""
        self.store.update_location(5, 40.0, -75.0)
        self.store.update_location(5, 41.0, -74.0)

        current = self.store.get_current_location(5)
        self.assertEqual(current.location.get_lat_lon(), (41.0, -74.0))
        self.assertEqual(UserLocation.objects.filter(user_id=5).count(), 2)
        self.assertEqual(Location.objects.count(), 2)
        self.assert_single_current(5)

    def test_many_updates_single_current(self):
        for i in range(5):
            self.store.update_location(5, 10.0 + i, 20.0)
            self.assert_single_current(5)

    def test_address_fields_saved(self):
        pointer = self.store.update_location(5, 1.0, 2.0, {'city': 'Philadelphia', 'country': 'US', 'state': ''})

        self.assertEqual(pointer.location.city, 'Philadelphia')
        self.assertEqual(pointer.location.country, 'US')
        self.assertIsNone(pointer.location.state)

    def test_validation_failure_mutates_nothing(self):
        with self.assertRaises(ValidationError):
            self.store.update_location(5, 95.0, 0.0)
        with self.assertRaises(ValidationError):
            self.store.update_location(5, None, 0.0)

        self.assertEqual(Location.objects.count(), 0)
        self.assertEqual(UserLocation.objects.count(), 0)

    def test_zero_coordinates_accepted(self):
        pointer = self.store.update_location(5, 0, 0)
        self.assertEqual(pointer.location.get_lat_lon(), (0.0, 0.0))

    def test_unknown_user(self):
        with self.assertRaises(NotFoundError):
            self.store.update_location(999, 1.0, 1.0)
        self.assertEqual(Location.objects.count(), 0)

    def test_failure_rolls_back(self):
        """A failing pointer insert undoes the Location insert and the flip."""
        self.store.update_location(5, 1.0, 1.0)

        with patch.object(UserLocation, 'save', side_effect=DatabaseError("disk full")):
            with self.assertRaises(StoreFailure):
                self.store.update_location(5, 2.0, 2.0)

        self.assertEqual(Location.objects.count(), 1)
        self.assert_single_current(5)
        self.assertEqual(self.store.get_current_location(5).location.get_lat_lon(), (1.0, 1.0))

    def test_history_newest_first(self):
        self.store.update_location(5, 1.0, 1.0)
        self.store.update_location(5, 2.0, 2.0)
        self.store.update_location(5, 3.0, 3.0)

        history = self.store.history(5, limit=2)
        self.assertEqual([p.location.latitude for p in history], [3.0, 2.0])
        self.assertTrue(history[0].is_current)
        self.assertFalse(history[1].is_current)


class LocationServiceTests(TestCase):
    databases = {'default', 'geo'}

    def setUp(self):
        self.user = User.objects.create_user(username='mirror', password='password123')
        self.service = LocationService(LocationStore(), GeoPointStore())

    def test_update_mirrors_point(self):
        result = self.service.update_location(self.user, 40.0, -75.0)

        self.assertTrue(result.mirror.ok)
        geo_point = GeoPoint.objects.using('geo').get(user_id=self.user.id)
        self.assertAlmostEqual(geo_point.latitude, 40.0)
        self.assertAlmostEqual(geo_point.longitude, -75.0)

    def test_second_update_overwrites_point(self):
        self.service.update_location(self.user, 40.0, -75.0)
        self.service.update_location(self.user, 41.0, -76.0)

        self.assertEqual(GeoPoint.objects.using('geo').filter(user_id=self.user.id).count(), 1)
        self.assertEqual(self.service.sync_status(self.user.id).status, SyncStatus.IN_SYNC)

    def test_mirror_failure_is_soft(self):
        """Primary update survives a failing mirror and reports it."""
        with patch.object(GeoPointStore, 'upsert', side_effect=DatabaseError("geo down")):
            result = self.service.update_location(self.user, 40.0, -75.0)

        self.assertEqual(result.mirror.status, MirrorResult.FAILED)
        self.assertEqual(result.mirror.error, "Geo store update failed")
        self.assertEqual(UserLocation.objects.filter(user=self.user, is_current=True).count(), 1)
        self.assertEqual(self.service.sync_status(self.user.id).status, SyncStatus.MISSING)

    def test_drift_and_reconcile(self):
        self.service.update_location(self.user, 40.0, -75.0)
        with patch.object(GeoPointStore, 'upsert', side_effect=DatabaseError("geo down")):
            self.service.update_location(self.user, 42.0, -71.0)

        self.assertEqual(self.service.sync_status(self.user.id).status, SyncStatus.DRIFTED)

        result = self.service.reconcile(self.user.id)
        self.assertTrue(result.ok)
        self.assertEqual(self.service.sync_status(self.user.id).status, SyncStatus.IN_SYNC)
        self.assertIsNone(self.service.reconcile(self.user.id))

    def test_sync_status_without_location(self):
        self.assertEqual(self.service.sync_status(self.user.id).status, SyncStatus.NO_LOCATION)

    def test_current_location_missing(self):
        with self.assertRaises(NoLocationError):
            self.service.get_current_location(self.user)

    def test_friend_location_requires_friendship(self):
        friend = User.objects.create_user(username='friend', password='password123')
        self.service.update_location(friend, 10.0, 10.0)

        with self.assertRaises(AuthorizationError):
            self.service.get_friend_location(self.user, friend.id)

        Friendship.objects.create(requester=self.user, addressee=friend, status=Friendship.Status.ACCEPTED)
        pointer = self.service.get_friend_location(self.user, friend.id)
        self.assertEqual(pointer.location.get_lat_lon(), (10.0, 10.0))


class HeatmapServiceTests(TestCase):
    def setUp(self):
        self.store = LocationStore()
        self.service = HeatmapService(self.store)
        self.me = User.objects.create_user(username='me', password='password123')
        self.near = User.objects.create_user(username='near', password='password123')
        self.nearer = User.objects.create_user(username='nearer', password='password123')
        self.far = User.objects.create_user(username='far', password='password123')

    def test_no_location_returns_empty(self):
        heatmap = self.service.build(self.me, radius_km=10)

        self.assertEqual(heatmap.locations, [])
        self.assertEqual(heatmap.count, 0)
        self.assertIsNone(heatmap.center)
        self.assertEqual(heatmap.message, "No location data available")

    def test_other_users_within_radius(self):
        """Only other users' current positions inside the radius, nearest first."""
        self.store.update_location(self.me.id, 40.0, -75.0)
        self.store.update_location(self.near.id, 40.0, -74.95)
        self.store.update_location(self.near.id, 40.02, -75.0)
        self.store.update_location(self.nearer.id, 40.01, -75.0)
        self.store.update_location(self.far.id, 41.0, -75.0)

        heatmap = self.service.build(self.me, radius_km=10)

        self.assertEqual(heatmap.count, 2)
        self.assertEqual(heatmap.center, PointDTO(latitude=40.0, longitude=-75.0))
        self.assertEqual([p['latitude'] for p in heatmap.locations], [40.01, 40.02])
        self.assertIsNone(heatmap.tiles)

    def test_tiles(self):
        self.store.update_location(self.me.id, 40.0, -75.0)
        self.store.update_location(self.near.id, 40.01, -75.0)
        self.store.update_location(self.nearer.id, 40.01, -75.0)

        heatmap = self.service.build(self.me, radius_km=10, precision=6)

        self.assertEqual(len(heatmap.tiles), 1)
        self.assertEqual(heatmap.tiles[0].count, 2)


class LocationAPITests(APITestCase):
    databases = {'default', 'geo'}

    def setUp(self):
        self.user = User.objects.create_user(username='api_user', password='password123')
        self.friend = User.objects.create_user(username='api_friend', password='password123')
        self.client.force_authenticate(user=self.user)
        self.location_url = reverse('locations:user-location')

    def test_update_location(self):
        response = self.client.post(
            self.location_url,
            {'latitude': 40.7128, 'longitude': -74.006, 'city': 'New York'},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('locationId', response.data)
        self.assertIn('userLocationId', response.data)
        self.assertEqual(response.data['geo']['status'], 'synced')

        response = self.client.get(self.location_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['city'], 'New York')
        self.assertTrue(response.data['is_current'])

    def test_update_location_mirror_failure(self):
        """The request still succeeds; the geo block reports the failure."""
        with patch.object(GeoPointStore, 'upsert', side_effect=DatabaseError("geo down")):
            response = self.client.post(self.location_url, {'latitude': 1.0, 'longitude': 2.0}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['geo'], {'status': 'failed', 'error': 'Geo store update failed'})

    def test_update_location_invalid(self):
        response = self.client.post(self.location_url, {'latitude': 91, 'longitude': 0}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Latitude must be between -90 and 90 degrees')
        self.assertEqual(Location.objects.count(), 0)

    def test_update_location_huge_number(self):
        response = self.client.post(self.location_url, {'latitude': 10 ** 400, 'longitude': 0}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Latitude and longitude must be numbers')
        self.assertEqual(Location.objects.count(), 0)

    def test_update_location_missing(self):
        response = self.client.post(self.location_url, {'latitude': 10}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_get_location_none(self):
        response = self.client.get(self.location_url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': 'Current location not found'})

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(self.location_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_history(self):
        for lat in (1.0, 2.0, 3.0):
            self.client.post(self.location_url, {'latitude': lat, 'longitude': 0.0}, format='json')

        response = self.client.get(reverse('locations:location-history'), {'limit': 2})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['latitude'] for p in response.data], [3.0, 2.0])

    def test_sync_status(self):
        self.client.post(self.location_url, {'latitude': 5.0, 'longitude': 6.0}, format='json')

        response = self.client.get(reverse('locations:sync-status'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'in_sync')

    def test_heatmap_without_location(self):
        response = self.client.get(reverse('locations:heatmap'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['locations'], [])
        self.assertEqual(response.data['count'], 0)
        self.assertIsNone(response.data['center'])

    def test_heatmap_with_tiles(self):
        LocationStore().update_location(self.user.id, 40.0, -75.0)
        LocationStore().update_location(self.friend.id, 40.01, -75.0)

        response = self.client.get(reverse('locations:heatmap'), {'radius': 5, 'precision': 5})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['center'], {'latitude': 40.0, 'longitude': -75.0})
        self.assertEqual(response.data['tiles'][0]['count'], 1)

    def test_heatmap_bad_params(self):
        response = self.client.get(reverse('locations:heatmap'), {'radius': '-1'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.get(reverse('locations:heatmap'), {'precision': 13})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_friend_location(self):
        url = reverse('locations:friend-location', args=[self.friend.id])
        LocationStore().update_location(self.friend.id, 12.0, 13.0)

        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        Friendship.objects.create(requester=self.friend, addressee=self.user, status=Friendship.Status.ACCEPTED)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['latitude'], 12.0)

    @override_settings(POINT_FEED_ALLOWED_IPS=['127.0.0.1'])
    def test_point_feed(self):
        LocationStore().update_location(self.user.id, 1.5, 2.5)
        self.client.force_authenticate(user=None)

        response = self.client.get(reverse('locations:points'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'data': [{'latitude': 1.5, 'longitude': 2.5}]})

    @override_settings(POINT_FEED_ALLOWED_IPS=['192.168.1.'])
    def test_point_feed_prefix_and_denied(self):
        url = reverse('locations:points')

        response = self.client.get(url, REMOTE_ADDR='192.168.1.40')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.get(url, REMOTE_ADDR='10.0.0.8')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
