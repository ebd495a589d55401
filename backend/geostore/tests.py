from io import StringIO
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.db import DatabaseError
from django.test import TestCase

from common.exceptions import ValidationError
from locations.models import UserLocation
from locations.services import LocationService, LocationStore
from .models import GeoPoint
from .routers import GeoStoreRouter
from .services import GeoPointStore

User = get_user_model()


class GeoStoreRouterTests(TestCase):
    def setUp(self):
        self.router = GeoStoreRouter()

    def test_geopoint_routed_to_geo(self):
        self.assertEqual(self.router.db_for_read(GeoPoint), 'geo')
        self.assertEqual(self.router.db_for_write(GeoPoint), 'geo')
        self.assertIsNone(self.router.db_for_read(UserLocation))

    def test_migrations_split(self):
        self.assertTrue(self.router.allow_migrate('geo', 'geostore'))
        self.assertFalse(self.router.allow_migrate('default', 'geostore'))
        self.assertFalse(self.router.allow_migrate('geo', 'locations'))
        self.assertIsNone(self.router.allow_migrate('default', 'locations'))


class GeoPointStoreTests(TestCase):
    databases = {'default', 'geo'}

    def setUp(self):
        self.store = GeoPointStore()

    def test_upsert_creates_then_overwrites(self):
        """One row per user, overwritten in place."""
        first, created = self.store.upsert(7, 40.0, -75.0)
        self.assertTrue(created)

        second, created = self.store.upsert(7, 41.5, -73.25)
        self.assertFalse(created)
        self.assertEqual(first.pk, second.pk)
        self.assertGreaterEqual(second.updated_at, first.updated_at)

        stored = self.store.get(7)
        self.assertAlmostEqual(stored.latitude, 41.5)
        self.assertAlmostEqual(stored.longitude, -73.25)
        self.assertEqual(GeoPoint.objects.using('geo').count(), 1)

    def test_point_stored_as_lon_lat(self):
        geo_point, _ = self.store.upsert(8, 10.0, 20.0)
        self.assertEqual(geo_point.point.x, 20.0)
        self.assertEqual(geo_point.point.y, 10.0)
        self.assertEqual(geo_point.point.srid, 4326)

    def test_upsert_validates_before_writing(self):
        with self.assertRaises(ValidationError):
            self.store.upsert(9, 0.0, 181.0)
        self.assertIsNone(self.store.get(9))


class ReconcileCommandTests(TestCase):
    databases = {'default', 'geo'}

    def setUp(self):
        self.user = User.objects.create_user(username='drifter', password='password123')
        self.service = LocationService(LocationStore(), GeoPointStore())
        with patch.object(GeoPointStore, 'upsert', side_effect=DatabaseError("geo down")):
            self.service.update_location(self.user, 30.0, 31.0)

    def test_dry_run_reports_only(self):
        out = StringIO()
        call_command('reconcile_geopoints', '--dry-run', stdout=out)

        self.assertIn(f'User {self.user.id}: missing', out.getvalue())
        self.assertIsNone(GeoPointStore().get(self.user.id))

    def test_repairs_missing_point(self):
        out = StringIO()
        call_command('reconcile_geopoints', stdout=out)

        self.assertIn('repaired 1', out.getvalue())
        geo_point = GeoPointStore().get(self.user.id)
        self.assertAlmostEqual(geo_point.latitude, 30.0)
        self.assertAlmostEqual(geo_point.longitude, 31.0)
