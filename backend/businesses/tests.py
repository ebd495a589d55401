from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from common.exceptions import ConflictError, NoLocationError, NotFoundError
from locations.models import Location
from locations.services import GeoService, LocationStore
from .models import Business, BusinessLike, Event
from .services import BusinessCatalog

User = get_user_model()


def make_business(name, latitude, longitude, rating=4.0, cluster_id=None, **kwargs):
    location = Location.objects.create(latitude=latitude, longitude=longitude, city=kwargs.pop('city', None))
    return Business.objects.create(name=name, location=location, rating=rating, cluster_id=cluster_id, **kwargs)


class BusinessCatalogTests(TestCase):
    def setUp(self):
        self.catalog = BusinessCatalog()
        self.user = User.objects.create_user(username='explorer', password='password123')

    def test_find_nearby_scenario(self):
        """A business about 140 m away is found within a 5 km radius."""
        LocationStore().update_location(self.user.id, 40.0, -75.0)
        cafe = make_business("Corner Cafe", 40.001, -75.001)

        results = self.catalog.find_nearby(self.user, radius_km=5, limit=20)

        self.assertEqual([r.business for r in results], [cafe])
        self.assertAlmostEqual(results[0].distance, 0.14, delta=0.01)

    def test_find_nearby_without_location(self):
        make_business("Corner Cafe", 40.001, -75.001)

        with self.assertRaises(NoLocationError):
            self.catalog.find_nearby(self.user, radius_km=5, limit=20)

    def test_find_nearby_orders_filters_and_limits(self):
        LocationStore().update_location(self.user.id, 0.0, 0.0)
        third = make_business("Third", 0.03, 0.0)
        first = make_business("First", 0.01, 0.0)
        second = make_business("Second", 0.0, -0.02)
        make_business("Far Away", 1.0, 1.0)

        results = self.catalog.find_nearby(self.user, radius_km=10, limit=20)
        self.assertEqual([r.business for r in results], [first, second, third])
        distances = [r.distance for r in results]
        self.assertEqual(distances, sorted(distances))
        self.assertTrue(all(d < 10 for d in distances))

        results = self.catalog.find_nearby(self.user, radius_km=10, limit=2)
        self.assertEqual([r.business for r in results], [first, second])

    def test_find_nearby_strict_radius(self):
        """A business exactly on the radius is left out."""
        LocationStore().update_location(self.user.id, 0.0, 0.0)
        make_business("Edge", 0.01, 0.0)
        radius = GeoService.distance_km(0.0, 0.0, 0.01, 0.0)

        self.assertEqual(self.catalog.find_nearby(self.user, radius_km=radius, limit=20), [])

    def test_find_nearby_across_antimeridian(self):
        LocationStore().update_location(self.user.id, 0.0, 179.999)
        island = make_business("Island", 0.0, -179.999)

        results = self.catalog.find_nearby(self.user, radius_km=5, limit=20)
        self.assertEqual([r.business for r in results], [island])

    def test_detail_lists_upcoming_events(self):
        venue = make_business("Venue", 10.0, 10.0)
        now = timezone.now()
        Event.objects.create(business=venue, title="Past", start_time=now - timedelta(days=2), end_time=now - timedelta(days=1))
        later = Event.objects.create(business=venue, title="Later", start_time=now + timedelta(days=5), end_time=now + timedelta(days=6))
        soon = Event.objects.create(business=venue, title="Soon", start_time=now + timedelta(days=1), end_time=now + timedelta(days=2))

        detail = self.catalog.get_detail(venue.id)
        self.assertEqual(detail.events, [soon, later])

    def test_like_and_unlike(self):
        shop = make_business("Shop", 1.0, 1.0)

        self.catalog.like(self.user, shop.id)
        self.assertEqual(self.catalog.liked_ids(self.user), {shop.id})

        with self.assertRaises(ConflictError):
            self.catalog.like(self.user, shop.id)

        self.catalog.unlike(self.user, shop.id)
        self.assertEqual(BusinessLike.objects.count(), 0)

        with self.assertRaises(NotFoundError):
            self.catalog.unlike(self.user, shop.id)

    def test_like_unknown_business(self):
        with self.assertRaises(NotFoundError):
            self.catalog.like(self.user, "00000000-0000-0000-0000-000000000000")


class BusinessAPITests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='api_explorer', password='password123')
        self.client.force_authenticate(user=self.user)
        self.cafe = make_business("Corner Cafe", 40.001, -75.001, city="Philadelphia", business_type="cafe")

    def test_nearby(self):
        LocationStore().update_location(self.user.id, 40.0, -75.0)

        response = self.client.get(reverse('businesses:nearby'), {'radius': 5})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['name'], "Corner Cafe")
        self.assertEqual(response.data[0]['city'], "Philadelphia")
        self.assertIn('distance', response.data[0])

    def test_nearby_without_location(self):
        response = self.client.get(reverse('businesses:nearby'))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': 'User location not found'})

    def test_nearby_invalid_limit(self):
        LocationStore().update_location(self.user.id, 40.0, -75.0)

        response = self.client.get(reverse('businesses:nearby'), {'limit': 'many'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_detail_is_public(self):
        self.client.force_authenticate(user=None)

        response = self.client.get(reverse('businesses:detail', args=[self.cafe.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['business_type'], "cafe")
        self.assertEqual(response.data['events'], [])

    def test_detail_not_found(self):
        response = self.client.get(reverse('businesses:detail', args=["00000000-0000-0000-0000-000000000000"]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_like_flow(self):
        url = reverse('businesses:like', args=[self.cafe.id])

        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        response = self.client.get(reverse('businesses:likes'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['name'], "Corner Cafe")
        self.assertIn('liked_at', response.data[0])

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_likes_newest_first(self):
        bakery = make_business("Bakery", 40.0, -75.0)
        BusinessLike.objects.create(user=self.user, business=self.cafe)
        latest = BusinessLike.objects.create(user=self.user, business=bakery)
        BusinessLike.objects.filter(pk=latest.pk).update(created_at=timezone.now() + timedelta(minutes=1))

        response = self.client.get(reverse('businesses:likes'))
        self.assertEqual([b['name'] for b in response.data], ["Bakery", "Corner Cafe"])
