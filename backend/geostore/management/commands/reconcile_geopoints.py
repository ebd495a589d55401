"""
Management command to repair geo points that drifted from the primary store.
"""
from django.core.management.base import BaseCommand

from geostore.services import GeoPointStore
from locations.services import LocationService, LocationStore


class Command(BaseCommand):
    help = 'Re-mirror current locations whose geo point is missing or drifted'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Only report users that need repair',
        )
        parser.add_argument(
            '--user-id',
            type=int,
            help='Check a single user by ID',
        )

    def handle(self, *args, **options):
        store = LocationStore()
        service = LocationService(store, GeoPointStore())

        if options['user_id']:
            user_ids = [options['user_id']]
        else:
            user_ids = list(store.current_locations().order_by('user_id').values_list('user_id', flat=True))

        checked = repaired = failed = 0
        for user_id in user_ids:
            checked += 1
            sync = service.sync_status(user_id)
            if not sync.needs_repair:
                continue

            if options['dry_run']:
                self.stdout.write(self.style.WARNING(f'User {user_id}: {sync.status}'))
                continue

            result = service.reconcile(user_id)
            if result is None:
                continue
            if result.ok:
                repaired += 1
                self.stdout.write(self.style.SUCCESS(f'User {user_id}: {sync.status}, repaired'))
            else:
                failed += 1
                self.stdout.write(self.style.ERROR(f'User {user_id}: {sync.status}, repair failed'))

        self.stdout.write(f'Checked {checked}, repaired {repaired}, failed {failed}')
