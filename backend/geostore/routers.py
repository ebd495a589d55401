"""
Database router keeping the geostore app in the geometry-native database.
"""
from django.conf import settings

GEO_APP_LABEL = 'geostore'


def geo_alias():
    return getattr(settings, 'GEO_DATABASE_ALIAS', 'geo')


class GeoStoreRouter:
    """
    Sends geostore models to the ``geo`` alias and everything else to the
    default database. Services still pass ``using=`` explicitly; the router
    only supplies defaults and decides where migrations run.
    """

    def db_for_read(self, model, **hints):
        if model._meta.app_label == GEO_APP_LABEL:
            return geo_alias()
        return None

    def db_for_write(self, model, **hints):
        if model._meta.app_label == GEO_APP_LABEL:
            return geo_alias()
        return None

    def allow_relation(self, obj1, obj2, **hints):
        labels = {obj1._meta.app_label, obj2._meta.app_label}
        if GEO_APP_LABEL in labels:
            return labels == {GEO_APP_LABEL}
        return None

    def allow_migrate(self, db, app_label, model_name=None, **hints):
        if app_label == GEO_APP_LABEL:
            return db == geo_alias()
        if db == geo_alias():
            return False
        return None
