from django.contrib import admin
from django.contrib.gis.admin import GISModelAdmin
from .models import GeoPoint


@admin.register(GeoPoint)
class GeoPointAdmin(GISModelAdmin):
    """
    Admin interface for mirrored user points.
    GISModelAdmin provides map interface for location data.
    """
    using = 'geo'

    list_display = ['user_id', 'updated_at']
    search_fields = ['user_id']
    readonly_fields = ['updated_at']

    def get_queryset(self, request):
        return super().get_queryset(request).using(self.using)

    def save_model(self, request, obj, form, change):
        obj.save(using=self.using)

    def delete_model(self, request, obj):
        obj.delete(using=self.using)
