from django.contrib import admin
from .models import Location, UserLocation


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    """
    Location records are append-only, so the admin only displays them.
    """
    list_display = ['id', 'latitude', 'longitude', 'city', 'country', 'created_at']
    list_filter = ['country', 'created_at']
    search_fields = ['city', 'state', 'country', 'postal_code']
    readonly_fields = ['id', 'latitude', 'longitude', 'city', 'state', 'country', 'postal_code', 'created_at']

    fieldsets = (
        ('Coordinates', {
            'fields': ('id', 'latitude', 'longitude')
        }),
        ('Address', {
            'fields': ('city', 'state', 'country', 'postal_code')
        }),
        ('Timestamps', {
            'fields': ('created_at',),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(UserLocation)
class UserLocationAdmin(admin.ModelAdmin):
    list_display = ['user', 'location', 'is_current', 'timestamp']
    list_filter = ['is_current', 'timestamp']
    search_fields = ['user__username']
    readonly_fields = ['id', 'user', 'location', 'is_current', 'timestamp']

    def has_add_permission(self, request):
        return False
