from django.contrib import admin
from .models import Business, BusinessLike, Event


class EventInline(admin.TabularInline):
    model = Event
    extra = 0


@admin.register(Business)
class BusinessAdmin(admin.ModelAdmin):
    list_display = ['name', 'business_type', 'rating', 'cluster_id', 'created_at']
    list_filter = ['business_type', 'cluster_id']
    search_fields = ['name', 'description']
    readonly_fields = ['id', 'created_at']
    raw_id_fields = ['location']
    inlines = [EventInline]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ['title', 'business', 'start_time', 'end_time']
    list_filter = ['start_time']
    search_fields = ['title', 'business__name']


@admin.register(BusinessLike)
class BusinessLikeAdmin(admin.ModelAdmin):
    list_display = ['user', 'business', 'created_at']
    search_fields = ['user__username', 'business__name']
