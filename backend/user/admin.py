from django.contrib import admin

from .models import Friendship


@admin.register(Friendship)
class FriendshipAdmin(admin.ModelAdmin):
    list_display = ['requester', 'addressee', 'status', 'created_at', 'updated_at']
    list_filter = ['status']
    search_fields = ['requester__username', 'addressee__username']
    readonly_fields = ['id', 'created_at', 'updated_at']
