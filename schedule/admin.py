from django.contrib import admin
from .models import Event


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ['title', 'type', 'event_date', 'event_time', 'visibility']
    list_filter = ['type', 'visibility']
    search_fields = ['title', 'description']
    date_hierarchy = 'event_date'
    ordering = ['event_date']
    readonly_fields = ['id', 'created_at', 'updated_at']
