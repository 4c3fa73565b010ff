import uuid
from datetime import timedelta

from django.db import models
from django.utils import timezone

from .calendar_export import CalendarEvent


# Display metadata per event type (mirrors the schedule UI)
EVENT_TYPES = {
    'milestone': {'label': 'Milestone', 'color': '#8b5cf6', 'icon': 'Flag'},
    'deliverable': {'label': 'Deliverable', 'color': '#f59e0b', 'icon': 'Package'},
    'label': {'label': 'Label', 'color': '#6b7280', 'icon': 'Tag'},
}


class Event(models.Model):
    """A dated item on the team schedule."""

    TYPE_CHOICES = [(key, meta['label']) for key, meta in EVENT_TYPES.items()]
    VISIBILITY_CHOICES = [
        ('internal', 'Internal'),
        ('external', 'External'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    type = models.CharField(max_length=50, choices=TYPE_CHOICES, default='milestone')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    event_date = models.DateField(db_index=True)
    event_time = models.TimeField(null=True, blank=True)  # Empty means all-day
    visibility = models.CharField(max_length=20, choices=VISIBILITY_CHOICES, null=True, blank=True)

    # Audit fields
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['event_date', 'event_time']

    def __str__(self):
        return f"{self.title} ({self.event_date.strftime('%Y-%m-%d')})"

    @property
    def is_all_day(self):
        return self.event_time is None

    def to_calendar_event(self):
        """Convert to the export engine's CalendarEvent."""
        return CalendarEvent(
            id=str(self.id),
            title=self.title,
            type=self.type,
            event_date=self.event_date,
            event_time=self.event_time,
            description=self.description or None,
            visibility=self.visibility or None,
        )

    def is_upcoming(self, days_ahead=7, today=None):
        """True if the event falls between today and days_ahead days from now."""
        today = today or timezone.localdate()
        return today <= self.event_date <= today + timedelta(days=days_ahead)

    def is_overdue(self, today=None):
        """True if the event date is already behind us."""
        today = today or timezone.localdate()
        return self.event_date < today


def filter_events(queryset, type=None, visibility=None, start_date=None, end_date=None):
    """
    Narrow an Event queryset the way the schedule list does.

    Args:
        queryset: Event queryset to filter
        type: Exact event type
        visibility: Exact visibility
        start_date: Earliest event_date (inclusive)
        end_date: Latest event_date (inclusive)
    """
    if type:
        queryset = queryset.filter(type=type)
    if visibility:
        queryset = queryset.filter(visibility=visibility)
    if start_date:
        queryset = queryset.filter(event_date__gte=start_date)
    if end_date:
        queryset = queryset.filter(event_date__lte=end_date)
    return queryset
