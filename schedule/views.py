import logging
import re
from datetime import datetime

from django.conf import settings
from django.http import HttpResponse, HttpResponseRedirect, JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET

from indiecraft.timezone_utils import get_user_timezone

from .calendar_export import (
    CalendarExportError,
    ExportConfig,
    build_google_calendar_url,
    generate_ics_file,
)
from .models import Event, filter_events

logger = logging.getLogger(__name__)

ICS_CONTENT_TYPE = 'text/calendar; charset=utf-8'
DEFAULT_EXPORT_FILENAME = 'indiecraft-events.ics'


def export_config():
    """Build the export identity from settings."""
    defaults = ExportConfig()
    return ExportConfig(
        product_id=getattr(settings, 'SCHEDULE_PRODUCT_ID', defaults.product_id),
        uid_domain=getattr(settings, 'SCHEDULE_UID_DOMAIN', defaults.uid_domain),
        calendar_name=getattr(settings, 'SCHEDULE_CALENDAR_NAME', defaults.calendar_name),
    )


def ics_response(content, filename):
    """
    Serve a calendar document as a file download.

    The body is the exact UTF-8 encoding of content; line endings are
    left untouched.
    """
    # Quotes, backslashes and line breaks would break out of the header value
    filename = re.sub(r'["\\\r\n]', '', filename).strip() or DEFAULT_EXPORT_FILENAME
    response = HttpResponse(content.encode('utf-8'), content_type=ICS_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


def _parse_date_param(value, name):
    if not value:
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise CalendarExportError(f"Invalid {name} date: {value!r} (expected YYYY-MM-DD)")


@require_GET
def export_ics(request):
    """
    Download schedule events as an .ics file.

    Query params (all optional):
        type, visibility: exact match filters
        start, end: inclusive date range (YYYY-MM-DD)
        name: calendar name shown by the client
        filename: download filename
    """
    config = export_config()
    filename = request.GET.get('filename') or getattr(settings, 'SCHEDULE_EXPORT_FILENAME', DEFAULT_EXPORT_FILENAME)

    try:
        events = filter_events(
            Event.objects.all(),
            type=request.GET.get('type'),
            visibility=request.GET.get('visibility'),
            start_date=_parse_date_param(request.GET.get('start'), 'start'),
            end_date=_parse_date_param(request.GET.get('end'), 'end'),
        )
        content = generate_ics_file(
            [event.to_calendar_event() for event in events],
            request.GET.get('name') or None,
            config=config,
            clock=timezone.now,
        )
    except CalendarExportError as e:
        logger.warning(f"Calendar export rejected: {e}")
        return JsonResponse({
            'success': False,
            'error': str(e)
        }, status=400)

    return ics_response(content, filename)


@require_GET
def google_calendar_link(request, event_id):
    """
    Send the user to Google Calendar with the event pre-filled.

    Timed events are interpreted in the user's timezone (cookie), falling
    back to SCHEDULE_TIMEZONE. Pass ?format=json to get the URL instead
    of a redirect.
    """
    try:
        event = Event.objects.get(id=event_id)
    except Event.DoesNotExist:
        return JsonResponse({
            'success': False,
            'error': 'Event not found'
        }, status=404)

    default_tz = getattr(settings, 'SCHEDULE_TIMEZONE', 'UTC')
    user_tz = get_user_timezone(request, default=default_tz)

    try:
        url = build_google_calendar_url(event.to_calendar_event(), user_tz, config=export_config())
    except CalendarExportError as e:
        logger.warning(f"Google Calendar link failed for event {event_id}: {e}")
        return JsonResponse({
            'success': False,
            'error': str(e)
        }, status=400)

    if request.GET.get('format') == 'json':
        return JsonResponse({'success': True, 'url': url})
    return HttpResponseRedirect(url)
