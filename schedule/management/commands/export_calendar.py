"""
Management command to export schedule events to an .ics file.

Usage:
    python manage.py export_calendar
    python manage.py export_calendar --output milestones.ics --type milestone
    python manage.py export_calendar --start 2026-01-01 --end 2026-03-31 --output -

Defaults come from settings:
    SCHEDULE_EXPORT_FILENAME - Output file when --output is not given
    SCHEDULE_CALENDAR_NAME - Calendar name when --name is not given
"""
from datetime import datetime

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from schedule.calendar_export import CalendarExportError, generate_ics_file, write_ics_file
from schedule.models import Event, filter_events
from schedule.views import export_config


def _parse_date(value):
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise CommandError(f"Invalid date: {value} (expected YYYY-MM-DD)")


class Command(BaseCommand):
    help = "Export schedule events to an iCalendar (.ics) file"

    def add_arguments(self, parser):
        parser.add_argument("--output", "-o", type=str, default=None, help="Output path, or '-' for stdout")
        parser.add_argument("--type", type=str, default=None, help="Only export events of this type")
        parser.add_argument("--visibility", type=str, default=None, help="Only export internal or external events")
        parser.add_argument("--start", type=_parse_date, default=None, help="Earliest event date (YYYY-MM-DD)")
        parser.add_argument("--end", type=_parse_date, default=None, help="Latest event date (YYYY-MM-DD)")
        parser.add_argument("--name", type=str, default=None, help="Calendar name shown by calendar clients")

    def handle(self, *_args, **options):
        output = options["output"] or getattr(settings, "SCHEDULE_EXPORT_FILENAME", "indiecraft-events.ics")

        events = filter_events(
            Event.objects.all(),
            type=options["type"],
            visibility=options["visibility"],
            start_date=options["start"],
            end_date=options["end"],
        )
        calendar_events = [event.to_calendar_event() for event in events]

        try:
            content = generate_ics_file(
                calendar_events,
                options["name"],
                config=export_config(),
                clock=timezone.now,
            )
        except CalendarExportError as e:
            raise CommandError(f"Export failed: {e}")

        if output == "-":
            # ending="" keeps the document byte-exact
            self.stdout.write(content, ending="")
            return

        size = write_ics_file(content, output)
        self.stdout.write(
            self.style.SUCCESS(f"Exported {len(calendar_events)} event(s) to {output} ({size} bytes)")
        )
