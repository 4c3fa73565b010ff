"""
Calendar export for schedule events.

Turns a list of events into an iCalendar (.ics) document and builds
Google Calendar "add event" links for single events. Nothing in here
touches the database or Django; views and management commands adapt it.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Iterable, Optional, Tuple, Union
from urllib.parse import urlencode

import pytz

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/render"
CRLF = "\r\n"


class CalendarExportError(ValueError):
    """Raised when an event can't be turned into calendar output."""


@dataclass(frozen=True)
class ExportConfig:
    """Vendor identity stamped into every exported document."""

    product_id: str = "-//IndieCraft//Schedule//EN"
    uid_domain: str = "indiecraft"
    calendar_name: str = "IndieCraft Events"
    timed_duration: timedelta = timedelta(hours=1)


DEFAULT_CONFIG = ExportConfig()


@dataclass(frozen=True)
class CalendarEvent:
    """
    One schedulable item to export.

    event_date/event_time may be date/time objects or ISO strings
    ('2026-01-24', '14:30' or '14:30:00'). No event_time means all-day.
    """

    id: str
    title: str
    type: str
    event_date: Union[date, str]
    event_time: Optional[Union[time, str]] = None
    description: Optional[str] = None
    visibility: Optional[str] = None

    @classmethod
    def from_mapping(cls, data):
        """Build an event from a row dict as returned by the backend."""
        return cls(
            id=str(data.get('id') or ''),
            title=data.get('title') or '',
            type=data.get('type') or '',
            event_date=data.get('event_date'),
            event_time=data.get('event_time') or None,
            description=data.get('description'),
            visibility=data.get('visibility') or None,
        )

    @property
    def is_all_day(self) -> bool:
        return not self.event_time


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def escape_ics_text(text: str) -> str:
    """Escape free text for a TEXT property value (backslash first)."""
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def format_ics_date(value: Union[date, datetime], include_time: bool = False) -> str:
    """Format as YYYYMMDD, or YYYYMMDDTHHMMSS when include_time is set."""
    # strftime("%Y") doesn't zero-pad years before 1000 on every platform
    stamp = f"{value.year:04d}{value.month:02d}{value.day:02d}"
    if not include_time:
        return stamp
    return f"{stamp}T{value.hour:02d}{value.minute:02d}{value.second:02d}"


def type_label(event_type: str) -> str:
    """'milestone' -> 'Milestone'. Works for any tag, known or not."""
    return event_type[:1].upper() + event_type[1:]


def describe_event(event: CalendarEvent) -> str:
    label = f"[{type_label(event.type)}]"
    if event.description:
        return f"{label} {event.description}"
    return label


def parse_event_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), "%Y-%m-%d").date()
        except ValueError:
            pass
    raise CalendarExportError(f"Invalid event_date: {value!r}")


def parse_event_time(value) -> Optional[time]:
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        for fmt in ("%H:%M:%S", "%H:%M"):
            try:
                return datetime.strptime(value.strip(), fmt).time()
            except ValueError:
                continue
    raise CalendarExportError(f"Invalid event_time: {value!r}")


def event_bounds(event: CalendarEvent, config: ExportConfig = DEFAULT_CONFIG) -> Tuple[Union[date, datetime], Union[date, datetime], bool]:
    """
    Compute (start, end, is_timed) for an event.

    Timed events end config.timed_duration after they start (naive local
    datetimes). All-day events end the following day, since DTEND is
    exclusive for date values.
    """
    start_date = parse_event_date(event.event_date)
    start_time = parse_event_time(event.event_time)

    try:
        if start_time is None:
            return start_date, start_date + timedelta(days=1), False

        start = datetime.combine(start_date, start_time)
        return start, start + config.timed_duration, True
    except OverflowError:
        raise CalendarExportError(f"Event date out of range: {event.event_date!r}")


def _require_id(event: CalendarEvent) -> str:
    if not event.id:
        raise CalendarExportError(f"Event {event.title!r} has no id")
    return event.id


def _event_lines(event: CalendarEvent, stamp: str, config: ExportConfig):
    start, end, is_timed = event_bounds(event, config)

    lines = [
        "BEGIN:VEVENT",
        f"UID:{_require_id(event)}@{config.uid_domain}",
        f"DTSTAMP:{stamp}",
    ]

    if is_timed:
        lines.append(f"DTSTART:{format_ics_date(start, True)}")
        lines.append(f"DTEND:{format_ics_date(end, True)}")
    else:
        lines.append(f"DTSTART;VALUE=DATE:{format_ics_date(start)}")
        lines.append(f"DTEND;VALUE=DATE:{format_ics_date(end)}")

    lines.append(f"SUMMARY:{escape_ics_text(event.title)}")
    lines.append(f"DESCRIPTION:{escape_ics_text(describe_event(event))}")
    lines.append(f"CATEGORIES:{event.type.upper()}")

    if event.visibility:
        lines.append(f"X-VISIBILITY:{event.visibility.upper()}")

    lines.append("END:VEVENT")
    return lines


def generate_ics_file(
    events: Iterable[CalendarEvent],
    calendar_name: Optional[str] = None,
    *,
    config: ExportConfig = DEFAULT_CONFIG,
    clock: Callable[[], datetime] = utc_now,
) -> str:
    """
    Generate an iCalendar document for the given events.

    Events are written in the order given. Lines are joined with CRLF.
    The clock is read once, so every DTSTAMP in the document matches.

    Args:
        events: CalendarEvent instances
        calendar_name: X-WR-CALNAME value (defaults to config.calendar_name)
        config: Vendor identity constants
        clock: Zero-argument callable returning the current instant

    Raises:
        CalendarExportError: If any event has a malformed date/time or no id.
            Nothing is returned in that case.
    """
    name = calendar_name if calendar_name is not None else config.calendar_name

    now = clock()
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    stamp = f"{format_ics_date(now, True)}Z"

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{config.product_id}",
        f"X-WR-CALNAME:{escape_ics_text(name)}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
    ]

    count = 0
    for event in events:
        lines.extend(_event_lines(event, stamp, config))
        count += 1

    lines.append("END:VCALENDAR")
    logger.debug(f"Generated calendar '{name}' with {count} event(s)")
    return CRLF.join(lines)


def _resolve_timezone(tz):
    if tz is None:
        raise CalendarExportError("A timezone is required for timed events")
    if isinstance(tz, str):
        try:
            return pytz.timezone(tz)
        except pytz.exceptions.UnknownTimeZoneError:
            raise CalendarExportError(f"Unknown timezone: {tz}")
    return tz


def _localize(tz, value: datetime) -> datetime:
    # pytz zones need localize() to pick the right offset; plain tzinfo doesn't
    if hasattr(tz, 'localize'):
        return tz.localize(value)
    return value.replace(tzinfo=tz)


def build_google_calendar_url(event: CalendarEvent, tz="UTC", *, config: ExportConfig = DEFAULT_CONFIG) -> str:
    """
    Build a Google Calendar "add event" URL for a single event.

    Timed events are read as wall-clock time in `tz` and rendered in UTC
    (YYYYMMDDTHHMMSSZ). All-day events use plain date arithmetic and are
    never shifted between timezones.

    Args:
        event: The event to link
        tz: pytz timezone (or IANA name) the event's date/time is written in
        config: Supplies the timed-event duration

    Returns:
        Fully-formed URL; opening it is up to the caller
    """
    start, end, is_timed = event_bounds(event, config)

    if is_timed:
        zone = _resolve_timezone(tz)
        try:
            start_utc = _localize(zone, start).astimezone(pytz.UTC)
            end_utc = _localize(zone, end).astimezone(pytz.UTC)
        except OverflowError:
            raise CalendarExportError(f"Event date out of range: {event.event_date!r}")
        dates = f"{format_ics_date(start_utc, True)}Z/{format_ics_date(end_utc, True)}Z"
    else:
        dates = f"{format_ics_date(start)}/{format_ics_date(end)}"

    params = {
        'action': 'TEMPLATE',
        'text': event.title,
        'dates': dates,
        'details': describe_event(event),
    }
    return f"{GOOGLE_CALENDAR_URL}?{urlencode(params)}"


def write_ics_file(content: str, path) -> int:
    """Write a document byte-for-byte (UTF-8, no newline translation)."""
    data = content.encode('utf-8')
    with open(path, 'wb') as f:
        f.write(data)
    return len(data)
