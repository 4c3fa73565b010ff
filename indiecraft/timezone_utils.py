import pytz


def get_user_timezone(request, default='UTC'):
    """
    Get the user's timezone from the cookie set by JavaScript.
    Falls back to `default` (then UTC) if no valid timezone is set.
    """
    user_tz_name = request.COOKIES.get('user_timezone') or default
    try:
        return pytz.timezone(user_tz_name)
    except pytz.exceptions.UnknownTimeZoneError:
        try:
            return pytz.timezone(default)
        except pytz.exceptions.UnknownTimeZoneError:
            return pytz.UTC
