import datetime

WEEKDAY_NAMES = ('Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun')
MONTH_NAMES = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
               'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')


def format_timestamp(timestamp: datetime.datetime) -> str:
    """
    Formats a timestamp for the alarm broadcast.

    Uses fixed English names so the output does not depend on the process locale,
    e.g. 'Mon Oct 5 09:03:07'. The year is left out and the day is not padded.
    """
    return (f'{WEEKDAY_NAMES[timestamp.weekday()]} '
            f'{MONTH_NAMES[timestamp.month - 1]} '
            f'{timestamp.day} '
            f'{timestamp:%H:%M:%S}')
