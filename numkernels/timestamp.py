from datetime import datetime
from typing import Optional

from .constants import TIMESTAMP_FORMAT


def timestamp_string(now: Optional[datetime] = None) -> str:
    """
    Local date/time as "DD Month YYYY HH:MM:SS AM".
    """
    if now is None:
        now = datetime.now()
    return now.strftime(TIMESTAMP_FORMAT)


def timestamp() -> None:
    print(timestamp_string())
