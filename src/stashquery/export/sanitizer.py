import re
from typing import Any, Optional

from stashquery.settings import MESSAGE_FIELD

# Syslog priority at the start of a line, e.g. "<13>Jan  1 00:00:00 host app: ..."
PRIORITY_TAG = re.compile(r"^<[0-9]+>", re.MULTILINE)
LINE_BREAKS = re.compile(r"[\r\n]")


def sanitize_message(message: Optional[str]) -> str:
    """Turn a raw log message into exactly one output line."""
    if not message:
        return ""
    return LINE_BREAKS.sub("", PRIORITY_TAG.sub("", message))


def message_from_hit(hit: dict[str, Any], field: str = MESSAGE_FIELD) -> Optional[str]:
    return (hit.get("_source") or {}).get(field)


def sanitize_hit(hit: dict[str, Any], field: str = MESSAGE_FIELD) -> str:
    return sanitize_message(message_from_hit(hit, field))
