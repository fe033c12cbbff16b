"""
Shared model helpers.

DESIGN PRINCIPLE:
- Models should reflect data structure, not business logic
- Enum fields coming from the store must never crash rendering or filtering
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class TolerantEnum(str, Enum):
    """
    String enum that degrades unrecognised values to its UNKNOWN member.

    Subclasses must declare an UNKNOWN = "unknown" member. Matching is
    case-insensitive and ignores surrounding whitespace.
    """

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value == wanted:
                    return member
        logger.warning(f"Unrecognised {cls.__name__} value {value!r}, using UNKNOWN")
        return cls.UNKNOWN

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        return cls(value)

    @classmethod
    def known(cls):
        return [member for member in cls if member.value != "unknown"]
