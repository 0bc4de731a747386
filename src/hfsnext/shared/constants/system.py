"""
System-wide base units.
"""

BASE_SECOND = 1
BASE_MINUTE = 60 * BASE_SECOND
BASE_HOUR = 60 * BASE_MINUTE
BASE_MILLISECOND = 1000
