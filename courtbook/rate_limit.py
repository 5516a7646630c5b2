"""
Rate limiting configuration using slowapi.

Three tiers:
  • booking – 10/min (booking creation and cancellation)
  • admin   – 30/min (admin writes: settings, hours, payment keys, club admins)
  • default – 60/min (everything else)

The limiter keys on client IP.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Named rate strings for use in @limiter.limit() decorators
BOOKING = "10/minute"    # create / cancel booking
ADMIN = "30/minute"      # admin writes
DEFAULT = "60/minute"    # general API

limiter = Limiter(key_func=get_remote_address, default_limits=[DEFAULT])
