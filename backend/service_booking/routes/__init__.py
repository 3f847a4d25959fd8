# Infrastructure routes (prometheus) are unversioned; bookings mount under /api/v1
from . import (
    bookings as bookings,
    prometheus as prometheus,
)
