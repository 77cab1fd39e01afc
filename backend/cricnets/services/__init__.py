"""
Services Layer

Booking engine logic that:
- Accepts domain inputs (sessions, datetimes, enums, BookingRequest)
- Returns domain outputs (Booking models, SlotStatus rows)
- Does NOT depend on HTTP request/response objects
- Raises cricnets.services.errors.BookingError subclasses on rejection
"""

# Force SQLModel table registration before any test database creation
from cricnets.models.booking import Booking  # noqa: F401
from cricnets.models.booking_lock import BookingLock  # noqa: F401
from cricnets.models.system_config import SystemConfig  # noqa: F401
