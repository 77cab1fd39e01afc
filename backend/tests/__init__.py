# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from cricnets.models.booking import Booking  # noqa: F401
from cricnets.models.booking_lock import BookingLock  # noqa: F401
from cricnets.models.system_config import SystemConfig  # noqa: F401
