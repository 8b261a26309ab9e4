from hostel_allocation.models.hostel.hostel import Hostel
from hostel_allocation.models.hostel.room import Room

__all__ = ["Hostel", "Room"]
