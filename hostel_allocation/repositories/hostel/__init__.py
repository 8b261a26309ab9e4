from hostel_allocation.repositories.hostel.hostel_repository import HostelRepository
from hostel_allocation.repositories.hostel.room_repository import RoomRepository, RoomOccupancyRow

__all__ = ["HostelRepository", "RoomRepository", "RoomOccupancyRow"]
