"""Data access layer: one repository per aggregate."""

from hostel_allocation.repositories.allocation import AllocationRepository
from hostel_allocation.repositories.application import ApplicationRepository
from hostel_allocation.repositories.base import BaseRepository
from hostel_allocation.repositories.hostel import HostelRepository, RoomRepository
from hostel_allocation.repositories.payment import PaymentRepository, RefundRepository
from hostel_allocation.repositories.system import SettingRepository
from hostel_allocation.repositories.user import UserRepository

__all__ = [
    "AllocationRepository",
    "ApplicationRepository",
    "BaseRepository",
    "HostelRepository",
    "RoomRepository",
    "PaymentRepository",
    "RefundRepository",
    "SettingRepository",
    "UserRepository",
]
