"""
Room capacity index.

Per-run snapshot of the remaining beds of every room in an active hostel.
It is built once before the first write of a run and only decremented in
memory afterwards; the persisted conditional write remains the authority.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from hostel_allocation.core.exceptions import CapacityExceededError, NotFoundError
from hostel_allocation.models.base import is_gender_compatible
from hostel_allocation.repositories.hostel import RoomOccupancyRow, RoomRepository


def room_number_key(number: str) -> Tuple[int, int, str, str]:
    """
    Digits-only numbers sort numerically and ahead of the rest; the rest
    sort case-insensitively, with the raw text as the final tie-break.
    """
    text = (number or "").strip()
    if text.isdigit():
        return (0, int(text), "", text)
    return (1, 0, text.lower(), text)


@dataclass
class RoomSlot:
    room_id: str
    room_number: str
    hostel_id: str
    hostel_name: str
    hostel_gender: str
    capacity: int
    occupancy: int

    @property
    def remaining(self) -> int:
        return max(self.capacity - self.occupancy, 0)

    @property
    def sort_key(self):
        return (self.hostel_name.lower(), room_number_key(self.room_number), self.room_id)

    def accepts(self, gender: Optional[str]) -> bool:
        return is_gender_compatible(self.hostel_gender, gender)


class RoomCapacityIndex:

    def __init__(self, slots: Iterable[RoomSlot]):
        ordered = sorted(slots, key=lambda slot: slot.sort_key)
        self._order: List[str] = [slot.room_id for slot in ordered]
        self._slots: Dict[str, RoomSlot] = {slot.room_id: slot for slot in ordered}

    @classmethod
    def from_rows(cls, rows: Iterable[RoomOccupancyRow]) -> "RoomCapacityIndex":
        return cls(
            RoomSlot(
                room_id=row.room_id,
                room_number=row.room_number,
                hostel_id=row.hostel_id,
                hostel_name=row.hostel_name,
                hostel_gender=row.hostel_gender,
                capacity=row.capacity,
                occupancy=row.occupancy,
            )
            for row in rows
            if row.hostel_is_active
        )

    @classmethod
    def build(cls, rooms: RoomRepository) -> "RoomCapacityIndex":
        return cls.from_rows(rooms.find_active_with_occupancy())

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[RoomSlot]:
        return (self._slots[room_id] for room_id in self._order)

    def get(self, room_id: str) -> RoomSlot:
        try:
            return self._slots[room_id]
        except KeyError:
            raise NotFoundError("Room", room_id) from None

    @property
    def total_remaining(self) -> int:
        return sum(slot.remaining for slot in self._slots.values())

    def available_for(self, gender: Optional[str]) -> Iterator[RoomSlot]:
        """Rooms with a free bed whose hostel accepts ``gender``, in index order."""
        for slot in self:
            if slot.remaining > 0 and slot.accepts(gender):
                yield slot

    def first_available(self, gender: Optional[str]) -> Optional[RoomSlot]:
        return next(self.available_for(gender), None)

    def reserve(self, room_id: str) -> RoomSlot:
        """
        Take one bed of ``room_id`` in the snapshot.

        Raises:
            CapacityExceededError: the snapshot already shows the room full
        """
        slot = self.get(room_id)
        if slot.remaining <= 0:
            raise CapacityExceededError(room_id, slot.capacity, slot.occupancy)
        slot.occupancy += 1
        return slot

    def refresh(self, room_id: str, occupancy: int) -> RoomSlot:
        """Replace the snapshot occupancy with a fresh count from the store."""
        slot = self.get(room_id)
        slot.occupancy = occupancy
        return slot
