"""Hostel allocation engine: admission windows, room matching and lifecycle rules."""

__version__ = "1.0.0"
