"""HTTP surface of the allocation engine."""
