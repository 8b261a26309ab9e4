from hostel_allocation.models.system.setting import Setting

__all__ = ["Setting"]
