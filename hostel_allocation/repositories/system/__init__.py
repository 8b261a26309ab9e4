from hostel_allocation.repositories.system.setting_repository import SettingRepository

__all__ = ["SettingRepository"]
