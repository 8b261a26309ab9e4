from hostel_allocation.schemas.settings.window_status import WindowStatus, WindowStatusResponse

__all__ = ["WindowStatus", "WindowStatusResponse"]
