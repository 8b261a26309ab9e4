from hostel_allocation.services.settings.allocation_settings import (
    load_allocation_settings,
    load_payment_amount,
)
from hostel_allocation.services.settings.time_window import (
    APPLICATION_WINDOW,
    PAYMENT_WINDOW,
    TimeWindowService,
    WindowDefinition,
    compute_window_status,
    normalize_date_setting,
    normalize_flag_setting,
    parse_date_setting,
)

__all__ = [
    "APPLICATION_WINDOW",
    "PAYMENT_WINDOW",
    "TimeWindowService",
    "WindowDefinition",
    "compute_window_status",
    "load_allocation_settings",
    "load_payment_amount",
    "normalize_date_setting",
    "normalize_flag_setting",
    "parse_date_setting",
]
