"""Typed view over the allocation-related rows of the Setting store."""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from hostel_allocation.config import setting_keys
from hostel_allocation.core.logging import get_logger
from hostel_allocation.repositories.system import SettingRepository
from hostel_allocation.schemas.allocation import AllocationRunSettings
from hostel_allocation.services.settings.time_window import normalize_flag_setting

logger = get_logger(__name__)


def _parse_positive_int(raw: Any) -> Optional[int]:
    if isinstance(raw, str):
        try:
            value = int(raw.strip().strip('"'))
        except ValueError:
            return None
    elif isinstance(raw, int) and not isinstance(raw, bool):
        value = raw
    else:
        return None
    return value if value > 0 else None


def load_allocation_settings(repository: SettingRepository, default_max: int = 50) -> AllocationRunSettings:
    """
    Read the run cap and priority flags.

    Missing values take their defaults; malformed values do too, with a
    warning naming the key.
    """
    raw = repository.get_many(setting_keys.ALLOCATION_KEYS)

    max_per_run = _parse_positive_int(raw.get(setting_keys.MAX_ALLOCATIONS_PER_RUN))
    if max_per_run is None:
        if raw.get(setting_keys.MAX_ALLOCATIONS_PER_RUN) is not None:
            logger.warning(
                "Malformed allocation cap, using default",
                extra={"setting_key": setting_keys.MAX_ALLOCATIONS_PER_RUN, "default": default_max},
            )
        max_per_run = default_max

    flags = {}
    for key, default in (
        (setting_keys.PRIORITIZE_BY_LEVEL, setting_keys.DEFAULT_PRIORITIZE_BY_LEVEL),
        (setting_keys.PRIORITIZE_BY_SUBMISSION_DATE, setting_keys.DEFAULT_PRIORITIZE_BY_SUBMISSION_DATE),
    ):
        value = normalize_flag_setting(raw.get(key))
        if value is None:
            if raw.get(key) is not None:
                logger.warning(
                    "Malformed priority flag, using default",
                    extra={"setting_key": key, "default": default},
                )
            value = default
        flags[key] = value

    return AllocationRunSettings(
        max_allocations_per_run=max_per_run,
        prioritize_by_level=flags[setting_keys.PRIORITIZE_BY_LEVEL],
        prioritize_by_submission_date=flags[setting_keys.PRIORITIZE_BY_SUBMISSION_DATE],
    )


def load_payment_amount(repository: SettingRepository) -> Decimal:
    """Hostel fee charged per application."""
    raw = repository.get_value(setting_keys.PAYMENT_AMOUNT)
    if raw is not None:
        text = raw.strip().strip('"')
        try:
            amount = Decimal(text).quantize(Decimal("0.01"))
        except InvalidOperation:
            amount = None
        if amount is not None and amount.is_finite() and amount > 0:
            return amount
        logger.warning(
            "Malformed payment amount, using default",
            extra={"setting_key": setting_keys.PAYMENT_AMOUNT},
        )
    return Decimal(setting_keys.DEFAULT_PAYMENT_AMOUNT)
