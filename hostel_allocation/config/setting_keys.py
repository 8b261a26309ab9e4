"""Keys of the persisted key/value Setting store and their defaults."""

APPLICATION_START_DATE = "application_start_date"
APPLICATION_DEADLINE = "application_deadline"
REGISTRATION_OPEN = "registration_open"

PAYMENT_START_DATE = "payment_start_date"
PAYMENT_DEADLINE = "payment_deadline"
PAYMENT_AMOUNT = "payment_amount"

MAX_ALLOCATIONS_PER_RUN = "max_allocations_per_run"
PRIORITIZE_BY_LEVEL = "prioritize_by_level"
PRIORITIZE_BY_SUBMISSION_DATE = "prioritize_by_submission_date"

DEFAULT_PRIORITIZE_BY_LEVEL = True
DEFAULT_PRIORITIZE_BY_SUBMISSION_DATE = True
DEFAULT_PAYMENT_AMOUNT = "50000.00"

ALLOCATION_KEYS = (
    MAX_ALLOCATIONS_PER_RUN,
    PRIORITIZE_BY_LEVEL,
    PRIORITIZE_BY_SUBMISSION_DATE,
)
