# Verification request lifecycle

# Enumerated for completeness; the creation path never produces it.
DRAFT = "DRAFT"

# Interaction Surface: request created, fee not yet collected
PAYMENT_PENDING = "PAYMENT_PENDING"

# Enumerated for completeness; a PAID payment moves straight to IN_PROGRESS.
PAYMENT_SUCCESS = "PAYMENT_SUCCESS"

# Interaction Surface: verifier works the check; counts towards SLA
IN_PROGRESS = "IN_PROGRESS"

# Terminal (by convention; not enforced unless the policy table is on)
VERIFIED = "VERIFIED"
REJECTED = "REJECTED"

REQUEST_STATUSES = (DRAFT, PAYMENT_PENDING, PAYMENT_SUCCESS, IN_PROGRESS, VERIFIED, REJECTED)
TERMINAL_STATUSES = (VERIFIED, REJECTED)

# Statuses a verifier may set by hand
MANUAL_STATUSES = (IN_PROGRESS, VERIFIED, REJECTED)


# Payment
NOT_PAID = "NOT_PAID"
PAID = "PAID"
FAILED = "FAILED"

PAYMENT_STATUSES = (NOT_PAID, PAID, FAILED)
PAYMENT_METHODS = ("UPI", "Card", "NetBanking")


# Embedded check
CHECK_NOT_STARTED = "NOT_STARTED"
CHECK_IN_PROGRESS = "IN_PROGRESS"
CHECK_VERIFIED = "VERIFIED"
CHECK_ISSUE = "ISSUE"

CHECK_SUBSTATUSES = (CHECK_NOT_STARTED, CHECK_IN_PROGRESS, CHECK_VERIFIED, CHECK_ISSUE)


# Legal moves when ENFORCE_STATUS_TRANSITIONS is on.
# Re-setting the current status is always allowed (it only adds a timeline entry).
TRANSITIONS = {
    DRAFT: {PAYMENT_PENDING},
    PAYMENT_PENDING: {PAYMENT_SUCCESS, IN_PROGRESS},
    PAYMENT_SUCCESS: {IN_PROGRESS},
    IN_PROGRESS: {VERIFIED, REJECTED},
    VERIFIED: set(),
    REJECTED: set(),
}


def is_allowed(current: str, target: str) -> bool:
    if current == target:
        return True
    return target in TRANSITIONS.get(current, set())
