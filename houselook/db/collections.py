# File: houselook/db/collections.py
"""Record store paths (schema-in-code).

The realtime database has no DDL. Nodes come into existence on first write,
so these names are the single source of truth for the tree layout.
"""

USERS = "users"
PROPERTIES = "property"
TRANSACTIONS = "transactions"
PROPERTY_REQUESTS = "propertyRequests"
# STK pushes awaiting their callback, keyed by CheckoutRequestID
PENDING_PAYMENTS = "pendingPayments"

# Scalar / summary nodes
REVENUE = "revenue"
STATISTICS = "statistics"


def user_path(uid: str) -> str:
    return f"{USERS}/{uid}"


def saved_path(uid: str) -> str:
    return f"{USERS}/{uid}/saved"


def timesaved_path(uid: str) -> str:
    return f"{USERS}/{uid}/timesaved"


def property_path(property_id: str) -> str:
    return f"{PROPERTIES}/{property_id}"


def transaction_path(transaction_id: str) -> str:
    return f"{TRANSACTIONS}/{transaction_id}"


def property_request_path(request_id: str) -> str:
    return f"{PROPERTY_REQUESTS}/{request_id}"


def pending_payment_path(checkout_request_id: str) -> str:
    return f"{PENDING_PAYMENTS}/{checkout_request_id}"
