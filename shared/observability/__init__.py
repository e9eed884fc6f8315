from .setup import setup_observability
from .metrics import (
    ecomm_order_transitions_total,
    ecomm_order_transition_rejected_total,
    ecomm_inventory_restocked_units_total,
    ecomm_payment_events_total,
    ecomm_notification_failures_total,
    ecomm_order_listing_duration_seconds
)
