from prometheus_client import Counter, Histogram

# Business Metrics
ecomm_order_transitions_total = Counter(
    "ecomm_order_transitions_total",
    "Order status transitions committed",
    ["role", "status"] # Labels: role='operator'|'supplier', status=new status
)

ecomm_order_transition_rejected_total = Counter(
    "ecomm_order_transition_rejected_total",
    "Order status transitions rejected before or during commit",
    ["reason"] # Labels: 'illegal', 'conflict', 'unauthorized', 'not_found'
)

ecomm_inventory_restocked_units_total = Counter(
    "ecomm_inventory_restocked_units_total",
    "Units returned to stock by order reconciliation"
)

ecomm_payment_events_total = Counter(
    "ecomm_payment_events_total",
    "Payment events applied to orders",
    ["event"] # Labels: 'deposit_paid', 'full_paid', 'escrow_hold'
)

ecomm_notification_failures_total = Counter(
    "ecomm_notification_failures_total",
    "Best-effort buyer notifications that failed",
    ["channel"] # Labels: 'in_app', 'email'
)

ecomm_order_listing_duration_seconds = Histogram(
    "ecomm_order_listing_duration_seconds",
    "Order listing query duration in seconds",
    ["audience"] # Labels: 'operator', 'supplier'
)
