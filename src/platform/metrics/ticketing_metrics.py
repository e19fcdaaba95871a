from prometheus_client import Counter, Histogram


class TicketingMetrics:
    """
    Payment and settlement metrics exposed on /metrics

    Labels stay low-cardinality: no event, ticket or buyer ids.
    """

    def __init__(self):
        self.payment_intents = Counter(
            'payment_intents_total',
            'Payment intents requested',
            ['payment_type', 'result'],  # result: created/rejected/gateway_error
        )

        self.payment_intent_amount = Histogram(
            'payment_intent_amount_minor_units',
            'Amount of created payment intents in minor units',
            ['payment_type'],
            buckets=[500, 1000, 2500, 5000, 10000, 25000, 50000, 100000, 1000000],
        )

        self.reservations = Counter(
            'marketplace_reservations_total',
            'Marketplace hold attempts',
            ['result'],  # result: reserved/rejected/released
        )

        self.settlement_notifications = Counter(
            'settlement_notifications_total',
            'Gateway notifications processed by the settlement processor',
            ['notification', 'outcome'],
        )

        self.settlement_duration = Histogram(
            'settlement_duration_seconds',
            'Settlement processing time per notification',
            ['notification'],
            buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
        )

        self.reconciliation_entries = Counter(
            'reconciliation_entries_total',
            'Paid-but-unfulfilled payments queued for manual reconciliation',
            ['payment_type'],
        )

    def record_payment_intent(self, *, payment_type: str, result: str, amount: int = 0):
        self.payment_intents.labels(payment_type=payment_type, result=result).inc()
        if result == 'created':
            self.payment_intent_amount.labels(payment_type=payment_type).observe(amount)

    def record_reservation(self, *, result: str):
        self.reservations.labels(result=result).inc()

    def record_settlement(self, *, notification: str, outcome: str, duration: float):
        self.settlement_notifications.labels(notification=notification, outcome=outcome).inc()
        self.settlement_duration.labels(notification=notification).observe(duration)

    def record_reconciliation(self, *, payment_type: str):
        self.reconciliation_entries.labels(payment_type=payment_type).inc()


# Global metrics instance (prometheus collectors are process-wide by nature)
metrics = TicketingMetrics()
