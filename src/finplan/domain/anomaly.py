"""Unusual spending detection."""

import logging
import math
import threading
from collections import Counter, defaultdict
from datetime import datetime, UTC
from typing import Callable, Optional

from finplan.domain.config import AnomalySettings
from finplan.domain.entities import (
    AlertSeverity,
    AlertType,
    Transaction,
    UnusualSpendingAlert,
)
from finplan.domain.money import Money

logger = logging.getLogger(__name__)


def _merchant_key(transaction: Transaction) -> Optional[str]:
    if transaction.merchant_name is None or not transaction.merchant_name.strip():
        return None
    return transaction.merchant_name.strip().lower()


class AnomalyModel:
    """Merchant frequencies observed across the full transaction history."""

    def __init__(self, merchant_counts: Optional[Counter] = None, built_at: Optional[datetime] = None):
        self.merchant_counts = merchant_counts or Counter()
        self.built_at = built_at

    @classmethod
    def build(cls, transactions: list[Transaction], built_at: datetime) -> "AnomalyModel":
        counts = Counter(
            key for key in (_merchant_key(t) for t in transactions) if key is not None
        )
        return cls(counts, built_at)

    def is_established_merchant(self, merchant_key: str) -> bool:
        return self.merchant_counts.get(merchant_key, 0) > 1


class AnomalyDetector:
    """Scans a set of transactions and returns alerts, most severe first."""

    def __init__(
        self,
        settings: Optional[AnomalySettings] = None,
        lock: Optional[threading.RLock] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        self.settings = settings or AnomalySettings()
        self.clock = clock
        self._lock = lock or threading.RLock()
        self._model = AnomalyModel()

    def rebuild_model(self, history: list[Transaction]) -> None:
        """Replace the history model."""
        with self._lock:
            self._model = AnomalyModel.build(history, self.clock())
        logger.info("Rebuilt anomaly model", extra={"transactions": len(history)})

    def detect_unusual_spending(self, transactions: list[Transaction]) -> list[UnusualSpendingAlert]:
        """Run every detector over the transactions.

        Args:
            transactions: Transactions in the evaluated window

        Returns:
            Alerts sorted by severity, most severe first
        """
        detected_at = self.clock()
        with self._lock:
            model = self._model
            alerts = []
            alerts.extend(self.detect_amount_anomalies(transactions, detected_at))
            alerts.extend(self.detect_frequency_anomalies(transactions, detected_at))
            alerts.extend(self.detect_new_merchants(transactions, detected_at, model))
            alerts.extend(self.detect_duplicates(transactions, detected_at))

        alerts.sort(key=lambda alert: alert.severity, reverse=True)
        logger.info(
            "Scanned transactions for unusual spending",
            extra={"transactions": len(transactions), "alerts": len(alerts)},
        )
        return alerts

    def _severity(self, deviation: float) -> AlertSeverity:
        s = self.settings
        if deviation > s.critical_deviation:
            return AlertSeverity.CRITICAL
        if deviation > s.high_deviation:
            return AlertSeverity.HIGH
        if deviation > s.medium_deviation:
            return AlertSeverity.MEDIUM
        return AlertSeverity.LOW

    def detect_amount_anomalies(
        self, transactions: list[Transaction], detected_at: datetime
    ) -> list[UnusualSpendingAlert]:
        """Flag amounts more than z_score_threshold standard deviations from their category mean."""
        groups: dict[Optional[str], list[Transaction]] = defaultdict(list)
        for transaction in transactions:
            groups[transaction.category_id].append(transaction)

        alerts = []
        for category_id, group in groups.items():
            if len(group) < self.settings.min_group_size:
                continue
            amounts = [abs(t.amount.cents) for t in group]
            mean = sum(amounts) / len(amounts)
            std = math.sqrt(sum((a - mean) ** 2 for a in amounts) / len(amounts))
            if std == 0:
                continue
            for transaction, amount in zip(group, amounts):
                distance = abs(amount - mean)
                if distance <= self.settings.z_score_threshold * std:
                    continue
                deviation = distance / mean if mean else 0.0
                usual = Money(round(mean), transaction.amount.currency)
                alerts.append(
                    UnusualSpendingAlert(
                        id=f"amount_{transaction.id}",
                        transaction_id=transaction.id,
                        alert_type=AlertType.AMOUNT_ANOMALY,
                        severity=self._severity(deviation),
                        message=(
                            f"{transaction.amount.absolute_value} is {deviation:.1f}x away from "
                            f"your usual {usual} in {category_id or 'uncategorized'}"
                        ),
                        suggested_action="Review this transaction to confirm it is expected",
                        detected_at=detected_at,
                    )
                )
        return alerts

    def detect_frequency_anomalies(
        self, transactions: list[Transaction], detected_at: datetime
    ) -> list[UnusualSpendingAlert]:
        """Flag every transaction at a merchant that charged too often in one day."""
        groups: dict[tuple, list[Transaction]] = defaultdict(list)
        for transaction in transactions:
            key = _merchant_key(transaction)
            if key is not None:
                groups[(key, transaction.date)].append(transaction)

        alerts = []
        for (_, day), group in groups.items():
            if len(group) <= self.settings.same_day_merchant_limit:
                continue
            for transaction in group:
                alerts.append(
                    UnusualSpendingAlert(
                        id=f"freq_{transaction.id}",
                        transaction_id=transaction.id,
                        alert_type=AlertType.FREQUENCY_ANOMALY,
                        severity=AlertSeverity.MEDIUM,
                        message=(
                            f"{len(group)} charges from {transaction.merchant_name} on "
                            f"{day.isoformat()}; possible duplicate charge"
                        ),
                        suggested_action="Check with the merchant for repeated charges",
                        detected_at=detected_at,
                    )
                )
        return alerts

    def detect_new_merchants(
        self,
        transactions: list[Transaction],
        detected_at: datetime,
        model: Optional[AnomalyModel] = None,
    ) -> list[UnusualSpendingAlert]:
        """Flag merchants that appear once in the window and are not established in history."""
        model = model or AnomalyModel()
        counts = Counter(
            key for key in (_merchant_key(t) for t in transactions) if key is not None
        )
        alerts = []
        for transaction in transactions:
            key = _merchant_key(transaction)
            if key is None or counts[key] != 1 or model.is_established_merchant(key):
                continue
            alerts.append(
                UnusualSpendingAlert(
                    id=f"new_merchant_{transaction.id}",
                    transaction_id=transaction.id,
                    alert_type=AlertType.NEW_MERCHANT,
                    severity=AlertSeverity.LOW,
                    message=f"First purchase from {transaction.merchant_name}",
                    suggested_action="Verify you recognize this merchant",
                    detected_at=detected_at,
                )
            )
        return alerts

    def detect_duplicates(
        self, transactions: list[Transaction], detected_at: datetime
    ) -> list[UnusualSpendingAlert]:
        """Flag each pair sharing amount, merchant and date."""
        alerts = []
        for i, first in enumerate(transactions):
            first_key = _merchant_key(first)
            if first_key is None:
                continue
            for second in transactions[i + 1 :]:
                if (
                    second.amount == first.amount
                    and second.date == first.date
                    and _merchant_key(second) == first_key
                ):
                    alerts.append(
                        UnusualSpendingAlert(
                            id=f"duplicate_{first.id}_{second.id}",
                            transaction_id=first.id,
                            alert_type=AlertType.DUPLICATE_SUSPECTED,
                            severity=AlertSeverity.HIGH,
                            message=(
                                f"Transactions {first.id} and {second.id} share amount, "
                                "merchant and date"
                            ),
                            suggested_action="Dispute the charge if you were billed twice",
                            detected_at=detected_at,
                        )
                    )
        return alerts
