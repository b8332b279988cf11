"""Notification Service Interface

Defines the contract for alerting about billing escalations.
"""

from abc import ABC, abstractmethod
from src.domain.subscription import Subscription


class NotificationService(ABC):
    """
    Abstract notification service for sending alerts

    Implementations can send notifications via:
    - Logs
    - Webhook (HTTP POST)
    """

    @abstractmethod
    async def send_subscription_paused_alert(self, subscription: Subscription, reason: str) -> bool:
        """
        Send alert that the failure policy paused a subscription

        Args:
            subscription: Subscription that was paused
            reason: Why it was paused

        Returns:
            True if notification sent successfully, False otherwise
        """
        pass
