"""Background workers for the subscription service"""
from .billing_scheduler import BillingSchedulerWorker

__all__ = ["BillingSchedulerWorker"]
