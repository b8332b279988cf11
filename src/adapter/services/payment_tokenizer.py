"""Payment tokenizer stub

Stands in for a payment gateway's tokenization call.
"""

from src.app.services.payment_tokenizer import PaymentTokenizer
from src.domain.base import generate_uuid


class MockPaymentTokenizer(PaymentTokenizer):
    """Returns pm_mock_<9 random hex chars> for any payment method"""

    async def tokenize(self, payment_method: str) -> str:
        return f"pm_mock_{generate_uuid()[:9]}"
