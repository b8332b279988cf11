"""Payment Tokenizer Interface

Turns the payment method a user picked into an opaque token stored on the
subscription. Real gateway integration is not part of this service.
"""

from abc import ABC, abstractmethod


class PaymentTokenizer(ABC):

    @abstractmethod
    async def tokenize(self, payment_method: str) -> str:
        pass
