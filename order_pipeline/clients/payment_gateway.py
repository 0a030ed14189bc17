"""
Payment gateway clients.

This module provides the collaborators that actually charge a card: an HTTP
client for a real gateway and a simulated gateway for local runs.
"""
import random
from decimal import Decimal
from typing import Optional, Protocol

import httpx

from ..config import GATEWAY_SUCCESS_RATE, PAYMENT_GATEWAY_TIMEOUT, PAYMENT_GATEWAY_URL


class PaymentGateway(Protocol):
    """Anything that can charge a credit card."""

    def process_credit_card_payment(
        self,
        card_number: str,
        card_holder_name: Optional[str],
        expiration_date: Optional[str],
        cvv: Optional[str],
        amount: Decimal,
    ) -> bool:
        ...


class SimulatedPaymentGateway:
    """
    Gateway that approves a fixed share of charges at random.

    Args:
        success_rate: Probability that a charge is approved
        rng: Random number generator (defaults to a fresh random.Random)
    """

    def __init__(self, success_rate: float = GATEWAY_SUCCESS_RATE, rng: Optional[random.Random] = None):
        if not 0.0 <= success_rate <= 1.0:
            raise ValueError(f"success_rate must be between 0 and 1, got {success_rate}")
        self.success_rate = success_rate
        self.rng = rng or random.Random()

    def process_credit_card_payment(
        self,
        card_number: str,
        card_holder_name: Optional[str],
        expiration_date: Optional[str],
        cvv: Optional[str],
        amount: Decimal,
    ) -> bool:
        return self.rng.random() < self.success_rate


class HttpPaymentGateway:
    """
    Gateway reached over HTTP.

    POSTs the charge to ``{base_url}/charges``. A 200 response carries
    ``{"approved": bool}``; a 402 response is a decline.
    """

    def __init__(self, base_url: str = PAYMENT_GATEWAY_URL, timeout: float = PAYMENT_GATEWAY_TIMEOUT,
                 transport: Optional[httpx.BaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def process_credit_card_payment(
        self,
        card_number: str,
        card_holder_name: Optional[str],
        expiration_date: Optional[str],
        cvv: Optional[str],
        amount: Decimal,
    ) -> bool:
        """
        Charge a credit card.

        Returns:
            True if the gateway approved the charge, False if it declined it

        Raises:
            httpx.HTTPError: If there's a network error, the gateway is unavailable
                or its response body cannot be read
        """
        payload = {
            "card_number": card_number,
            "card_holder_name": card_holder_name,
            "expiration_date": expiration_date,
            "cvv": cvv,
            "amount": str(amount),
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(f"{self.base_url}/charges", json=payload)
                if response.status_code == 402:
                    return False
                response.raise_for_status()
                try:
                    body = response.json()
                except ValueError as e:
                    raise httpx.DecodingError(f"Gateway returned invalid JSON: {e}", request=response.request)
                if not isinstance(body, dict):
                    raise httpx.DecodingError("Gateway response is not a JSON object", request=response.request)
                return bool(body.get("approved", False))
        except httpx.HTTPError:
            raise


def get_payment_gateway() -> PaymentGateway:
    """
    Dependency function that provides the configured payment gateway.

    Returns the HTTP gateway when PAYMENT_GATEWAY_URL is set, otherwise the
    simulated one.
    """
    if PAYMENT_GATEWAY_URL:
        return HttpPaymentGateway()
    return SimulatedPaymentGateway()
