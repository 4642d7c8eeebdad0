"""Service façades over the API client."""

from carbon_calculator.client import ApiClient
from carbon_calculator.services.add_card_service import AddCardService
from carbon_calculator.services.payment_card_service import PaymentCardService


def build_services(api_client: ApiClient) -> tuple[AddCardService, PaymentCardService]:
    """Construct both façades over one shared API client."""
    return AddCardService(api_client), PaymentCardService(api_client)
