"""
Tests for the sandbox's own rules: footprint arithmetic, bucket labels,
the seeding endpoint and the error envelope.
"""

from datetime import date

import pytest

from carbon_calculator.exceptions import ServiceError
from carbon_calculator.sandbox.services.footprint_service import (
    DEFAULT_EMISSION_FACTOR,
    bucket_key,
    carbon_emission_in_grams,
)
from carbon_calculator.schemas.footprint import AggregateType
from carbon_calculator.security import decrypt_value, encrypt_value, fingerprint


class TestFootprintArithmetic:

    def test_known_mcc(self):
        assert carbon_emission_in_grams("5541", 10_00) == 15000.0

    def test_unknown_mcc_uses_default(self):
        assert carbon_emission_in_grams("0000", 1_00) == DEFAULT_EMISSION_FACTOR

    def test_rounded_to_hundredths(self):
        assert carbon_emission_in_grams("5812", 1) == 3.0


class TestBucketKey:

    @pytest.mark.parametrize("aggregate_type, expected", [
        (AggregateType.DAILY, "2020-09-23"),
        (AggregateType.WEEKLY, "2020-09-21"),
        (AggregateType.MONTHLY, "2020-09"),
        (AggregateType.YEARLY, "2020"),
    ])
    def test_wednesday(self, aggregate_type, expected):
        assert bucket_key(date(2020, 9, 23), aggregate_type) == expected

    def test_week_spanning_new_year(self):
        assert bucket_key(date(2021, 1, 1), AggregateType.WEEKLY) == "2020-12-28"

    def test_monday_is_its_own_week(self):
        assert bucket_key(date(2020, 9, 21), AggregateType.WEEKLY) == "2020-09-21"


class TestEncryptionHelpers:

    def test_round_trip(self):
        ciphertext = encrypt_value("5454545454545454")
        assert b"5454545454545454" not in ciphertext
        assert decrypt_value(ciphertext) == "5454545454545454"

    def test_fingerprint_is_stable(self):
        assert fingerprint("5454545454545454") == fingerprint("5454545454545454")
        assert fingerprint("5454545454545454") != fingerprint("4111111111111111")


class TestSeedingEndpoint:

    async def test_seed_returns_footprint(self, registered_card, seed_transaction):
        footprint = await seed_transaction(registered_card.payment_card_id, "2020-09-25", "5411", 4_00)

        assert footprint["paymentCardId"] == registered_card.payment_card_id
        assert footprint["transactionDate"] == "2020-09-25"
        assert footprint["carbonEmissionInGrams"] == 1400.0

    async def test_seed_unknown_card(self, seed_transaction):
        with pytest.raises(ServiceError) as exc_info:
            await seed_transaction("no-such-card", "2020-09-25", "5411", 4_00)
        assert exc_info.value.status_code == 404

    async def test_seed_rejects_bad_mcc(self, registered_card, seed_transaction):
        with pytest.raises(ServiceError) as exc_info:
            await seed_transaction(registered_card.payment_card_id, "2020-09-25", "54", 4_00)
        assert exc_info.value.status_code == 400
        assert exc_info.value.service_errors[0].details == "body.mcc"


class TestErrorEnvelope:

    async def test_validation_errors_use_envelope(self, http_client, api_client):
        with pytest.raises(ServiceError) as exc_info:
            await api_client.request(
                "POST",
                "/aggregate-transaction-footprints",
                json_body={"paymentCardIds": [], "aggregateType": 0},
            )
        entry = exc_info.value.service_errors[0]
        assert entry.source == "CARBON_CALCULATOR"
        assert entry.reason_code == "INVALID_REQUEST"
        assert entry.details == "body.paymentCardIds"


class TestLoggingConfig:

    def test_configure_logging_sets_level(self):
        import logging

        from carbon_calculator.logging_config import configure_logging

        root = logging.getLogger()
        previous = root.level
        try:
            configure_logging("debug")
            assert root.level == logging.DEBUG
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            root.setLevel(previous)
