"""Unit tests for domain model validation and record normalization."""

from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from src.models.business import Business, BusinessKind
from src.models.incentive import ChainIncentive, Incentive, IncentiveCategory
from src.models.normalization import normalize_business_record
from src.models.verification import (
    DocumentSubmission,
    ReviewAction,
    VerificationStatus,
)


class TestBusiness:
    def test_kinds(self):
        parent = Business(name="Home Depot", is_chain=True)
        location = Business(name="Home Depot #42", chain_id=parent.id)

        assert parent.kind is BusinessKind.CHAIN_PARENT
        assert location.kind is BusinessKind.CHAIN_LOCATION
        assert Business(name="Joe's Diner").kind is BusinessKind.STANDALONE

    def test_chain_parent_cannot_belong_to_chain(self):
        with pytest.raises(ValidationError):
            Business(name="Home Depot", is_chain=True, chain_id=uuid4())

    def test_business_cannot_be_its_own_parent(self):
        business_id = uuid4()
        with pytest.raises(ValidationError):
            Business(id=business_id, name="Loop", chain_id=business_id)


class TestIncentiveCategories:
    def test_categories_required(self):
        with pytest.raises(ValidationError):
            Incentive(business_id=uuid4(), eligible_categories=[], amount=Decimal("5"))

    def test_not_available_is_exclusive(self):
        with pytest.raises(ValidationError):
            Incentive(
                business_id=uuid4(),
                eligible_categories=[IncentiveCategory.NOT_AVAILABLE, IncentiveCategory.VETERAN],
                amount=Decimal("0"),
            )

    def test_not_available_alone_is_allowed(self):
        incentive = Incentive(
            business_id=uuid4(),
            eligible_categories=[IncentiveCategory.NOT_AVAILABLE],
            amount=Decimal("0"),
        )

        assert incentive.eligible_categories == [IncentiveCategory.NOT_AVAILABLE]

    def test_chain_amount_bounded(self):
        with pytest.raises(ValidationError):
            ChainIncentive(
                chain_id=uuid4(),
                eligible_categories=[IncentiveCategory.VETERAN],
                amount=Decimal("101"),
            )


class TestVerification:
    def test_review_action_targets(self):
        assert ReviewAction.APPROVE.target_status is VerificationStatus.VERIFIED
        assert ReviewAction.DENY.target_status is VerificationStatus.DENIED

    def test_terminal_statuses(self):
        assert VerificationStatus.PENDING.is_terminal is False
        assert VerificationStatus.VERIFIED.is_terminal is True
        assert VerificationStatus.DENIED.is_terminal is True

    def test_document_type_restricted(self):
        with pytest.raises(ValidationError, match="Only PDF, JPG, and PNG"):
            DocumentSubmission(
                document_type="DD214",
                document_url="https://files.example.com/dd214.gif",
                content_type="image/gif",
                size_bytes=1000,
            )

    def test_document_size_limited(self):
        with pytest.raises(ValidationError):
            DocumentSubmission(
                document_type="DD214",
                document_url="https://files.example.com/dd214.pdf",
                content_type="application/pdf",
                size_bytes=5 * 1024 * 1024 + 1,
            )


class TestNormalizeBusinessRecord:
    def test_legacy_field_names(self):
        business = normalize_business_record(
            {
                "bname": "Joe's Diner",
                "street_address": "100 Main St",
                "city": "Austin",
                "state": "TX",
                "zip": "78701",
                "lat": 30.2672,
                "lng": -97.7431,
            }
        )

        assert business.name == "Joe's Diner"
        assert business.address.address1 == "100 Main St"
        assert business.address.zip_code == "78701"
        assert business.address.latitude == 30.2672
        assert business.address.longitude == -97.7431

    def test_geojson_location(self):
        business = normalize_business_record(
            {
                "business_name": "Joe's Diner",
                "postal_code": "78701",
                "location": {"type": "Point", "coordinates": [-97.7431, 30.2672]},
            }
        )

        assert business.address.latitude == 30.2672
        assert business.address.longitude == -97.7431
        assert business.address.zip_code == "78701"

    def test_null_geojson_coordinates_are_dropped(self):
        business = normalize_business_record(
            {
                "bname": "Joe's Diner",
                "location": {"type": "Point", "coordinates": [None, None]},
            }
        )

        assert business.name == "Joe's Diner"
        assert business.address.has_coordinates is False

    def test_first_alias_wins(self):
        business = normalize_business_record({"bname": "First", "business_name": "Second"})

        assert business.name == "First"

    def test_uuid_id_kept_and_legacy_id_replaced(self):
        business_id = uuid4()

        assert normalize_business_record({"_id": str(business_id), "name": "A"}).id == business_id
        assert normalize_business_record({"_id": "5f1d7c2e9b1e8a3d4c6f0a12", "name": "A"}).id

    def test_unknown_fields_ignored(self):
        business = normalize_business_record({"name": "Joe's Diner", "rating": 4.5})

        assert business.name == "Joe's Diner"

    def test_missing_name_rejected(self):
        with pytest.raises(ValueError):
            normalize_business_record({"city": "Austin"})
