"""Unit tests for estatesearch.search.filters.

Covers:
- :class:`FilterCriteria` coercion (aliases, blanks, bad numbers).
- :class:`ListingFilter` predicates, one axis at a time, and AND semantics.
- Legacy-field equivalence for every predicate.
- :func:`offers_direct_installment` including negated mentions.
- Malformed input handling.
"""

from __future__ import annotations

import copy
import math
from typing import Any

import pytest

from estatesearch.core.models import Listing, as_listing
from estatesearch.search.filters import (
    FilterCriteria,
    FilterResult,
    ListingFilter,
    filter_properties,
    offers_direct_installment,
)


def _make_listing(**fields: Any) -> Listing:
    fields.setdefault("id", "p1")
    listing = as_listing(fields)
    assert listing is not None
    return listing


def _ids(records: list[dict[str, Any]]) -> list[str]:
    return [r["id"] for r in records]


# ===========================================================================
# FilterCriteria
# ===========================================================================


class TestFilterCriteria:
    def test_empty(self) -> None:
        assert FilterCriteria().is_empty
        assert FilterCriteria.coerce({}).is_empty

    def test_blank_values_are_no_constraint(self) -> None:
        criteria = FilterCriteria.coerce({"keyword": "  ", "minPrice": "", "location": None})
        assert criteria.is_empty

    def test_camel_case_aliases(self) -> None:
        criteria = FilterCriteria.coerce(
            {"priceMin": "1,000,000", "maxPrice": 2_000_000, "propertyType": "SPS-CD-ID", "areaMin": 30}
        )
        assert criteria.min_price == 1_000_000
        assert criteria.max_price == 2_000_000
        assert criteria.type == "SPS-CD-ID"
        assert criteria.area_min == 30

    def test_unparseable_number_becomes_nan(self) -> None:
        criteria = FilterCriteria.coerce({"bedrooms": "three"})
        assert criteria.bedrooms is not None
        assert math.isnan(criteria.bedrooms)

    def test_direct_installment_flag(self) -> None:
        assert FilterCriteria.coerce({"directInstallment": "true"}).direct_installment is True
        assert FilterCriteria.coerce({"directInstallment": False}).direct_installment is False
        assert FilterCriteria.coerce({"directInstallment": ""}).direct_installment is None

    def test_non_mapping_is_empty(self) -> None:
        assert FilterCriteria.coerce(["minPrice", 1]).is_empty  # type: ignore[arg-type]
        assert FilterCriteria.coerce(None).is_empty

    def test_instance_passes_through(self) -> None:
        criteria = FilterCriteria(keyword="คอนโด")
        assert FilterCriteria.coerce(criteria) is criteria

    def test_unknown_keys_ignored(self) -> None:
        assert FilterCriteria.coerce({"colour": "red"}).is_empty


# ===========================================================================
# Predicates
# ===========================================================================


class TestFilterProperties:
    def test_empty_filters_keep_everything(self, sample_listings: list[dict[str, Any]]) -> None:
        result = filter_properties(sample_listings, {})
        assert result == sample_listings
        assert all(a is b for a, b in zip(result, sample_listings, strict=True))
        assert filter_properties(sample_listings) == sample_listings

    def test_input_not_mutated(self, sample_listings: list[dict[str, Any]]) -> None:
        before = copy.deepcopy(sample_listings)
        filter_properties(sample_listings, {"keyword": "ทาวน์โฮม ไม่เกิน 2 ล้าน", "location": "ชลบุรี"})
        assert sample_listings == before

    def test_keyword_tokens_and(self, sample_listings: list[dict[str, Any]]) -> None:
        assert _ids(filter_properties(sample_listings, {"keyword": "ทาวน์โฮม ศรีราชา"})) == ["a"]
        assert filter_properties(sample_listings, {"keyword": "ทาวน์โฮม ระยอง"}) == []

    def test_keyword_condition_marker(self, sample_listings: list[dict[str, Any]]) -> None:
        assert _ids(filter_properties(sample_listings, {"keyword": "มือ2"})) == ["a", "c"]
        assert _ids(filter_properties(sample_listings, {"keyword": "มือ 1"})) == ["b"]

    def test_keyword_price_phrase(self, sample_listings: list[dict[str, Any]]) -> None:
        assert _ids(filter_properties(sample_listings, {"keyword": "ไม่เกิน 2 ล้าน"})) == ["a", "c", "d"]
        assert _ids(filter_properties(sample_listings, {"keyword": "ทาวน์โฮม ไม่เกิน 2 ล้าน"})) == ["a"]

    def test_keyword_price_overrides_explicit_bound(self, sample_listings: list[dict[str, Any]]) -> None:
        filters = {"keyword": "ไม่เกิน 1 ล้าน", "maxPrice": 3_000_000}
        assert _ids(filter_properties(sample_listings, filters)) == ["c", "d"]

    def test_location(self, sample_listings: list[dict[str, Any]]) -> None:
        assert _ids(filter_properties(sample_listings, {"location": "ชลบุรี"})) == ["a", "c"]
        assert _ids(filter_properties(sample_listings, {"location": "บ่อวิน"})) == ["a"]

    def test_location_nearby_place(self) -> None:
        records = [{"id": "x", "nearbyPlace": ["Central Rama 9"]}, {"id": "y"}]
        assert _ids(filter_properties(records, {"location": "central"})) == ["x"]

    def test_listing_type(self, sample_listings: list[dict[str, Any]]) -> None:
        assert _ids(filter_properties(sample_listings, {"listingType": "sale"})) == ["a", "b", "c"]
        assert _ids(filter_properties(sample_listings, {"listingType": "rent"})) == ["d"]

    def test_sub_listing_type_only_for_rent(self, sample_listings: list[dict[str, Any]]) -> None:
        rent = {"listingType": "rent", "subListingType": "installment_only"}
        assert _ids(filter_properties(sample_listings, rent)) == ["d"]
        assert filter_properties(sample_listings, {**rent, "subListingType": "rent_only"}) == []
        sale = {"listingType": "sale", "subListingType": "installment_only"}
        assert _ids(filter_properties(sample_listings, sale)) == ["a", "b", "c"]

    def test_condition_only_for_sale(self, sample_listings: list[dict[str, Any]]) -> None:
        second = {"listingType": "sale", "propertyCondition": "มือ 2"}
        assert _ids(filter_properties(sample_listings, second)) == ["a", "c"]
        first = {"listingType": "sale", "propertyCondition": "มือ1"}
        assert _ids(filter_properties(sample_listings, first)) == ["b"]

    def test_availability_synonyms(self, sample_listings: list[dict[str, Any]]) -> None:
        assert _ids(filter_properties(sample_listings, {"availability": "available"})) == ["a", "b"]
        assert _ids(filter_properties(sample_listings, {"availability": "ว่าง"})) == ["a", "b"]
        assert _ids(filter_properties(sample_listings, {"availability": "ขายแล้ว"})) == ["c"]

    def test_type_exact(self, sample_listings: list[dict[str, Any]]) -> None:
        assert _ids(filter_properties(sample_listings, {"propertyType": "SPS-CD-ID"})) == ["b"]
        assert filter_properties(sample_listings, {"type": "SPS-CD"}) == []

    def test_price_bounds_inclusive(self, sample_listings: list[dict[str, Any]]) -> None:
        filters = {"minPrice": 1_800_000, "maxPrice": 2_500_000}
        assert _ids(filter_properties(sample_listings, filters)) == ["a", "b"]
        assert _ids(filter_properties(sample_listings, {"priceMax": "1,000,000"})) == ["c", "d"]

    def test_missing_price_fails_bounds(self) -> None:
        records = [{"id": "x", "price": "ติดต่อ"}, {"id": "y"}]
        assert filter_properties(records, {"minPrice": 1}) == []
        assert _ids(filter_properties(records, {})) == ["x", "y"]

    def test_bedrooms_and_semantics(self) -> None:
        listing = {"id": "x", "price": 2_000_000, "bedrooms": 3}
        assert filter_properties([listing], {"minPrice": 1_000_000, "bedrooms": 2}) == []
        assert filter_properties([listing], {"minPrice": 1_000_000, "bedrooms": 3}) == [listing]

    def test_bathrooms(self, sample_listings: list[dict[str, Any]]) -> None:
        assert _ids(filter_properties(sample_listings, {"bathrooms": "2"})) == ["a"]

    def test_area(self, sample_listings: list[dict[str, Any]]) -> None:
        assert _ids(filter_properties(sample_listings, {"areaMin": 100})) == ["a"]
        assert _ids(filter_properties(sample_listings, {"areaMax": 50})) == ["b"]

    @pytest.mark.parametrize(
        "filters",
        [{"minPrice": "cheap"}, {"bedrooms": "three"}, {"areaMax": "big"}],
    )
    def test_bad_criterion_matches_nothing(
        self, sample_listings: list[dict[str, Any]], filters: dict[str, Any]
    ) -> None:
        assert filter_properties(sample_listings, filters) == []

    def test_padded_type_code(self) -> None:
        record = {"id": "x", "type": " SPS-CD-ID "}
        assert filter_properties([record], {"type": "SPS-CD-ID"}) == [record]

    def test_huge_listing_price_treated_as_missing(self) -> None:
        good = {"id": "a", "price": 2_000_000}
        huge = {"id": "b", "price": 10**400}
        assert _ids(filter_properties([good, huge], {})) == ["a", "b"]
        assert _ids(filter_properties([good, huge], {"minPrice": 1})) == ["a"]

    def test_huge_criterion_matches_nothing(self) -> None:
        assert FilterCriteria.coerce({"maxPrice": 10**400}).max_price is not None
        assert math.isnan(FilterCriteria.coerce({"maxPrice": 10**400}).max_price)
        assert filter_properties([{"id": "a", "price": 2_000_000}], {"maxPrice": 10**400}) == []

    def test_keyword_number_range_without_unit_is_text(self) -> None:
        record = {"id": "x", "title": "คอนโด 2-3 ห้องนอน ใกล้ BTS", "price": 2_500_000}
        assert filter_properties([record], {"keyword": "คอนโด 2-3 ห้องนอน"}) == [record]

    def test_keyword_duration_is_text(self) -> None:
        record = {"id": "x", "title": "คอนโด", "description": "เดินไม่เกิน 5 นาที ถึง BTS", "price": 2_500_000}
        assert filter_properties([record], {"keyword": "ไม่เกิน 5 นาที"}) == [record]

    def test_direct_installment(self, sample_listings: list[dict[str, Any]]) -> None:
        assert _ids(filter_properties(sample_listings, {"directInstallment": True})) == ["a", "d"]
        assert _ids(filter_properties(sample_listings, {"directInstallment": False})) == ["b", "c"]


class TestLegacyEquivalence:
    @pytest.mark.parametrize(
        "filters",
        [
            {},
            {"listingType": "rent"},
            {"listingType": "sale"},
            {"listingType": "rent", "subListingType": "rent_only"},
            {"listingType": "rent", "subListingType": "installment_only"},
            {"availability": "available"},
            {"keyword": "บ้านเช่า"},
            {"maxPrice": 6000},
            {"directInstallment": True},
        ],
    )
    def test_is_rental_equals_listing_type_rent(self, filters: dict[str, Any]) -> None:
        common = {"title": "บ้านเช่า", "price": 5000, "availability": "available"}
        legacy = {"id": "legacy", "isRental": True, **common}
        canonical = {"id": "canonical", "listingType": "rent", **common}
        assert bool(filter_properties([legacy], filters)) == bool(filter_properties([canonical], filters))

    def test_legacy_status_equals_availability(self) -> None:
        legacy = {"id": "legacy", "status": "ติดจอง"}
        canonical = {"id": "canonical", "availability": "reserved"}
        for filters in ({"availability": "reserved"}, {"availability": "available"}):
            assert bool(filter_properties([legacy], filters)) == bool(filter_properties([canonical], filters))


# ===========================================================================
# Direct installment detection
# ===========================================================================


class TestOffersDirectInstallment:
    def test_flag(self) -> None:
        assert offers_direct_installment(_make_listing(directInstallment=True))

    def test_sub_type(self) -> None:
        assert offers_direct_installment(_make_listing(subListingType="installment_only"))

    def test_tag(self) -> None:
        assert offers_direct_installment(_make_listing(tags=[{"label": "ผ่อนตรง"}]))

    def test_description_mention(self) -> None:
        assert offers_direct_installment(_make_listing(description="รับผ่อนตรง ไม่เช็คเครดิต"))

    @pytest.mark.parametrize("description", ["ไม่รับผ่อนตรง", "งดผ่อนตรง", "ไม่มี ผ่อนตรง", "ไม่สามารถผ่อนตรงได้"])
    def test_negated_mention(self, description: str) -> None:
        assert not offers_direct_installment(_make_listing(description=description))

    def test_no_mention(self) -> None:
        assert not offers_direct_installment(_make_listing(description="ขายเงินสด"))


# ===========================================================================
# ListingFilter and malformed input
# ===========================================================================


class TestListingFilter:
    def test_tokens_exclude_price_phrase(self) -> None:
        gate = ListingFilter({"keyword": "ทาวน์โฮม งบ 2 ล้าน"})
        assert gate.tokens == ["ทาวน์โฮม"]

    def test_evaluate_reports_first_failure(self) -> None:
        gate = ListingFilter({"bedrooms": 2, "minPrice": 5_000_000})
        result = gate.evaluate({"id": "x", "price": 1_000_000, "bedrooms": 3})
        assert not result.passed
        assert result.listing_id == "x"
        assert "price" in result.reason

    def test_evaluate_pass(self) -> None:
        result = ListingFilter().evaluate({"id": "x"})
        assert result == FilterResult(passed=True, reason="", listing_id="x")

    def test_evaluate_malformed(self) -> None:
        assert ListingFilter().evaluate(["not", "a", "record"]) == FilterResult(
            passed=False, reason="malformed record", listing_id=None
        )

    def test_filter_many(self, sample_listings: list[dict[str, Any]]) -> None:
        passing, results = ListingFilter({"listingType": "rent"}).filter_many(sample_listings)
        assert _ids(passing) == ["d"]
        assert [r.passed for r in results] == [False, False, False, True]

    def test_accepts_listing_instances(self) -> None:
        listing = _make_listing(bedrooms=2)
        assert filter_properties([listing], {"bedrooms": 2}) == [listing]


class TestMalformedInput:
    def test_malformed_records_skipped(
        self, sample_listings: list[dict[str, Any]], caplog: pytest.LogCaptureFixture
    ) -> None:
        records: list[Any] = [None, "record", {"title": "ไม่มีรหัส"}, 42, *sample_listings]
        assert _ids(filter_properties(records, {})) == ["a", "b", "c", "d"]
        assert "malformed" in caplog.text

    @pytest.mark.parametrize("records", [None, "abc", {"id": "a"}, 5])
    def test_non_collection(self, records: Any) -> None:
        assert filter_properties(records, {}) == []

    def test_generator_input(self, sample_listings: list[dict[str, Any]]) -> None:
        assert _ids(filter_properties((r for r in sample_listings), {"location": "ระยอง"})) == ["d"]
