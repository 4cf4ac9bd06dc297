"""Listing search: tokenizer, price parser, matcher, filters, scorer, sections."""

from estatesearch.search.engine import (
    get_property_suggestions,
    search_properties,
    unique_property_types,
)
from estatesearch.search.filters import (
    FilterCriteria,
    FilterResult,
    ListingFilter,
    filter_properties,
    offers_direct_installment,
)
from estatesearch.search.matching import matches_array_field, matches_field
from estatesearch.search.price import buffered_price_range, parse_price_query
from estatesearch.search.scoring import PRIORITY_KEYWORDS, rank_listings, score
from estatesearch.search.sections import SectionCriteria, filter_by_criteria
from estatesearch.search.tokenizer import tokenize

__all__ = [
    "FilterCriteria",
    "FilterResult",
    "ListingFilter",
    "PRIORITY_KEYWORDS",
    "SectionCriteria",
    "buffered_price_range",
    "filter_by_criteria",
    "filter_properties",
    "get_property_suggestions",
    "matches_array_field",
    "matches_field",
    "offers_direct_installment",
    "parse_price_query",
    "rank_listings",
    "score",
    "search_properties",
    "tokenize",
    "unique_property_types",
]
