"""Core domain models, settings, logging configuration, and shared helpers."""

from estatesearch.core.exceptions import ConfigError, DataSourceError, EstateSearchError
from estatesearch.core.logging_config import JsonFormatter, configure_logging, request_scope
from estatesearch.core.models import (
    Availability,
    Listing,
    ListingType,
    Location,
    ParsedPrice,
    PriceRange,
    PropertyCondition,
    ScoredListing,
    SubListingType,
    as_listing,
)
from estatesearch.core.settings import Settings

__all__ = [
    # Logging
    "configure_logging",
    "JsonFormatter",
    "request_scope",
    # Domain models
    "Availability",
    "Listing",
    "ListingType",
    "Location",
    "ParsedPrice",
    "PriceRange",
    "PropertyCondition",
    "ScoredListing",
    "SubListingType",
    "as_listing",
    # Settings
    "Settings",
    # Exceptions
    "EstateSearchError",
    "ConfigError",
    "DataSourceError",
]
