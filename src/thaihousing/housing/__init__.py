"""Apartment supply and regional housing datasets."""

from thaihousing.housing.models import Property, PropertyFilters, PropertyStatistics
from thaihousing.housing.normalize import normalize_record, normalize_records
from thaihousing.housing.service import ApartmentService

__all__ = [
    "ApartmentService",
    "Property",
    "PropertyFilters",
    "PropertyStatistics",
    "normalize_record",
    "normalize_records",
]
