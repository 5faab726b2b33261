"""CKAN datastore access."""

from thaihousing.ckan.client import CkanClient, CkanError

__all__ = ["CkanClient", "CkanError"]
