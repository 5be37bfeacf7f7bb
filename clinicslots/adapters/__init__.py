"""
Adapters layer - External integrations (clinic REST API, JSON data files).
"""

from .api_client import ClinicApiClient
from .json_source import JsonClinicDataSource

__all__ = ["ClinicApiClient", "JsonClinicDataSource"]
