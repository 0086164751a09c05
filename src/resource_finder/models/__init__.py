"""
Data models for the Resource Finder.

This module contains the request, result and configuration structures used
throughout the system.
"""

from .search_request import SearchRequest
from .search_results import AggregatedResult, ContentMatch, ResourceMatch

__all__ = ['SearchRequest', 'AggregatedResult', 'ContentMatch', 'ResourceMatch']
