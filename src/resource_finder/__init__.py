"""
Resource Finder - Core Package

Content-aware resource discovery across filesystem trees and remote document
stores, with per-line match context and multi-source aggregation.
"""

__version__ = "0.1.0"
__author__ = "Resource Finder Team"
