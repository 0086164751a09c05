"""
Search tools for the Resource Finder.

This module contains the pattern compiler, content match extraction, container
accessors and enumeration, multi-source aggregation and result shaping.
"""
