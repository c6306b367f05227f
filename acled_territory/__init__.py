"""Shared library for the ACLED territorial-control text analysis.

This library provides reusable components for data preparation, text
processing, topic modeling, classification and reporting.
"""
