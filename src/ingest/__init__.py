"""Input discovery and catalog access.

This module reads synced stream files and the singer catalog.
It prepares typed frames and declared schemas for export and snapshots.
"""
