"""Readers for exported CPAP event data."""

from .details_csv import read_details_csv

__all__ = ["read_details_csv"]
