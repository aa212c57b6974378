"""Shared utilities for apnea-cluster."""
