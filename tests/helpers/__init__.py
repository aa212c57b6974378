"""
Test helper utilities for apnea-cluster testing.

This module provides reusable utilities for:
- Generating synthetic annotation events and FLG readings
- Validating cluster and false-negative invariants
"""
