"""
Shared test assets for the fund metrics engine

Includes:
- Level file fixtures (weekly fund/benchmark CSV, monthly NAV JSON)
- A malformed CSV for adapter error paths
"""
