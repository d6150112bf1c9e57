"""
Utility functions module.

Time Semantics:
- Bar timestamps from the market-data source are authoritative for ordering
- Wall-clock time only stamps records produced by the pipeline
"""
