# src/redline_kit/observability/names.py

"""Standard metric names for redline-kit observability.

Use these constants instead of hardcoded strings for consistency
across the codebase.

Note: All duration metrics are in milliseconds by convention.
"""

# ============================================================================
# Structure Metrics
# ============================================================================

# Duration
STRUCTURE_BUILD_DURATION = "structure_build_duration"

# Gauges
STRUCTURE_SECTIONS = "structure_sections"


# ============================================================================
# Scope Metrics
# ============================================================================

# Duration
SELECTION_MATCH_DURATION = "selection_match_duration"
SCOPE_FILTER_DURATION = "scope_filter_duration"

# Counters
SELECTION_MATCHES_TOTAL = "selection_matches_total"


# ============================================================================
# Reconciliation Metrics
# ============================================================================

# Duration
RECONCILIATION_DURATION = "reconciliation_duration"

# Counters
RECONCILIATION_PRESERVED_TOTAL = "reconciliation_preserved_total"
RECONCILIATION_REMOVED_TOTAL = "reconciliation_removed_total"
RECONCILIATION_RANGES_DROPPED = "reconciliation_ranges_dropped"


# ============================================================================
# Pipeline / Cache Metrics
# ============================================================================

# Duration
EXTRACTION_DURATION = "extraction_duration"
CLASSIFICATION_DURATION = "classification_duration"

# Counters
CACHE_HITS_TOTAL = "cache_hits_total"
CACHE_MISSES_TOTAL = "cache_misses_total"
EXTRACTION_ERRORS_TOTAL = "extraction_errors_total"
CLASSIFICATION_ERRORS_TOTAL = "classification_errors_total"
STALE_RESULTS_DISCARDED = "stale_results_discarded"
