"""Factor calculators and aggregation."""
