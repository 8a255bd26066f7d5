"""Report projections for display."""
