"""Backend payload normalization."""
