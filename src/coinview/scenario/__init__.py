"""Scenario forms and request parameters."""
