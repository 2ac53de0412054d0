"""Availability and reservation scheduling engine."""
