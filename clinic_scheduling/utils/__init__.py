"""Shared helpers for the scheduling engine."""
