"""Scheduling rules: overlap, working hours, availability, conflicts, sessions, booking."""
