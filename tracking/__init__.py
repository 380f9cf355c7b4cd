"""Grants, cooldown and user preferences for the boundary engine."""
