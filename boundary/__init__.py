"""Bounded app storage and the safety allow-list."""
