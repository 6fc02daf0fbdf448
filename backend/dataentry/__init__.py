"""Data Entry Rush - scoring and stage-progression backend for a data-entry training game."""
