"""Draft and scoring engine for round-based fantasy golf competitions."""
