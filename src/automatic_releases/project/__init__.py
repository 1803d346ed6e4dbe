"""Project manifest helpers."""
