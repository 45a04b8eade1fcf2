"""Project showcase service."""
