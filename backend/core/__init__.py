"""StrokeCoach core: domain models and services."""
