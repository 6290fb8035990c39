"""Case lifecycle business logic."""
