"""Routes de la gateway."""
