"""Domain packages, one per resource exposed by the service."""
