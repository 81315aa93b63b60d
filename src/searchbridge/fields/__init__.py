"""Field configuration and value resolution."""
