"""Route optimisation services."""
