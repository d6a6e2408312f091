"""Memory-mapped keyboard and the built-in trap routines."""
