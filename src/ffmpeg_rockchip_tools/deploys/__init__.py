"""pyinfra deploy scripts, run by path through the pyinfra CLI."""
