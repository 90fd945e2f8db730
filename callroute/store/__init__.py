"""Data sources the routing engine reads from."""
