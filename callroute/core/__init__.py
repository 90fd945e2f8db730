"""Routing decision core: normalization, matching, conditions, actions, validation."""
