# file: callroute/__init__.py
"""
callroute - inbound call routing decisions for a telephony back-office.

This package decides what happens to an inbound call (ring devices, forward,
voicemail or reject) from a blocklist and an ordered set of routing rules,
and validates rule definitions before they are activated.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
