"""
GateWarden - Curfew enforcement for gated-community entry control.

This package decides, at the instant a resident or visitor requests gate
entry, whether any of the community's configured curfews restricts access.
"""

__version__ = "0.1.0"
__author__ = "Parth Sinha and Shine Gupta"
