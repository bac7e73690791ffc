"""
Contribution Tracker - Source Package

Tracks Canadian registered investment accounts (RRSP, TFSA, RPP, DPSP,
FHSA, RESP) for a single user or a couple sharing one login.

DESIGN PRINCIPLES:
1. Calculations are pure and never raise
2. Derived room is recomputed, never stored
3. Validation advises, the caller decides
4. Storage is injected, never global
"""

__version__ = "1.0.0"
__author__ = "Contribution Tracker Team"
