"""
PagoTrack - Source Package

Tracks a recurring weekly payment to one employee and keeps a running
balance between what was expected since a start date and what was
actually paid.

DESIGN PRINCIPLES:
1. Derived data is recomputed, never cached
2. Fail early, fail visibly
3. No silent corrections of user input
4. Extraction suggests → Human confirms → Validation decides
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "PagoTrack Team"
