"""
Class Fund - Source Package

A ledger of named boxes (sub-funds) for a graduation-class fund,
persisted to local storage on the member's device.

DESIGN PRINCIPLES:
1. Storage is the source of truth; memory is updated first, then saved
2. Fail visibly: a save that did not happen is reported, never hidden
3. Never fix user input silently
4. Every change to a box is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Class Fund Team"
