"""
Association Ledger - Source Package

Tracks member dues collected per month and itemized expenditures with
photographic vouchers, for a single organizer on a single device.

DESIGN PRINCIPLES:
1. One document is the whole truth
2. Totals are derived, never stored
3. Every change is a pure reducer step
4. Storage is the only side effect, and it never corrupts the last good save
5. Bad input is rejected visibly, never "fixed" silently
"""

__version__ = "1.0.0"
__author__ = "SPSIB Ledger Team"
