"""
Chit Ledger - Source Package

Record-keeping for chit fund (rotating savings) groups: subscriber
enrollment, monthly installment collection, prize allotment and
backup tracking.

DESIGN PRINCIPLES:
1. Engines are pure: collections in, new collections out
2. Fail early, fail visibly
3. No silent corrections (exact settlement only)
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Chit Ledger Team"
