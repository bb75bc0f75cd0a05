"""
Returns Kernel

The transactional core of merchandise returns:
- Return status lifecycle (received, accepted/rejected, completed)
- Balance reconciliation through payments and refunds
- Atomic cascades onto order items, order payments and order refunds
- Authorship auditing on every mutation
"""

__version__ = "0.1.0"
