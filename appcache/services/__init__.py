"""Services Layer — the cache manager that orchestrates store IO around pure core logic.

Invariants:
    - Services never expose partitions or rows, only domain records
"""
