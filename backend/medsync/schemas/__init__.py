"""Pydantic Schemas — request and bootstrap validation at the system boundary.

Invariants:
    - Schemas validate at system boundary (user input, seed files)
    - Domain enums from core/ used for enum fields
"""
