"""Core Layer — pure domain logic, no IO, no async, no timers.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or schemas/
    - All state transitions are pure and deterministic (clock and RNG are parameters)

Design Decisions:
    - Functional core separated from imperative shell: the sync engine owns time and IO
"""
