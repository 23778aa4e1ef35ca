"""Services Layer — sync engine (timers, queue, log) and the network analyst.

Invariants:
    - Services orchestrate core transitions; they never re-implement them
"""
