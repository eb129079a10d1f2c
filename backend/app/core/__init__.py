"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions only mutate the layout or invite handed to them

Design Decisions:
    - Functional core separated from imperative shell: services load, call core, commit
"""
