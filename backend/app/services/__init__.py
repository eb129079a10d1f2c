"""Services Layer — board ordering, invite lifecycle, team membership, user directory.

Invariants:
    - Every board mutation goes through board_writes.write_board (optimistic retry)
    - Services raise TaskBoardError subclasses; api/ maps them to HTTP responses

Design Decisions:
    - One service per aggregate; each wraps the pure core functions it needs
"""
