"""Services Layer — async orchestration around the pure core.

Invariants:
    - Services own every IO step (store, mail); core stays pure
    - One module per operation: intake, completion, admission, notifications

Design Decisions:
    - Collaborators arrive through AppContext, never module globals (ADR: ExMA no god objects)
"""
