"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure imports core types and errors only, never core decision logic
    - All external calls wrapped with timeout and error mapping to IntakeError types

Design Decisions:
    - Resilient wrappers over raw clients (ADR: ExMA single responsibility)
"""
