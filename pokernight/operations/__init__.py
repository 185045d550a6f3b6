"""
Operations Layer

This package provides business logic operations that compose database methods
for multi-step workflows. Operations modules handle transactions, validation
and invariants while maintaining clean separation of concerns.

Architecture:
- Database layer: Pure data access (seating store, statistic rows, migrations)
- Operations layer: Seating lifecycle and admin corrections
- API layer: HTTP routing and request validation

Each operations module focuses on a specific domain:
- SeatingOperations: Seating generation, active game lookup, result recording
- AdminOperations: Retroactive edits and deletes followed by a full recompute
"""
