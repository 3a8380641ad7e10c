"""Infrastructure Layer - external service clients and cross-cutting concerns.

Invariants:
    - All external calls map SDK/transport failures onto ProviderError subtypes
    - Database failures surface as DatabaseError
"""
