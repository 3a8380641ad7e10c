"""Services Layer - orchestration of providers and persistence around the pure core.

Invariants:
    - Services receive a session factory and providers through their constructors
    - Multi-step writes (round creation, guess insert) run inside one transaction
"""
