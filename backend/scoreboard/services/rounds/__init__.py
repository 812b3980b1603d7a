"""Round and scoring services.

Derivation and board views are pure functions over players and score
entries; the ledger is the only module that writes through a store. HTTP
routes and socket handlers import from here, keeping transport concerns
out of the round logic.
"""
