"""
Stockroom Orders: product catalog, order lifecycle and an append-only stock ledger.
"""
