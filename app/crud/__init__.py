"""
Data access for Stockroom Orders
"""
