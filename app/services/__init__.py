"""
Domain services that span several tables
"""
