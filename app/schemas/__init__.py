"""
Request and response schemas. JSON field names are camelCase aliases.
"""
