"""
Upstream API clients (TMDb, OMDb).
"""
