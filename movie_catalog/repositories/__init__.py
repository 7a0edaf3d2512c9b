"""
Supabase table access for the movie catalog.
"""
