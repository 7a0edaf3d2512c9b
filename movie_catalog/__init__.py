"""
Shared library code for the streaming movie catalog sync.

This package holds code reused by the pipeline scripts in `scripts/`.

CLI entrypoints should live outside this package and import from `movie_catalog`
rather than the other way around.
"""
