"""
Discovery, enrichment and upsert stages of the movie sync pipeline.
"""
