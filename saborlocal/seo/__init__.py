"""
Search and answer-engine optimisation helpers.

Responsibilities:
  - Page metadata (title, description, Open Graph, Twitter)
  - schema.org JSON-LD documents
  - FAQ sets, voice-search answers and AEO validation
  - Internal-link suggestions and XML sitemaps
"""
