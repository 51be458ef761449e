"""
Content layer: typed CMS documents and the operations over them.

Responsibilities:
  - Parse raw Sanity JSON into pydantic models
  - Serve the public page data (cached reads)
  - Admin CRUD and featured-item management (writes)
  - Site URL and form-field helpers
"""
