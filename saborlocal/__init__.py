"""
SaborLocal restaurant-review content service.

Responsibilities:
- Read venues, reviews, cities, categories and posts from the Sanity CMS.
- Expose the public JSON API rendered by the web front end.
- Provide the admin CRUD API for curated content.
- Generate SEO metadata, JSON-LD and voice-search (AEO) content.
"""
