"""
Sanity CMS integration layer.

Responsibilities:
- Hold Sanity project configuration and API credentials.
- Build GROQ queries for every content type the site renders.
- Execute queries and mutations over the Sanity HTTP API.
- Cache query results and drop them when content changes.
- Build CDN image URLs from image assets.
"""
