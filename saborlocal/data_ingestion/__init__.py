"""
One-off content import into the Sanity dataset.

Responsibilities:
- Read a JSON bundle (cities, categories, venues) or a venues CSV.
- Normalise venue rows into the CMS document shape.
- Submit deterministic-id ``createOrReplace`` mutations, optionally after
  purging the existing documents.
"""
