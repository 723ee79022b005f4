"""
Pydantic request/response contracts, kept separate from the ORM models so
the API shape can differ from the table layout (aggregated arrays, joined
names, aliases such as `species_name`).
"""
