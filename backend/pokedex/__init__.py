"""
Pokédex API: Application Package
=================================

REST API over a relational Pokédex: Pokémon with their species, base stats,
moves and types, plus the type-effectiveness chart and natures.

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← decode request, call service
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← transactions, aggregation, uploads
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database / Object Storage         │  ← AsyncSession, S3
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
