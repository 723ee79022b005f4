# Services package init
"""
Pokédex API: Services Layer
============================

What:  Business logic between the routes (HTTP) and the database.
How:   One class per resource with a module-level singleton. Every method
       takes the request's AsyncSession and opens its own `transaction()`.

Service Inventory:
    - CrudService:      id-keyed CRUD shared by the reference tables
    - SpeciesService, TypeService, MoveService, nature_service
    - PokemonService:   multi-table writes and the aggregated read
    - ImageService:     upload validation, temp spooling, object-store push
    - ObjectStorage (abstract) / S3ObjectStorage: where images live
"""
