# Routes package init
"""
Pokédex API: Routes Package
============================

Route Inventory:
    - pokemon.py:  /pokemon, /pokemon/{id}, /pokemon/types/{type},
                   /pokemon/moves/{move}, POST /pokemon/species
    - moves.py:    /moves, /moves/{id}
    - types.py:    /types, /types/{id}
    - species.py:  /species, /species/{id}
    - natures.py:  /natures, /natures/{id}
    - health.py:   /health

Routes stay thin: decode the request, call one service method, return.
"""
