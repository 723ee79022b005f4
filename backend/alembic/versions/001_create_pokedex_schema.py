"""Create the Pokédex schema

Revision ID: 001
Revises: None
Create Date: 2024-05-01 00:00:00.000000+00:00

What:  Creates the reference tables (species, types, moves, natures,
       type_effectiveness) and the Pokémon tables (pokemon,
       pokemon_base_stats, pokemon_moves, pokemon_types).

No foreign key declares ON DELETE CASCADE: the services delete child rows
explicitly inside the same transaction.

Rollback: downgrade() drops every table, children first.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Reference tables ──────────────────────────────────────────────────
    op.create_table(
        "species",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_species"),
    )

    op.create_table(
        "types",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("color", sa.String(20), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_types"),
    )

    op.create_table(
        "type_effectiveness",
        sa.Column("attacking_type_id", sa.Integer(), nullable=False),
        sa.Column("defending_type_id", sa.Integer(), nullable=False),
        sa.Column(
            "effectiveness",
            sa.Float(),
            nullable=False,
            comment="Damage multiplier of attacking → defending, e.g. 2.0",
        ),
        sa.PrimaryKeyConstraint(
            "attacking_type_id", "defending_type_id", name="pk_type_effectiveness"
        ),
        sa.ForeignKeyConstraint(["attacking_type_id"], ["types.id"]),
        sa.ForeignKeyConstraint(["defending_type_id"], ["types.id"]),
    )

    op.create_table(
        "moves",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("types_id", sa.Integer(), nullable=True),
        sa.Column("power", sa.Integer(), nullable=True),
        sa.Column("accuracy", sa.Integer(), nullable=True),
        sa.Column("power_point", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_moves"),
        sa.ForeignKeyConstraint(["types_id"], ["types.id"]),
    )

    op.create_table(
        "natures",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("increased_stat", sa.String(50), nullable=True),
        sa.Column("decreased_stat", sa.String(50), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_natures"),
    )

    # ── Pokémon tables ────────────────────────────────────────────────────
    op.create_table(
        "pokemon",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("species_id", sa.Integer(), nullable=True),
        sa.Column("height", sa.Float(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column(
            "image_url",
            sa.String(1024),
            nullable=True,
            comment="Public object-store URL of the uploaded artwork",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_pokemon"),
        sa.ForeignKeyConstraint(["species_id"], ["species.id"]),
    )

    op.create_table(
        "pokemon_base_stats",
        sa.Column("pokemon_id", sa.Integer(), nullable=False),
        sa.Column("hp", sa.Integer(), nullable=False),
        sa.Column("attack", sa.Integer(), nullable=False),
        sa.Column("defense", sa.Integer(), nullable=False),
        sa.Column("special_attack", sa.Integer(), nullable=False),
        sa.Column("special_defense", sa.Integer(), nullable=False),
        sa.Column("speed", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("pokemon_id", name="pk_pokemon_base_stats"),
        sa.ForeignKeyConstraint(["pokemon_id"], ["pokemon.id"]),
    )

    op.create_table(
        "pokemon_moves",
        sa.Column("pokemon_id", sa.Integer(), nullable=False),
        sa.Column("move_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("pokemon_id", "move_id", name="pk_pokemon_moves"),
        sa.ForeignKeyConstraint(["pokemon_id"], ["pokemon.id"]),
        sa.ForeignKeyConstraint(["move_id"], ["moves.id"]),
    )

    op.create_table(
        "pokemon_types",
        sa.Column("pokemon_id", sa.Integer(), nullable=False),
        sa.Column("type_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("pokemon_id", "type_id", name="pk_pokemon_types"),
        sa.ForeignKeyConstraint(["pokemon_id"], ["pokemon.id"]),
        sa.ForeignKeyConstraint(["type_id"], ["types.id"]),
    )

    # Name filters compare lower(name); these back /pokemon/types/{t} and /pokemon/moves/{m}.
    op.create_index("idx_types_lower_name", "types", [sa.text("lower(name)")])
    op.create_index("idx_moves_lower_name", "moves", [sa.text("lower(name)")])
    op.create_index("idx_pokemon_types_type_id", "pokemon_types", ["type_id"])
    op.create_index("idx_pokemon_moves_move_id", "pokemon_moves", ["move_id"])


def downgrade() -> None:
    op.drop_index("idx_pokemon_moves_move_id", table_name="pokemon_moves")
    op.drop_index("idx_pokemon_types_type_id", table_name="pokemon_types")
    op.drop_index("idx_moves_lower_name", table_name="moves")
    op.drop_index("idx_types_lower_name", table_name="types")
    op.drop_table("pokemon_types")
    op.drop_table("pokemon_moves")
    op.drop_table("pokemon_base_stats")
    op.drop_table("pokemon")
    op.drop_table("natures")
    op.drop_table("moves")
    op.drop_table("type_effectiveness")
    op.drop_table("types")
    op.drop_table("species")
