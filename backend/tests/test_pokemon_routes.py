"""
Pokédex API: Pokémon Endpoint Tests
====================================

What:  End-to-end tests of /pokemon through the FastAPI app, against
       in-memory SQLite and the in-memory object store.

What we test:
    ✅ Create → read projection (species, stats, de-duplicated moves/types)
    ✅ Atomic create: a failing junction insert leaves nothing behind
    ✅ Image upload stores the URL; failed upload writes nothing
    ✅ Temp spool files removed on success and failure
    ✅ Partial update (null clears a column), full replace of moves/types, id resolution rules
    ✅ Delete removes every child row; a failed delete keeps them all
    ✅ Out-of-range path ids and oversized images rejected with 400
    ✅ Case-insensitive filters by type and move
    ✅ Error envelope for 400 / 404
"""

import json
import os

import pytest
from sqlalchemy import event, func, select
from sqlalchemy.exc import OperationalError

from pokedex.config import settings
from pokedex.models import Pokemon, PokemonBaseStats, PokemonMove, PokemonType


def bulbasaur(seed, **overrides):
    payload = {
        "name": "Bulbasaur",
        "species_id": seed["species"],
        "height": 0.7,
        "weight": 6.9,
        "stats": {
            "hp": 45,
            "attack": 49,
            "defense": 49,
            "special_attack": 65,
            "special_defense": 65,
            "speed": 45,
        },
        "moves": [seed["vine_whip"], seed["tackle"]],
        "type": [seed["grass"], seed["poison"]],
    }
    payload.update(overrides)
    return payload


async def create(client, payload, image=None):
    if image is None:
        return await client.post("/pokemon", json=payload)
    return await client.post(
        "/pokemon",
        data={"pokemon": json.dumps(payload)},
        files={"image": image},
    )


async def count_rows(session_factory, model):
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class TestCreateAndRead:

    @pytest.mark.asyncio
    async def test_create_returns_201_with_id(self, test_client, seed):
        response = await create(test_client, bulbasaur(seed))

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Pokémon added successfully!"
        assert isinstance(body["id"], int)

    @pytest.mark.asyncio
    async def test_read_projection(self, test_client, seed):
        pokemon_id = (await create(test_client, bulbasaur(seed))).json()["id"]

        response = await test_client.get(f"/pokemon/{pokemon_id}")

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Bulbasaur"
        assert body["species"] == "Seed Pokémon"
        assert body["height"] == 0.7
        assert body["hp"] == 45
        assert body["special_attack"] == 65
        assert body["image_url"] is None
        assert [m["name"] for m in body["moves"]] == ["Tackle", "Vine Whip"]
        assert body["type"] == [
            {"id": seed["grass"], "name": "Grass", "color": "#78C850"},
            {"id": seed["poison"], "name": "Poison", "color": "#A040A0"},
        ]

    @pytest.mark.asyncio
    async def test_duplicate_ids_are_collapsed(self, test_client, seed):
        payload = bulbasaur(
            seed,
            moves=[seed["tackle"], seed["vine_whip"], seed["tackle"]],
            type=[seed["poison"], seed["grass"], seed["poison"]],
        )
        pokemon_id = (await create(test_client, payload)).json()["id"]

        body = (await test_client.get(f"/pokemon/{pokemon_id}")).json()

        assert len(body["moves"]) == 2
        assert len(body["type"]) == 2

    @pytest.mark.asyncio
    async def test_pokemon_without_moves_or_types_has_empty_lists(self, test_client, seed):
        pokemon_id = (await create(test_client, bulbasaur(seed, moves=[], type=[]))).json()["id"]

        body = (await test_client.get(f"/pokemon/{pokemon_id}")).json()

        assert body["moves"] == []
        assert body["type"] == []

    @pytest.mark.asyncio
    async def test_list_is_ordered_by_id(self, test_client, seed):
        for name in ("Bulbasaur", "Ivysaur", "Venusaur"):
            await create(test_client, bulbasaur(seed, name=name))

        body = (await test_client.get("/pokemon")).json()

        assert [p["name"] for p in body] == ["Bulbasaur", "Ivysaur", "Venusaur"]
        assert [p["id"] for p in body] == sorted(p["id"] for p in body)

    @pytest.mark.asyncio
    async def test_unknown_move_rolls_back_everything(self, test_client, seed, session_factory):
        response = await create(test_client, bulbasaur(seed, moves=[seed["tackle"], 9999]))

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"
        assert (await test_client.get("/pokemon")).json() == []
        assert await count_rows(session_factory, Pokemon) == 0
        assert await count_rows(session_factory, PokemonBaseStats) == 0
        assert await count_rows(session_factory, PokemonMove) == 0

    @pytest.mark.asyncio
    async def test_missing_stats_is_400(self, test_client, seed):
        payload = bulbasaur(seed)
        del payload["stats"]

        response = await create(test_client, payload)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"
        assert response.json()["details"]

    @pytest.mark.asyncio
    async def test_malformed_json_is_400(self, test_client, seed):
        response = await test_client.post(
            "/pokemon", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_multipart_without_pokemon_field_is_400(self, test_client, sample_png_bytes):
        response = await test_client.post(
            "/pokemon", files={"image": ("a.png", sample_png_bytes, "image/png")}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Missing 'pokemon' field in form data."

    @pytest.mark.asyncio
    async def test_get_missing_pokemon_is_404(self, test_client, seed):
        response = await test_client.get("/pokemon/999999")

        assert response.status_code == 404
        assert response.json()["error"] == "Pokémon not found"
        assert "request_id" in response.json()

    @pytest.mark.asyncio
    async def test_non_integer_id_is_400(self, test_client):
        response = await test_client.get("/pokemon/abc")

        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pokemon_id", ["0", "-3", "2147483648", "99999999999999999999999"])
    async def test_out_of_range_id_is_400(self, test_client, seed, pokemon_id):
        for method in ("get", "delete"):
            response = await getattr(test_client, method)(f"/pokemon/{pokemon_id}")

            assert response.status_code == 400
            assert response.json()["error"] == "Invalid request"

        response = await test_client.put(f"/pokemon/{pokemon_id}", json={"name": "X"})
        assert response.status_code == 400


class TestImages:

    @pytest.mark.asyncio
    async def test_upload_stores_url(self, test_client, seed, fake_storage, sample_png_bytes):
        response = await create(
            test_client, bulbasaur(seed), image=("bulbasaur.png", sample_png_bytes, "image/png")
        )
        assert response.status_code == 201

        body = (await test_client.get(f"/pokemon/{response.json()['id']}")).json()

        [key] = fake_storage.objects
        assert key.startswith("pokemon/")
        assert key.endswith("-bulbasaur.png")
        assert fake_storage.objects[key] == sample_png_bytes
        assert fake_storage.content_types[key] == "image/png"
        assert body["image_url"] == f"https://images.test/{key}"

    @pytest.mark.asyncio
    async def test_temp_file_removed_after_upload(
        self, test_client, seed, fake_storage, sample_png_bytes
    ):
        await create(test_client, bulbasaur(seed), image=("b.png", sample_png_bytes, "image/png"))

        [path] = fake_storage.uploaded_paths
        assert not os.path.exists(path)

    @pytest.mark.asyncio
    async def test_failed_upload_creates_nothing(
        self, test_client, seed, fake_storage, sample_png_bytes, session_factory
    ):
        fake_storage.fail_uploads = True

        response = await create(
            test_client, bulbasaur(seed), image=("b.png", sample_png_bytes, "image/png")
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Image upload failed. Please try again later."
        assert await count_rows(session_factory, Pokemon) == 0
        [path] = fake_storage.uploaded_paths
        assert not os.path.exists(path)

    @pytest.mark.asyncio
    async def test_rolled_back_create_discards_uploaded_image(
        self, test_client, seed, fake_storage, sample_png_bytes
    ):
        response = await create(
            test_client,
            bulbasaur(seed, type=[9999]),
            image=("b.png", sample_png_bytes, "image/png"),
        )

        assert response.status_code == 500
        assert len(fake_storage.deleted) == 1
        assert fake_storage.objects == {}

    @pytest.mark.asyncio
    async def test_unsupported_extension_is_400(
        self, test_client, seed, fake_storage, session_factory
    ):
        response = await create(
            test_client, bulbasaur(seed), image=("notes.txt", b"hello", "text/plain")
        )

        assert response.status_code == 400
        assert "not supported" in response.json()["error"]
        assert fake_storage.uploaded_paths == []
        assert await count_rows(session_factory, Pokemon) == 0

    @pytest.mark.asyncio
    async def test_oversized_image_rejected_before_upload(
        self, test_client, seed, fake_storage, session_factory, monkeypatch
    ):
        monkeypatch.setattr(settings, "max_image_size", 2048)

        response = await create(
            test_client, bulbasaur(seed), image=("big.png", b"\x00" * 4096, "image/png")
        )

        assert response.status_code == 400
        assert "too large" in response.json()["error"]
        assert fake_storage.uploaded_paths == []
        assert await count_rows(session_factory, Pokemon) == 0

    @pytest.mark.asyncio
    async def test_update_without_image_keeps_url(
        self, test_client, seed, sample_png_bytes
    ):
        pokemon_id = (
            await create(test_client, bulbasaur(seed), image=("b.png", sample_png_bytes, "image/png"))
        ).json()["id"]
        before = (await test_client.get(f"/pokemon/{pokemon_id}")).json()["image_url"]

        await test_client.put(f"/pokemon/{pokemon_id}", json={"name": "Bulby"})

        after = (await test_client.get(f"/pokemon/{pokemon_id}")).json()
        assert after["name"] == "Bulby"
        assert after["image_url"] == before

    @pytest.mark.asyncio
    async def test_update_with_image_replaces_url(
        self, test_client, seed, fake_storage, sample_png_bytes
    ):
        pokemon_id = (await create(test_client, bulbasaur(seed))).json()["id"]

        response = await test_client.put(
            f"/pokemon/{pokemon_id}",
            data={"pokemon": json.dumps({"weight": 7.1})},
            files={"image": ("new.webp", sample_png_bytes, "image/webp")},
        )

        assert response.status_code == 200
        body = (await test_client.get(f"/pokemon/{pokemon_id}")).json()
        [key] = fake_storage.objects
        assert body["image_url"] == f"https://images.test/{key}"
        assert body["weight"] == 7.1


class TestUpdate:

    @pytest.mark.asyncio
    async def test_partial_update_touches_only_sent_fields(self, test_client, seed):
        pokemon_id = (await create(test_client, bulbasaur(seed))).json()["id"]

        response = await test_client.put(f"/pokemon/{pokemon_id}", json={"height": 1.0})

        assert response.status_code == 200
        assert response.json()["message"] == "Pokémon updated successfully!"
        body = (await test_client.get(f"/pokemon/{pokemon_id}")).json()
        assert body["height"] == 1.0
        assert body["name"] == "Bulbasaur"
        assert body["hp"] == 45
        assert len(body["moves"]) == 2
        assert len(body["type"]) == 2

    @pytest.mark.asyncio
    async def test_null_scalar_clears_the_column(self, test_client, seed):
        pokemon_id = (await create(test_client, bulbasaur(seed))).json()["id"]

        response = await test_client.put(
            f"/pokemon/{pokemon_id}", json={"height": None, "species_id": None}
        )

        assert response.status_code == 200
        body = (await test_client.get(f"/pokemon/{pokemon_id}")).json()
        assert body["height"] is None
        assert body["species_id"] is None
        assert body["species"] is None
        assert body["weight"] == 6.9

    @pytest.mark.asyncio
    async def test_null_name_is_400(self, test_client, seed):
        pokemon_id = (await create(test_client, bulbasaur(seed))).json()["id"]

        response = await test_client.put(f"/pokemon/{pokemon_id}", json={"name": None})

        assert response.status_code == 400
        assert (await test_client.get(f"/pokemon/{pokemon_id}")).json()["name"] == "Bulbasaur"

    @pytest.mark.asyncio
    async def test_null_lists_leave_sets_alone(self, test_client, seed):
        pokemon_id = (await create(test_client, bulbasaur(seed))).json()["id"]

        response = await test_client.put(
            f"/pokemon/{pokemon_id}", json={"moves": None, "type": None, "stats": None}
        )

        assert response.status_code == 200
        body = (await test_client.get(f"/pokemon/{pokemon_id}")).json()
        assert len(body["moves"]) == 2
        assert len(body["type"]) == 2
        assert body["hp"] == 45

    @pytest.mark.asyncio
    async def test_empty_moves_clears_the_set(self, test_client, seed):
        pokemon_id = (await create(test_client, bulbasaur(seed))).json()["id"]

        await test_client.put(f"/pokemon/{pokemon_id}", json={"moves": []})

        body = (await test_client.get(f"/pokemon/{pokemon_id}")).json()
        assert body["moves"] == []
        assert len(body["type"]) == 2

    @pytest.mark.asyncio
    async def test_types_are_replaced_not_merged(self, test_client, seed):
        pokemon_id = (await create(test_client, bulbasaur(seed))).json()["id"]

        await test_client.put(f"/pokemon/{pokemon_id}", json={"type": [seed["fire"]]})

        body = (await test_client.get(f"/pokemon/{pokemon_id}")).json()
        assert [t["name"] for t in body["type"]] == ["Fire"]

    @pytest.mark.asyncio
    async def test_stats_overwritten(self, test_client, seed):
        pokemon_id = (await create(test_client, bulbasaur(seed))).json()["id"]
        stats = {
            "hp": 60,
            "attack": 62,
            "defense": 63,
            "special_attack": 80,
            "special_defense": 80,
            "speed": 60,
        }

        await test_client.put(f"/pokemon/{pokemon_id}", json={"stats": stats})

        body = (await test_client.get(f"/pokemon/{pokemon_id}")).json()
        assert {k: body[k] for k in stats} == stats

    @pytest.mark.asyncio
    async def test_id_in_body(self, test_client, seed):
        pokemon_id = (await create(test_client, bulbasaur(seed))).json()["id"]

        response = await test_client.put("/pokemon", json={"id": pokemon_id, "name": "Ivysaur"})

        assert response.status_code == 200
        body = (await test_client.get(f"/pokemon/{pokemon_id}")).json()
        assert body["name"] == "Ivysaur"

    @pytest.mark.asyncio
    async def test_missing_id_is_400(self, test_client, seed):
        response = await test_client.put("/pokemon", json={"name": "Nobody"})

        assert response.status_code == 400
        assert response.json()["error"] == "Pokémon ID is required."

    @pytest.mark.asyncio
    async def test_mismatched_ids_is_400(self, test_client, seed):
        pokemon_id = (await create(test_client, bulbasaur(seed))).json()["id"]

        response = await test_client.put(
            f"/pokemon/{pokemon_id}", json={"id": pokemon_id + 1, "name": "X"}
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_missing_pokemon_is_404(self, test_client, seed):
        response = await test_client.put("/pokemon/999999", json={"name": "Ghost"})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_failed_update_rolls_back(self, test_client, seed):
        pokemon_id = (await create(test_client, bulbasaur(seed))).json()["id"]

        response = await test_client.put(
            f"/pokemon/{pokemon_id}", json={"name": "Changed", "moves": [9999]}
        )

        assert response.status_code == 500
        body = (await test_client.get(f"/pokemon/{pokemon_id}")).json()
        assert body["name"] == "Bulbasaur"
        assert len(body["moves"]) == 2


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_removes_all_rows(self, test_client, seed, session_factory):
        pokemon_id = (await create(test_client, bulbasaur(seed))).json()["id"]

        response = await test_client.delete(f"/pokemon/{pokemon_id}")

        assert response.status_code == 200
        assert response.json()["message"] == "Pokémon deleted successfully!"
        assert (await test_client.get(f"/pokemon/{pokemon_id}")).status_code == 404
        for model in (Pokemon, PokemonBaseStats, PokemonMove, PokemonType):
            assert await count_rows(session_factory, model) == 0

    @pytest.mark.asyncio
    async def test_delete_missing_pokemon_is_404(self, test_client, seed):
        response = await test_client.delete("/pokemon/999999")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_failed_parent_delete_keeps_child_rows(
        self, test_client, seed, session_factory, db_engine
    ):
        pokemon_id = (await create(test_client, bulbasaur(seed))).json()["id"]

        def fail_parent_delete(conn, cursor, statement, parameters, context, executemany):
            if statement.startswith("DELETE FROM pokemon WHERE"):
                raise OperationalError(statement, parameters, Exception("disk I/O error"))

        event.listen(db_engine.sync_engine, "before_cursor_execute", fail_parent_delete)
        try:
            response = await test_client.delete(f"/pokemon/{pokemon_id}")
        finally:
            event.remove(db_engine.sync_engine, "before_cursor_execute", fail_parent_delete)

        assert response.status_code == 500
        assert await count_rows(session_factory, PokemonBaseStats) == 1
        assert await count_rows(session_factory, PokemonMove) == 2
        assert await count_rows(session_factory, PokemonType) == 2
        body = (await test_client.get(f"/pokemon/{pokemon_id}")).json()
        assert body["hp"] == 45
        assert len(body["moves"]) == 2
        assert len(body["type"]) == 2


class TestFilters:

    @pytest.mark.asyncio
    async def test_type_filter_is_case_insensitive(self, test_client, seed):
        await create(test_client, bulbasaur(seed))
        await create(test_client, bulbasaur(seed, name="Charmander", type=[seed["fire"]]))

        lower = await test_client.get("/pokemon/types/grass")
        upper = await test_client.get("/pokemon/types/GRASS")

        assert lower.status_code == 200
        assert lower.json() == upper.json()
        [match] = lower.json()
        assert match["name"] == "Bulbasaur"
        # every type of the matching Pokémon, not only the filtered one
        assert len(match["type"]) == 2

    @pytest.mark.asyncio
    async def test_type_filter_without_match_is_404(self, test_client, seed):
        await create(test_client, bulbasaur(seed))

        response = await test_client.get("/pokemon/types/fire")

        assert response.status_code == 404
        assert response.json()["error"] == "No Pokémon found with type: fire"

    @pytest.mark.asyncio
    async def test_move_filter(self, test_client, seed):
        await create(test_client, bulbasaur(seed))
        await create(
            test_client, bulbasaur(seed, name="Charmander", moves=[seed["ember"]], type=[seed["fire"]])
        )

        response = await test_client.get("/pokemon/moves/EMBER")

        assert response.status_code == 200
        assert [p["name"] for p in response.json()] == ["Charmander"]

    @pytest.mark.asyncio
    async def test_move_filter_without_match_is_404(self, test_client, seed):
        response = await test_client.get("/pokemon/moves/Surf")

        assert response.status_code == 404
        assert response.json()["error"] == "No Pokémon found with move: Surf"


class TestSpeciesCreate:

    @pytest.mark.asyncio
    async def test_create_species(self, test_client):
        response = await test_client.post("/pokemon/species", json={"species_name": "Lizard Pokémon"})

        assert response.status_code == 201
        species_id = response.json()["id"]
        body = (await test_client.get(f"/species/{species_id}")).json()
        assert body == {"id": species_id, "name": "Lizard Pokémon"}

    @pytest.mark.asyncio
    async def test_species_name_required(self, test_client):
        response = await test_client.post("/pokemon/species", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "Species name is required."


class TestEnvelope:

    @pytest.mark.asyncio
    async def test_unknown_route_is_404_envelope(self, test_client):
        response = await test_client.get("/no-such-thing")

        assert response.status_code == 404
        assert response.json()["error"] == "Not Found"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client, seed):
        response = await test_client.get("/pokemon/999999", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"
        assert response.json()["request_id"] == "abc123"
