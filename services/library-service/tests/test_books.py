from __future__ import annotations

from datetime import date

BOOK = {"title": "Clean Code", "author": "Robert C. Martin", "genre": "Software", "publication": 2008}


def test_book_crud_flow(api_client):
    client, _ = api_client

    created = client.post("/api/books", json=BOOK)
    assert created.status_code == 201
    book_id = created.json()["id"]
    client.post("/api/books", json={**BOOK, "title": "Refactoring"})

    listing = client.get("/api/books")
    assert [item["title"] for item in listing.json()] == ["Clean Code", "Refactoring"]

    fetched = client.get(f"/api/books/{book_id}")
    assert fetched.status_code == 200
    assert fetched.json() == {**BOOK, "id": book_id}

    updated = client.put(f"/api/books/{book_id}", json={**BOOK, "genre": "Engineering"})
    assert updated.status_code == 200
    assert updated.json()["genre"] == "Engineering"

    assert client.delete(f"/api/books/{book_id}").status_code == 204
    assert client.get(f"/api/books/{book_id}").status_code == 404
    assert client.delete(f"/api/books/{book_id}").status_code == 404


def test_book_missing_ids_return_404(api_client):
    client, _ = api_client

    assert client.get("/api/books/7").status_code == 404
    response = client.put("/api/books/7", json=BOOK)
    assert response.status_code == 404
    assert response.json()["error"] == "book not found with id: 7"


def test_book_ids_beyond_bigint_range_are_rejected(api_client):
    client, _ = api_client

    response = client.get(f"/api/books/{2**63}")
    assert response.status_code == 400
    assert "book_id" in response.json()["errores"]
    assert client.delete(f"/api/books/{2**63}").status_code == 400
    assert client.put(f"/api/books/{2**63}", json=BOOK).status_code == 400


def test_book_publication_below_zero_is_rejected(api_client):
    client, _ = api_client

    response = client.post("/api/books", json={**BOOK, "publication": -(2**40)})

    assert response.status_code == 400
    assert set(response.json()["errores"]) == {"publication"}


def test_book_validation_reports_all_fields(api_client):
    client, _ = api_client

    response = client.post(
        "/api/books",
        json={"title": "", "author": "x" * 51, "publication": date.today().year + 1},
    )

    assert response.status_code == 400
    assert set(response.json()["errores"]) == {"title", "author", "genre", "publication"}
