from fastapi.testclient import TestClient

from movie_service.core.config import Settings
from movie_service.main import create_app


def _create(client, **fields):
    data = {"title": "Dune", "releaseYear": "2021", "genre": "Sci-Fi"}
    data.update(fields)
    return client.post("/api/movies", data=data)


def test_healthcheck(client):
    response = client.get("/healthcheck")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_create_then_summarize_scenario(client, generator, repository):
    created = _create(client)
    assert created.status_code == 200
    assert created.json() == {
        "status": True,
        "statusCode": 200,
        "message": "Movie added successfully",
        "data": None,
    }

    movie = repository.get_by_title("Dune")
    assert movie.cover_url is None
    assert movie.generated_summary is None

    first = client.get(f"/api/movies/{movie.movie_id}/summary")
    assert first.status_code == 200
    assert first.json()["data"] == {"summary": generator.text}
    assert len(generator.calls) == 1

    second = client.get(f"/api/movies/{movie.movie_id}/summary")
    assert second.json()["data"] == {"summary": generator.text}
    assert len(generator.calls) == 1


def test_get_movie_uses_camel_case_fields(client, add_movie):
    movie = add_movie("Arrival", 2016, "Drama")
    body = client.get(f"/api/movies/{movie.movie_id}").json()
    assert body["message"] == "Movie fetched successfully"
    assert body["data"] == {
        "movieId": movie.movie_id,
        "title": "Arrival",
        "releaseYear": 2016,
        "genre": "Drama",
        "coverUrl": None,
        "generatedSummary": None,
    }


def test_list_movies_and_year_filter(client, add_movie):
    empty = client.get("/api/movies")
    assert empty.status_code == 404
    assert empty.json()["message"] == "No movies found"

    add_movie("Dune", 2021)
    add_movie("Tenet", 2020)
    everything = client.get("/api/movies").json()
    assert everything["message"] == "Movies fetched successfully."
    assert len(everything["data"]) == 2

    filtered = client.get("/api/movies", params={"year": "2020"}).json()
    assert [m["title"] for m in filtered["data"]] == ["Tenet"]
    assert client.get("/api/movies", params={"year": "abc"}).status_code == 404


def test_errors_are_flattened_to_400(client, add_movie):
    add_movie("Inception", 2010)

    duplicate = _create(client, title="  inception")
    assert duplicate.status_code == 400
    assert duplicate.json() == {
        "status": False,
        "statusCode": 400,
        "message": "movie with same title already exists",
        "data": None,
    }

    missing = client.get("/api/movies/999")
    assert missing.status_code == 400
    assert missing.json()["message"] == "No movie found with given movieId"

    invalid = _create(client, genre="")
    assert invalid.status_code == 400
    assert "cannot be empty" in invalid.json()["message"]


def test_error_status_mapping_can_be_enabled(service, add_movie):
    client = TestClient(create_app(service=service, settings=Settings(ERROR_STATUS_MAPPING=True)))
    add_movie("Inception", 2010)

    assert client.get("/api/movies/999").status_code == 404
    assert _create(client, title="INCEPTION").status_code == 409
    assert _create(client, releaseYear="soon").status_code == 400


def test_create_with_cover_upload(client, repository, s3_client):
    response = client.post(
        "/api/movies",
        data={"title": "Dune", "releaseYear": "2021", "genre": "Sci-Fi"},
        files={"coverImage": ("poster.jpg", b"jpeg-bytes", "image/jpeg")},
    )
    assert response.status_code == 200
    s3_client.put_object.assert_called_once_with(
        Bucket="movie-covers", Key="images/abc123.jpg", Body=b"jpeg-bytes", ContentType="image/jpeg"
    )
    assert repository.get_by_title("Dune").cover_url == (
        "https://movie-covers.s3.us-east-1.amazonaws.com/images/abc123.jpg"
    )


def test_update_movie(client, repository, add_movie):
    movie = add_movie("Alien", 1979, "Horror", cover_url="https://movie-covers.s3.us-east-1.amazonaws.com/images/old.jpg")
    response = client.put(
        f"/api/movies/{movie.movie_id}",
        data={"title": "Alien", "releaseYear": "1979", "genre": "Sci-Fi"},
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Movie updated successfully"
    updated = repository.get_by_id(movie.movie_id)
    assert updated.genre == "Sci-Fi"
    assert updated.cover_url.endswith("/images/old.jpg")


def test_delete_movie_with_cover(client, repository, s3_client, add_movie):
    movie = add_movie("Dune", 2021, cover_url="https://movie-covers.s3.us-east-1.amazonaws.com/images/abc123.jpg")

    response = client.delete(f"/api/movies/{movie.movie_id}")

    assert response.status_code == 200
    assert response.json()["message"] == "Movie deleted successfully"
    s3_client.delete_object.assert_called_once_with(Bucket="movie-covers", Key="images/abc123.jpg")
    assert repository.list_all() == []
    assert client.delete(f"/api/movies/{movie.movie_id}").status_code == 400


def test_pinned_settings_ignore_ambient_status_mapping(monkeypatch, service, settings):
    monkeypatch.setenv("ERROR_STATUS_MAPPING", "true")
    client = TestClient(create_app(service=service, settings=settings))
    assert client.get("/api/movies/999").status_code == 400
