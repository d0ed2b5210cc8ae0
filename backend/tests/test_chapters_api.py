import os

from app.models import Chapter, Page
from conftest import corrupt_zip, upload_chapter, upload_work


def test_add_chapter_to_existing_work(client, settings):
    work = upload_work(client).json()

    resp = upload_chapter(client, work["obra_id"], "10.5", pages={"b.webp": b"b", "a.webp": b"a"})

    assert resp.status_code == 201
    body = resp.json()
    assert body["obra_id"] == work["obra_id"]
    assert body["numero_capitulo"] == 10.5
    assert body["paginas"] == 2
    pages = client.get(f"/chapters/{body['capitulo_id']}/pages").json()
    assert [page["imagem_url"] for page in pages] == [
        "/uploads/solo-leveling/cap-10.5/1.webp",
        "/uploads/solo-leveling/cap-10.5/2.webp",
    ]
    assert set(pages[0]) == {"id", "imagem_url", "numero_pagina"}
    assert os.listdir(settings.staging_dir) == []


def test_add_chapter_requires_fields(client):
    work = upload_work(client).json()

    no_archive = client.post("/chapters", data={"obra_id": str(work["obra_id"]), "numero_capitulo": "2"})
    no_number = upload_chapter(client, work["obra_id"], "")

    assert no_archive.status_code == 400
    assert no_number.status_code == 400


def test_add_chapter_to_missing_work(client):
    resp = upload_chapter(client, 999, "1")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Work not found"


def test_duplicate_chapter_number_is_a_conflict(client, db, settings):
    work = upload_work(client).json()

    resp = upload_chapter(client, work["obra_id"], "1.0")

    assert resp.status_code == 409
    assert db.query(Chapter).count() == 1
    assert db.query(Page).count() == 3
    assert os.listdir(settings.staging_dir) == []


def test_failed_extraction_leaves_no_chapter(client, db, settings):
    work = upload_work(client).json()

    resp = upload_chapter(client, work["obra_id"], "2", pages={"cover.txt": b"x"})

    assert resp.status_code == 500
    assert db.query(Chapter).count() == 1
    assert not os.path.exists(os.path.join(settings.uploads_dir, "solo-leveling", "cap-2"))


def test_pages_distinguish_missing_chapter_from_empty_chapter(client, db):
    work = upload_work(client).json()
    empty = Chapter(obra_id=work["obra_id"], numero_capitulo=99)
    db.add(empty)
    db.commit()

    missing = client.get("/chapters/12345/pages")
    no_pages = client.get(f"/chapters/{empty.id}/pages")

    assert missing.status_code == 404
    assert missing.json()["detail"] == "Chapter not found"
    assert no_pages.status_code == 404
    assert no_pages.json()["detail"] == "No pages found for chapter"


def test_navigation_orders_by_numeric_chapter_number(client):
    work = upload_work(client, numero_capitulo="2").json()
    ten = upload_chapter(client, work["obra_id"], "10").json()
    one_and_half = upload_chapter(client, work["obra_id"], "1.5").json()

    first = client.get(f"/chapters/{one_and_half['capitulo_id']}/navigation").json()
    middle = client.get(f"/chapters/{work['capitulo_id']}/navigation").json()
    last = client.get(f"/chapters/{ten['capitulo_id']}/navigation").json()

    assert first["previous"] is None
    assert first["next"] == {"id": work["capitulo_id"], "numero_capitulo": 2.0}
    assert middle["previous"]["id"] == one_and_half["capitulo_id"]
    assert middle["next"]["id"] == ten["capitulo_id"]
    assert last["next"] is None
    assert last["workSlug"] == "solo-leveling"


def test_navigation_for_single_chapter(client):
    work = upload_work(client).json()
    nav = client.get(f"/chapters/{work['capitulo_id']}/navigation").json()
    assert nav == {"previous": None, "next": None, "workSlug": "solo-leveling"}


def test_navigation_missing_chapter(client):
    assert client.get("/chapters/404/navigation").status_code == 404


def test_delete_chapter_removes_pages_and_files(client, db, settings):
    work = upload_work(client).json()
    second = upload_chapter(client, work["obra_id"], "2").json()

    resp = client.delete(f"/chapters/{second['capitulo_id']}")

    assert resp.status_code == 200
    assert db.query(Page).filter(Page.capitulo_id == second["capitulo_id"]).count() == 0
    assert not os.path.exists(os.path.join(settings.uploads_dir, "solo-leveling", "cap-2"))
    assert os.path.exists(os.path.join(settings.uploads_dir, "solo-leveling", "cap-1", "1.png"))
    assert client.delete(f"/chapters/{second['capitulo_id']}").status_code == 404


def test_add_chapter_rejects_non_numeric_work_id(client, db):
    upload_work(client)

    for obra_id in ("abc", "1.5", "0", "99999999999999999999"):
        resp = upload_chapter(client, obra_id, "2")
        assert resp.status_code == 400, obra_id
    assert db.query(Chapter).count() == 1


def test_add_chapter_replaces_leftover_chapter_directory(client, db, settings):
    work = upload_work(client).json()
    leftover_dir = os.path.join(settings.uploads_dir, "solo-leveling", "cap-2")
    os.makedirs(leftover_dir)
    with open(os.path.join(leftover_dir, "7.jpg"), "wb") as f:
        f.write(b"stale")

    resp = upload_chapter(client, work["obra_id"], "2")

    assert resp.status_code == 201
    assert sorted(os.listdir(leftover_dir)) == ["1.png", "2.jpg", "3.jpg"]
    assert client.get("/uploads/solo-leveling/cap-2/7.jpg").status_code == 404
    assert db.query(Page).filter(Page.capitulo_id == resp.json()["capitulo_id"]).count() == 3


def test_corrupt_page_midway_rolls_back_chapter(client, db, settings):
    work = upload_work(client).json()

    resp = upload_chapter(client, work["obra_id"], "2", archive=corrupt_zip())

    assert resp.status_code == 500
    detail = resp.json()["detail"]
    assert detail["failed_entry"] == "2.jpg"
    assert detail["written_pages"] == [1]
    assert db.query(Chapter).count() == 1
    assert db.query(Page).count() == 3
    assert not os.path.exists(os.path.join(settings.uploads_dir, "solo-leveling", "cap-2"))
    assert os.listdir(settings.staging_dir) == []
