async def upload(client, png_bytes, n=2):
    files = [("images", (f"{i}.png", png_bytes, "image/png")) for i in range(n)]
    resp = await client.post("/api/gallery/upload", files=files)
    assert resp.status_code == 201
    return resp.json()["data"]


async def test_bulk_upload_and_list(client, storage, png_bytes):
    items = await upload(client, png_bytes, 3)
    assert len(items) == 3
    listed = (await client.get("/api/gallery")).json()["data"]
    assert {i["id"] for i in listed} == {i["id"] for i in items}
    assert len(storage.stored_keys("gallery")) == 3


async def test_upload_without_files_is_400(client):
    resp = await client.post("/api/gallery/upload", data={"note": "nothing"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "No files uploaded"


async def test_one_bad_file_rejects_the_whole_batch(client, storage, png_bytes):
    files = [
        ("images", ("ok.png", png_bytes, "image/png")),
        ("images", ("bad.pdf", b"%PDF", "application/pdf")),
    ]
    resp = await client.post("/api/gallery/upload", files=files)
    assert resp.status_code == 400
    assert storage.puts == []


async def test_replace_image(client, storage, png_bytes):
    item = (await upload(client, png_bytes, 1))[0]
    resp = await client.put(f"/api/gallery/{item['id']}", files={"image": ("new.png", png_bytes, "image/png")})
    assert resp.status_code == 200
    new_url = resp.json()["data"]["url"]
    assert new_url != item["url"]
    assert storage.stored_keys("gallery") == [storage.key_from_url(new_url)]


async def test_replace_missing_item_is_404(client, storage, png_bytes):
    resp = await client.put("/api/gallery/missing", files={"image": ("new.png", png_bytes, "image/png")})
    assert resp.status_code == 404
    assert storage.puts == []


async def test_delete_one_and_batch(client, storage, png_bytes):
    a, b, c = await upload(client, png_bytes, 3)

    assert (await client.delete(f"/api/gallery/{a['id']}")).status_code == 200

    resp = await client.request("DELETE", "/api/gallery", json={"ids": [b["id"], "missing", c["id"]]})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["deletedCount"] == 2
    assert sorted(data["deletedIds"]) == sorted([b["id"], c["id"]])
    assert storage.stored_keys("gallery") == []


async def test_batch_delete_requires_ids(client):
    resp = await client.request("DELETE", "/api/gallery", json={"ids": []})
    assert resp.status_code == 400
