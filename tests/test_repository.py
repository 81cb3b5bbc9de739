import threading

import pytest

from config import Settings
from repository import ConflictError, NotFoundError, ShopRepository, ValidationError


def test_create_applies_defaults(repo):
    shop, url = repo.create("Nike", "nike")

    assert shop["slug"] == "nike"
    assert shop["id"]
    assert shop["template"] == "ecommerce"
    assert shop["config"]["theme"] == {
        "primaryColor": "#3B82F6",
        "secondaryColor": "#F3F4F6",
        "fontFamily": "Inter",
        "layout": "modern",
    }
    assert shop["config"]["seo"] == {
        "title": "Nike - Shop",
        "description": "Discover the products of Nike",
        "keywords": "Nike",
    }
    assert shop["products"] == []
    assert shop["stats"]["views"] == 0
    assert shop["stats"]["createdAt"]
    assert shop["stats"]["lastVisit"] is None
    assert url == "http://nike.localhost:3012"


def test_create_then_list(repo):
    repo.create("Nike", "nike")

    shops, stats = repo.list_shops()

    assert [s["slug"] for s in shops] == ["nike"]
    assert shops[0]["stats"]["views"] == 0
    assert stats["totalShops"] == 1


def test_create_keeps_partial_theme_and_product_order(repo):
    shop, _ = repo.create(
        "Adidas",
        "adidas",
        template="fashion",
        config={"theme": {"primaryColor": "#000000"}, "seo": {"title": "Adidas Store"}},
        products=[
            {"name": "B", "price": 2},
            {"name": "A", "price": 1.5, "imageUrl": "https://img/a.png", "sku": "A-1"},
        ],
    )

    assert shop["template"] == "fashion"
    assert shop["config"]["theme"]["primaryColor"] == "#000000"
    assert shop["config"]["theme"]["secondaryColor"] == "#F3F4F6"
    assert shop["config"]["seo"]["title"] == "Adidas Store"
    assert shop["config"]["seo"]["keywords"] == "Adidas"
    assert [p["name"] for p in shop["products"]] == ["B", "A"]
    assert shop["products"][1]["imageUrl"] == "https://img/a.png"
    assert shop["products"][1]["sku"] == "A-1"


def test_production_url(store, tmp_path):
    settings = Settings(data_dir=tmp_path, env="production", platform_domain="aivenapilot.com")
    _, url = ShopRepository(store, settings).create("Nike", "nike")
    assert url == "https://nike.aivenapilot.com"


@pytest.mark.parametrize("name,slug", [("", "nike"), ("Nike", ""), (None, "nike"), ("Nike", None)])
def test_create_requires_name_and_slug(repo, store, name, slug):
    before = store.load()
    with pytest.raises(ValidationError):
        repo.create(name, slug)
    assert store.load() == before


def test_create_duplicate_slug_conflicts(repo, store):
    repo.create("Nike", "nike")
    before = store.load()

    with pytest.raises(ConflictError):
        repo.create("Other Nike", "nike")

    assert store.load() == before


def test_ids_are_unique(repo):
    ids = {repo.create(f"Shop {i}", f"shop{i}")[0]["id"] for i in range(5)}
    assert len(ids) == 5


def test_update_replaces_top_level_keys(repo):
    repo.create("Nike", "nike", config={"theme": {"primaryColor": "#111111"}})

    shop = repo.update("nike", {"config": {"theme": {"layout": "classic"}}, "name": "Nike Store"})

    assert shop["name"] == "Nike Store"
    assert shop["config"] == {"theme": {"layout": "classic"}}
    assert repo.get("nike")["config"] == {"theme": {"layout": "classic"}}


def test_update_unknown_slug(repo):
    with pytest.raises(NotFoundError):
        repo.update("ghost", {"name": "x"})


def test_update_cannot_move_slug(repo):
    repo.create("Nike", "nike")
    with pytest.raises(ValidationError):
        repo.update("nike", {"slug": "adidas"})
    assert repo.update("nike", {"slug": "nike"})["slug"] == "nike"


def test_update_touches_last_update(repo, store):
    repo.create("Nike", "nike")
    stamp = store.load()["stats"]["lastUpdate"]
    repo.update("nike", {"template": "blog"})
    assert store.load()["stats"]["lastUpdate"] >= stamp


def test_record_visit(repo, store):
    created, _ = repo.create("Nike", "nike")

    shop = repo.record_visit("nike")

    assert shop["stats"]["views"] == 1
    assert shop["stats"]["lastVisit"] >= created["stats"]["createdAt"]
    assert store.load()["stats"]["totalViews"] == 1
    assert store.load()["shops"]["nike"]["stats"]["views"] == 1


def test_record_visit_unknown_slug_changes_nothing(repo, store):
    repo.create("Nike", "nike")
    before = store.load()

    with pytest.raises(NotFoundError):
        repo.record_visit("ghost")

    assert store.load() == before


def test_delete(repo, store):
    repo.create("Nike", "nike")
    repo.create("Adidas", "adidas")
    repo.record_visit("nike")
    repo.record_visit("nike")
    repo.record_visit("adidas")

    removed = repo.delete("nike")

    assert removed["slug"] == "nike"
    doc = store.load()
    assert list(doc["shops"]) == ["adidas"]
    assert doc["stats"]["totalShops"] == 1
    assert doc["stats"]["totalViews"] == 1


def test_delete_unknown_slug(repo):
    with pytest.raises(NotFoundError):
        repo.delete("ghost")


def test_reconcile_repairs_drift(repo, store):
    repo.create("Nike", "nike")
    repo.record_visit("nike")
    with store.transaction() as doc:
        doc["stats"]["totalShops"] = 9
        doc["stats"]["totalViews"] = 0

    stats = repo.reconcile()

    assert stats["totalShops"] == 1
    assert stats["totalViews"] == 1
    assert store.load()["stats"]["totalShops"] == 1


def test_concurrent_creates_are_not_lost(repo, store):
    def create(i):
        repo.create(f"Shop {i}", f"shop{i}")

    threads = [threading.Thread(target=create, args=(i,)) for i in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    doc = store.load()
    assert len(doc["shops"]) == 20
    assert doc["stats"]["totalShops"] == 20


@pytest.mark.parametrize("fields", [
    {"stats": {"views": "lots"}},
    {"stats": {"views": -1}},
    {"config": {"theme": "dark"}},
    {"config": {"seo": {"title": ["a"]}}},
    {"products": [{"name": "No price"}]},
    {"name": ""},
])
def test_update_rejects_malformed_values(repo, store, fields):
    repo.create("Nike", "nike")
    before = store.load()

    with pytest.raises(ValidationError):
        repo.update("nike", fields)

    assert store.load() == before


def test_update_stores_validated_values(repo, store):
    repo.create("Nike", "nike")

    shop = repo.update("nike", {"stats": {"views": "10", "createdAt": "2024-01-01T00:00:00.000Z"}})

    assert shop["stats"]["views"] == 10
    assert store.load()["shops"]["nike"]["stats"]["views"] == 10
    assert repo.record_visit("nike")["stats"]["views"] == 11


def test_update_keeps_unknown_keys(repo):
    repo.create("Nike", "nike")
    shop = repo.update("nike", {"config": {"theme": {"layout": "grid", "radius": 4}}, "owner": "ops"})
    assert shop["config"] == {"theme": {"layout": "grid", "radius": 4}}
    assert shop["owner"] == "ops"


def test_reconcile_skips_non_integer_views(repo, store):
    repo.create("Nike", "nike")
    repo.create("Adidas", "adidas")
    repo.record_visit("adidas")
    with store.transaction() as doc:
        doc["shops"]["nike"]["stats"]["views"] = "10"

    stats = repo.reconcile()

    assert stats["totalShops"] == 2
    assert stats["totalViews"] == 1


def test_record_visit_restarts_non_integer_views(repo, store):
    repo.create("Nike", "nike")
    with store.transaction() as doc:
        doc["shops"]["nike"]["stats"]["views"] = "10"

    shop = repo.record_visit("nike")

    assert shop["stats"]["views"] == 1
    assert shop["stats"]["lastVisit"]
