"""
Shop repository

All reads and writes of shop records go through ShopRepository. It only
relies on the load/save/transaction contract of the store, so the JSON file
can be swapped for another backend without touching the routes or pages.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Tuple

import pydantic

from config import Settings
from database import DocumentStore, now_iso
from schemas import (
    DEFAULT_FONT_FAMILY,
    DEFAULT_LAYOUT,
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_SECONDARY_COLOR,
    DEFAULT_TEMPLATE,
    Product,
    Seo,
    Shop,
    ShopConfig,
    ShopRecord,
    ShopStats,
    Theme,
)

log = logging.getLogger(__name__)


class ShopError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ShopError):
    status_code = 400


class ConflictError(ShopError):
    status_code = 409


class NotFoundError(ShopError):
    status_code = 404


def _section(config: Optional[Dict[str, Any]], key: str) -> Dict[str, Any]:
    if not isinstance(config, dict):
        return {}
    value = config.get(key)
    return value if isinstance(value, dict) else {}


def build_config(name: str, config: Optional[Dict[str, Any]]) -> ShopConfig:
    """Fill in theme and SEO defaults. Empty values count as absent."""
    theme = _section(config, "theme")
    seo = _section(config, "seo")
    return ShopConfig(
        theme=Theme(
            primary_color=theme.get("primaryColor") or DEFAULT_PRIMARY_COLOR,
            secondary_color=theme.get("secondaryColor") or DEFAULT_SECONDARY_COLOR,
            font_family=theme.get("fontFamily") or DEFAULT_FONT_FAMILY,
            layout=theme.get("layout") or DEFAULT_LAYOUT,
        ),
        seo=Seo(
            title=seo.get("title") or f"{name} - Shop",
            description=seo.get("description") or f"Discover the products of {name}",
            keywords=seo.get("keywords") or name,
        ),
    )


def _describe(exc: pydantic.ValidationError) -> str:
    first = exc.errors()[0]
    where = ".".join(str(part) for part in first.get("loc", ()))
    return f"{where}: {first.get('msg')}" if where else str(first.get("msg"))


def _views(shop: Dict[str, Any]) -> Optional[int]:
    stats = shop.get("stats") if isinstance(shop, dict) else None
    if stats is None:
        return 0
    views = stats.get("views", 0) if isinstance(stats, dict) else None
    if isinstance(views, int) and not isinstance(views, bool):
        return views
    return None


def _new_id(shops: Dict[str, Any]) -> str:
    taken = {shop.get("id") for shop in shops.values()}
    stamp = int(time.time() * 1000)
    while str(stamp) in taken:
        stamp += 1
    return str(stamp)


class ShopRepository:
    def __init__(self, store: DocumentStore, settings: Settings):
        self.store = store
        self.settings = settings

    # -----------------------------
    # Reads
    # -----------------------------

    def list_shops(self) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        doc = self.store.load()
        return list(doc["shops"].values()), doc["stats"]

    def get(self, slug: str) -> Optional[Dict[str, Any]]:
        return self.store.load()["shops"].get(slug)

    # -----------------------------
    # Writes
    # -----------------------------

    def create(
        self,
        name: Optional[str],
        slug: Optional[str],
        template: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
        products: Optional[List[Any]] = None,
    ) -> Tuple[Dict[str, Any], str]:
        if not name or not slug:
            raise ValidationError("Name and slug required")

        items = [
            p if isinstance(p, Product) else Product.model_validate(p)
            for p in (products or [])
        ]

        with self.store.transaction() as doc:
            if slug in doc["shops"]:
                raise ConflictError("Shop already exists")

            now = now_iso()
            shop = Shop(
                id=_new_id(doc["shops"]),
                name=name,
                slug=slug,
                template=template or DEFAULT_TEMPLATE,
                config=build_config(name, config),
                products=items,
                stats=ShopStats(views=0, created_at=now, last_visit=None),
            ).model_dump(by_alias=True)

            doc["shops"][slug] = shop
            doc["stats"]["totalShops"] = doc["stats"].get("totalShops", 0) + 1
            doc["stats"]["lastUpdate"] = now

        log.info("Created shop %s (id=%s)", slug, shop["id"])
        return shop, self.settings.shop_url(slug)

    def update(self, slug: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow merge: each given top-level key replaces the stored one."""
        if "slug" in fields and fields["slug"] != slug:
            raise ValidationError("Slug cannot be changed")

        with self.store.transaction() as doc:
            current = doc["shops"].get(slug)
            if current is None:
                raise NotFoundError("Shop not found")
            merged = {**current, **fields}
            try:
                record = ShopRecord.model_validate(merged)
            except pydantic.ValidationError as e:
                raise ValidationError(_describe(e)) from e
            merged = record.model_dump(by_alias=True, exclude_unset=True)
            doc["shops"][slug] = merged
            doc["stats"]["lastUpdate"] = now_iso()

        log.info("Updated shop %s (%s)", slug, ", ".join(sorted(fields)) or "no fields")
        return merged

    def delete(self, slug: str) -> Dict[str, Any]:
        with self.store.transaction() as doc:
            shop = doc["shops"].pop(slug, None)
            if shop is None:
                raise NotFoundError("Shop not found")
            stats = doc["stats"]
            views = _views(shop) or 0
            stats["totalShops"] = max(stats.get("totalShops", 0) - 1, 0)
            stats["totalViews"] = max(stats.get("totalViews", 0) - views, 0)
            stats["lastUpdate"] = now_iso()

        log.info("Deleted shop %s", slug)
        return shop

    def record_visit(self, slug: str) -> Dict[str, Any]:
        with self.store.transaction() as doc:
            shop = doc["shops"].get(slug)
            if shop is None:
                raise NotFoundError("Shop not found")
            views = _views(shop)
            if views is None:
                log.warning("Shop %s has a non-integer view count; restarting it at 0", slug)
            if not isinstance(shop.get("stats"), dict):
                shop["stats"] = {"views": 0, "createdAt": None, "lastVisit": None}
            shop_stats = shop["stats"]
            shop_stats["views"] = (views or 0) + 1
            shop_stats["lastVisit"] = now_iso()
            doc["stats"]["totalViews"] = doc["stats"].get("totalViews", 0) + 1
        return shop

    def reconcile(self) -> Dict[str, Any]:
        """Recompute the aggregate counters from the shops mapping."""
        with self.store.transaction() as doc:
            stats = doc["stats"]
            total_shops = len(doc["shops"])
            total_views = 0
            for slug, shop in doc["shops"].items():
                views = _views(shop)
                if views is None:
                    log.warning("Shop %s has a non-integer view count; left out of totalViews", slug)
                    continue
                total_views += views
            if stats.get("totalShops") != total_shops or stats.get("totalViews") != total_views:
                log.warning(
                    "Store counters drifted (shops %s -> %s, views %s -> %s); correcting",
                    stats.get("totalShops"), total_shops, stats.get("totalViews"), total_views,
                )
                stats["totalShops"] = total_shops
                stats["totalViews"] = total_views
                stats["lastUpdate"] = now_iso()
        return stats
