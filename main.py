import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from config import get_settings
from database import JsonStore, StoreError
from pages import SAMPLE_TENANTS, render_landing, render_not_found, render_shop
from repository import NotFoundError, ShopError, ShopRepository
from schemas import ShopCreate
from tenancy import resolve_tenant

# -----------------------------
# Logging
# -----------------------------

logging.basicConfig(
    level=getattr(logging, get_settings().log_level, logging.INFO),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
log = logging.getLogger("storefront")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    store = JsonStore(settings.db_path)
    try:
        store.init()
    except StoreError:
        log.exception("Failed to initialize store at %s", settings.db_path)
        raise

    repo = ShopRepository(store, settings)
    if settings.reconcile_on_startup:
        repo.reconcile()

    app.state.settings = settings
    app.state.store = store
    app.state.repo = repo

    log.info("🚀 AivenaPilot Multi-Tenant Server")
    log.info("📡 Server running on http://localhost:%s", settings.port)
    log.info("🛍️  Test shops:")
    for tenant in SAMPLE_TENANTS:
        log.info("   • http://%s.localhost:%s", tenant, settings.port)
    log.info("⚙️  API endpoint: http://localhost:%s/api/shops", settings.port)
    yield


app = FastAPI(title="Multi-Tenant Storefront API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)


def _repo(request: Request) -> ShopRepository:
    return request.app.state.repo


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        where = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{where}: {first.get('msg')}" if where else str(first.get("msg"))
    else:
        message = "Invalid request body"
    return _error(400, message)


# -----------------------------
# Dashboard API: Shops
# -----------------------------

@app.get("/api/shops")
def list_shops(request: Request):
    try:
        shops, stats = _repo(request).list_shops()
    except Exception as e:
        log.exception("Listing shops failed")
        return _error(500, str(e))
    return {"success": True, "shops": shops, "stats": stats}


@app.post("/api/shops")
def create_shop(request: Request, payload: ShopCreate):
    try:
        shop, url = _repo(request).create(
            payload.name,
            payload.slug,
            template=payload.template,
            config=payload.config,
            products=payload.products,
        )
    except ShopError as e:
        return _error(e.status_code, e.message)
    except Exception as e:
        log.exception("Creating shop failed")
        return _error(500, str(e))
    return {"success": True, "shop": shop, "url": url}


@app.put("/api/shops/{slug}")
def update_shop(request: Request, slug: str, updates: Dict[str, Any] = Body(...)):
    try:
        shop = _repo(request).update(slug, updates)
    except ShopError as e:
        return _error(e.status_code, e.message)
    except Exception as e:
        log.exception("Updating shop %s failed", slug)
        return _error(500, str(e))
    return {"success": True, "shop": shop}


@app.delete("/api/shops/{slug}")
def delete_shop(request: Request, slug: str):
    try:
        shop = _repo(request).delete(slug)
    except ShopError as e:
        return _error(e.status_code, e.message)
    except Exception as e:
        log.exception("Deleting shop %s failed", slug)
        return _error(500, str(e))
    return {"success": True, "shop": shop}


@app.post("/api/stats/reconcile")
def reconcile_stats(request: Request):
    try:
        stats = _repo(request).reconcile()
    except Exception as e:
        log.exception("Reconciling stats failed")
        return _error(500, str(e))
    return {"success": True, "stats": stats}


# -----------------------------
# Platform
# -----------------------------

@app.get("/health")
def health(request: Request):
    settings = request.app.state.settings
    if resolve_tenant(request.headers.get("host"), settings.platform_name) is not None:
        # /health is a platform path; on a tenant host it is a storefront page
        return storefront(request, "health")

    store: JsonStore = request.app.state.store
    response = {
        "backend": "✅ Running",
        "store": "❌ Not Available",
        "store_path": str(store.path),
        "shops": None,
    }
    try:
        if store.exists():
            doc = store.load()
            response["store"] = "✅ Available"
            response["shops"] = len(doc["shops"])
        else:
            response["store"] = "⚠️ Missing"
    except StoreError as e:
        response["store"] = f"❌ Error: {str(e)[:50]}"
    return response


# -----------------------------
# Storefronts (catch-all, keep last)
# -----------------------------

@app.api_route("/{full_path:path}", methods=["GET", "HEAD"], response_class=HTMLResponse)
def storefront(request: Request, full_path: str):
    settings = request.app.state.settings
    try:
        slug = resolve_tenant(request.headers.get("host"), settings.platform_name)
        if slug is None:
            return HTMLResponse(render_landing(settings.port))

        repo = _repo(request)
        try:
            shop = repo.record_visit(slug)
        except NotFoundError:
            return HTMLResponse(render_not_found(slug, settings.dashboard_url), status_code=404)
        return HTMLResponse(render_shop(shop))
    except Exception:
        log.exception("Error serving shop")
        return PlainTextResponse("Internal Server Error", status_code=500)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
