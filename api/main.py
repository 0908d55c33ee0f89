import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, quote

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from centerfinder import config
from centerfinder.catalog import CatalogEntry
from centerfinder.logging import setup as setup_logging
from centerfinder.matcher import RegionMatcher, build_matcher

app = FastAPI(title="Service Center Finder API", version="1.0.0")

logger = logging.getLogger("centerfinder.api")
raw_lg = logging.getLogger("request.raw")

EXAMPLE_BODY = '{ "region": "Región Metropolitana de Santiago" }'
EXAMPLE_QUERY = "/nearest?region=Región%20Metropolitana%20de%20Santiago"


def encode_component(s: str) -> str:
    # Same reserved set as JavaScript's encodeURIComponent
    return quote(s, safe="!~*'()")


def get_base_url(request: Request) -> str:
    env_base = config.BASE_URL
    if env_base and env_base.lower().startswith(("http://", "https://")):
        return env_base.rstrip("/")
    proto = request.headers.get("x-forwarded-proto") or request.url.scheme or "http"
    proto = proto.split(",")[0].strip()
    host = request.headers.get("host") or request.url.netloc
    return f"{proto}://{host}"


def build_image_url(request: Request, file_name: Optional[str]) -> Optional[str]:
    if not file_name:
        return None
    return f"{get_base_url(request)}/images/{encode_component(file_name)}"


def center_payload(request: Request, entry: CatalogEntry) -> Dict[str, Any]:
    enc = encode_component(entry.address)
    return {
        "name": entry.name,
        "address": entry.address,
        "products": entry.products,
        "imageUrl": build_image_url(request, entry.image_file),
        "mapLink": f"https://www.google.com/maps/dir/?api=1&destination={enc}",
        "addressLink": f"https://www.google.com/maps/search/?api=1&query={enc}",
        "embedUrl": f"https://maps.google.com/maps?q={enc}&output=embed",
    }


class PayloadTooLarge(Exception):
    pass


def get_matcher(request: Request) -> RegionMatcher:
    return request.app.state.matcher


def valid_region(raw: Any) -> bool:
    return isinstance(raw, str) and raw != ""


def lookup(request: Request, raw_region: str, hint: bool) -> JSONResponse:
    matcher = get_matcher(request)
    m = matcher.match(raw_region)
    if m is None:
        logger.info("no match region=%r", raw_region)
        body: Dict[str, Any] = {"error": f'No service center found for region: "{raw_region}"'}
        if hint:
            body["hint"] = "Revisa acentos/espacios o usa una variante reconocida."
        suggestion = matcher.suggest(raw_region)
        if suggestion:
            body["suggestion"] = suggestion
        body["expectedRegions"] = matcher.region_names()
        return JSONResponse(body, status_code=404)
    logger.info("match region=%r -> %s (%s)", raw_region, m.entry.name, m.strategy)
    return JSONResponse({"centers": [center_payload(request, m.entry)]})


async def read_payload(request: Request) -> Any:
    body = b""
    async for chunk in request.stream():
        body += chunk
        if len(body) > config.BODY_LIMIT:
            raise PayloadTooLarge()
    if not body:
        return None
    ctype = request.headers.get("content-type", "")
    if ctype.startswith("application/x-www-form-urlencoded"):
        form = parse_qs(body.decode("utf-8", errors="replace"))
        return {k: v[0] for k, v in form.items()}
    try:
        return json.loads(body)
    except ValueError:
        return None


@app.middleware("http")
async def limit_body(request: Request, call_next):
    length = request.headers.get("content-length")
    if length and length.isdigit() and int(length) > config.BODY_LIMIT:
        return JSONResponse({"error": "Payload too large"}, status_code=413)
    return await call_next(request)


app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    setup_logging()
    app.state.matcher = matcher = build_matcher()
    logger.info("serving %d regions: %s", len(matcher.entries), ", ".join(matcher.region_names()))


@app.exception_handler(PayloadTooLarge)
async def payload_too_large(request: Request, exc: PayloadTooLarge):
    return JSONResponse({"error": "Payload too large"}, status_code=413)


# --- Health ---

@app.get("/health")
async def health(request: Request):
    matcher = get_matcher(request)
    return {
        "status": "ok",
        "regionsConfigured": len(matcher.entries),
        "regions": matcher.region_names(),
    }


# --- Lookup ---

@app.post("/nearest")
async def nearest_post(request: Request):
    payload = await read_payload(request)
    raw_lg.info(f"POST /nearest body={payload!r}")
    raw_region = payload.get("region") if isinstance(payload, dict) else None
    if not valid_region(raw_region):
        return JSONResponse({
            "error": f"Invalid payload. Send JSON like: {EXAMPLE_BODY}",
            "expectedRegions": get_matcher(request).region_names(),
        }, status_code=422)
    return lookup(request, raw_region, hint=True)


@app.get("/nearest")
async def nearest_get(request: Request, region: Optional[str] = None):
    raw_lg.info(f"GET /nearest query={dict(request.query_params)!r}")
    if not valid_region(region):
        return JSONResponse({
            "error": "Missing ?region=... query parameter",
            "example": EXAMPLE_QUERY,
            "expectedRegions": get_matcher(request).region_names(),
        }, status_code=422)
    return lookup(request, region, hint=False)


# --- Pages & Static ---

@app.get("/map", response_class=HTMLResponse)
async def map_page(address: str = ""):
    enc = encode_component(address)
    return HTMLResponse(
        '<!DOCTYPE html><html><head><meta charset="UTF-8"/>\n'
        "<title>Mapa</title>\n"
        "<style>html,body{margin:0;height:100%}iframe{width:100%;height:100%;border:none}</style>\n"
        "</head><body>\n"
        f'<iframe src="https://maps.google.com/maps?q={enc}&output=embed"></iframe>\n'
        "</body></html>"
    )


app.mount("/images", StaticFiles(directory=config.IMAGES_DIR, check_dir=False), name="images")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
