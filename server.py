"""
HTTP API around the scrape pipeline.

Every scrape request provisions and tears down its own browser session;
the app holds nothing across requests except the startup Settings.

Run:
    booking-scraper-api
    uvicorn server:app --port 3000
"""

from datetime import date, datetime, timezone
from typing import Annotated, Any

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

import config
from config import Settings
from errors import ScraperError
from models import ListingFilters, PropertyTarget, SearchQuery
from postprocess import filter_listings, sort_listings
from scraper import scrape_listings
from utils import get_logger

log = get_logger("server")

VERSION = "1.0.0"

CITY_EXAMPLE = {
    "city": "New York",
    "checkIn": "2025-02-15",
    "checkOut": "2025-02-17",
    "adults": 2,
    "sortBy": "price",
    "order": "asc",
    "filters": {"maxPrice": 200, "minRating": 8.0, "onlyWithDiscount": True},
}
PROPERTY_EXAMPLE = {
    "url": "https://www.booking.com/searchresults.html?ss=New+York",
    "sortBy": "price",
    "order": "asc",
}


# ── Request schemas ───────────────────────────────────────────────────────────

class FiltersBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    min_price: float | None = Field(None, alias="minPrice")
    max_price: float | None = Field(None, alias="maxPrice")
    max_distance: float | None = Field(None, alias="maxDistance")
    min_rating: float | None = Field(None, alias="minRating")
    only_with_discount: bool = Field(False, alias="onlyWithDiscount")

    def to_filters(self) -> ListingFilters:
        return ListingFilters(**self.model_dump())


class ScrapeOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sort_by: str = Field("price", alias="sortBy")
    order: str = "asc"
    filters: FiltersBody | None = None


class CityScrapeRequest(ScrapeOptions):
    city: str | None = None
    check_in: date | None = Field(None, alias="checkIn")
    check_out: date | None = Field(None, alias="checkOut")
    adults: int = 2


class PropertyScrapeRequest(ScrapeOptions):
    url: str | None = None


# ── Dependencies & error handling ─────────────────────────────────────────────

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_settings)]


async def scraper_error_handler(_request: Request, exc: ScraperError) -> JSONResponse:
    log.error("Scrape failed (%s): %s", type(exc).__name__, exc.message)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": exc.message},
    )


def _bad_request(message: str, example: dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message, "example": example})


# ── Routes ────────────────────────────────────────────────────────────────────

router = APIRouter()


async def _scrape(
    target: SearchQuery | PropertyTarget,
    options: ScrapeOptions,
    settings: Settings,
) -> list[dict[str, Any]]:
    try:
        hotels = await scrape_listings(target, settings)
    except ScraperError:
        raise
    except Exception as exc:
        log.exception("Unexpected scrape failure")
        raise ScraperError(str(exc) or type(exc).__name__) from exc
    if options.filters is not None:
        hotels = filter_listings(hotels, options.filters.to_filters())
    hotels = sort_listings(hotels, options.sort_by, options.order)
    return [h.to_dict() for h in hotels]


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/")
async def describe() -> dict[str, Any]:
    return {
        "name": "Booking.com Scraper API",
        "version": VERSION,
        "endpoints": {
            "GET /health": "Health check",
            "POST /api/scrape/city": "Search hotels by city name",
            "POST /api/scrape/property": "Scrape hotels from a Booking.com URL",
        },
        "examples": {
            "searchCity": {
                "endpoint": "/api/scrape/city",
                "method": "POST",
                "body": {**CITY_EXAMPLE, "filters": {**CITY_EXAMPLE["filters"], "maxDistance": 5}},
            },
            "searchByUrl": {
                "endpoint": "/api/scrape/property",
                "method": "POST",
                "body": {
                    "url": "https://www.booking.com/searchresults.html?ss=Paris",
                    "sortBy": "distance",
                    "order": "asc",
                },
            },
        },
    }


@router.post("/api/scrape/city")
async def scrape_city(settings: SettingsDep, body: CityScrapeRequest | None = None):
    if body is None or not (body.city and body.city.strip()):
        return _bad_request("City parameter is required", CITY_EXAMPLE)

    query = SearchQuery(
        city=body.city.strip(),
        check_in=body.check_in,
        check_out=body.check_out,
        adults=body.adults,
    )
    hotels = await _scrape(query, body, settings)
    return {
        "success": True,
        "query": {
            "city": query.city,
            "checkIn": body.check_in.isoformat() if body.check_in else None,
            "checkOut": body.check_out.isoformat() if body.check_out else None,
            "adults": body.adults,
            "sortBy": body.sort_by,
            "order": body.order,
        },
        "count": len(hotels),
        "hotels": hotels,
    }


@router.post("/api/scrape/property")
async def scrape_property(settings: SettingsDep, body: PropertyScrapeRequest | None = None):
    if body is None or not (body.url and body.url.strip()):
        return _bad_request("URL parameter is required", PROPERTY_EXAMPLE)

    hotels = await _scrape(PropertyTarget(url=body.url.strip()), body, settings)
    return {
        "success": True,
        "query": {"url": body.url.strip(), "sortBy": body.sort_by, "order": body.order},
        "count": len(hotels),
        "hotels": hotels,
    }


# ── App factory ───────────────────────────────────────────────────────────────

def create_app(settings: Settings | None = None) -> FastAPI:
    app = FastAPI(title="Booking.com Scraper API", version=VERSION)
    app.state.settings = settings or config.load_settings()
    app.add_exception_handler(ScraperError, scraper_error_handler)
    app.include_router(router)
    return app


app = create_app()


def main() -> None:
    settings = config.load_settings()
    log.info("Booking.com Scraper API on http://%s:%d", settings.host, settings.port)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
