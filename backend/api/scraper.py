"""
Scraper Endpoints
Run the extraction pipeline on demand and return JSON or a spreadsheet.
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel

from api.config import settings
from scrapers.base import ScrapeResult
from scrapers.export import export_to_excel
from scrapers.manager import ScrapeOrchestrator

router = APIRouter(prefix="/api/scraper", tags=["Scraper"])

# Get logger for this module (logging is configured in main.py)
logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
EXPORT_FILENAME = "publications.xlsx"
URLS_REQUIRED = "The urls parameter is required (comma-separated)."


# Pydantic models for API responses
class ListingOut(BaseModel):
    title: str
    url: str
    price: str
    location: str
    phone: str
    description: str
    author_name: str

    class Config:
        from_attributes = True


class PageOut(BaseModel):
    url: str
    status: str
    count: int
    error: Optional[str] = None
    listing_errors: List[Dict[str, str]] = []


class ScrapeResponse(BaseModel):
    publications: List[ListingOut]
    pages: List[PageOut]


def get_orchestrator() -> ScrapeOrchestrator:
    """Build an orchestrator from the current settings."""
    return ScrapeOrchestrator(settings.site_config())


def split_urls(urls: str) -> List[str]:
    """Split a comma-separated parameter, trimming and dropping empties."""
    return [u.strip() for u in urls.split(",") if u.strip()]


def _require(value: Optional[str], message: str) -> str:
    if not value or not value.strip():
        raise HTTPException(status_code=400, detail={"error": message})
    return value.strip()


def _require_urls(urls: Optional[str]) -> List[str]:
    url_list = split_urls(_require(urls, URLS_REQUIRED))
    if not url_list:
        raise HTTPException(status_code=400, detail={"error": URLS_REQUIRED})
    return url_list


def _check_result(result: ScrapeResult):
    """Empty results are errors; tell "nothing found" apart from "scrape failed"."""
    if result.listings:
        return
    if result.has_errors:
        logger.warning(f"Scrape returned no data with {result.errors} failed page(s)")
        raise HTTPException(
            status_code=502,
            detail={"error": "Scraping failed.", "pages": [p.to_dict() for p in result.pages]},
        )
    raise HTTPException(status_code=404, detail={"error": "No data found."})


def _json_response(result: ScrapeResult) -> ScrapeResponse:
    _check_result(result)
    return ScrapeResponse(
        publications=[ListingOut.model_validate(listing) for listing in result.listings],
        pages=[PageOut(**p.to_dict()) for p in result.pages],
    )


def _excel_response(result: ScrapeResult) -> Response:
    _check_result(result)
    return Response(
        content=export_to_excel(result.listings),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@router.get("/scrape-data", response_model=ScrapeResponse)
async def scrape_data(
    url: Optional[str] = Query(None),
    orchestrator: ScrapeOrchestrator = Depends(get_orchestrator),
):
    """Scrape a single listing page."""
    url = _require(url, "The url parameter is required.")
    return _json_response(await orchestrator.collect_one(url))


@router.get("/export-excel")
async def export_excel(
    url: Optional[str] = Query(None),
    orchestrator: ScrapeOrchestrator = Depends(get_orchestrator),
):
    """Scrape a single listing page and download it as a spreadsheet."""
    url = _require(url, "The url parameter is required.")
    return _excel_response(await orchestrator.collect_one(url))


@router.get("/scrape-multi", response_model=ScrapeResponse)
async def scrape_multi(
    urls: Optional[str] = Query(None),
    orchestrator: ScrapeOrchestrator = Depends(get_orchestrator),
):
    """Scrape several section pages given as comma-separated URLs."""
    url_list = _require_urls(urls)
    return _json_response(await orchestrator.collect_many(url_list))


@router.get("/export-excel-multi")
async def export_excel_multi(
    urls: Optional[str] = Query(None),
    orchestrator: ScrapeOrchestrator = Depends(get_orchestrator),
):
    url_list = _require_urls(urls)
    return _excel_response(await orchestrator.collect_many(url_list))


@router.get("/scrape-all", response_model=ScrapeResponse)
async def scrape_all(
    homepageUrl: Optional[str] = Query(None),
    orchestrator: ScrapeOrchestrator = Depends(get_orchestrator),
):
    """Scrape every section linked from the homepage."""
    homepage_url = _require(homepageUrl, "The homepageUrl parameter is required.")
    return _json_response(await orchestrator.collect_all(homepage_url))


@router.get("/export-excel-all")
async def export_excel_all(
    homepageUrl: Optional[str] = Query(None),
    orchestrator: ScrapeOrchestrator = Depends(get_orchestrator),
):
    homepage_url = _require(homepageUrl, "The homepageUrl parameter is required.")
    return _excel_response(await orchestrator.collect_all(homepage_url))
