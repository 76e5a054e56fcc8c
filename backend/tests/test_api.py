"""
Tests for API endpoints.
"""

import io

import pandas as pd
import pytest
from fastapi import status

from api.scraper import split_urls
from scrapers.base import ListingRecord, PageResult, PageStatus, ScrapeResult


def result_with(listings=None, pages=None) -> ScrapeResult:
    result = ScrapeResult(listings=listings or [], pages=pages or [])
    return result.finish()


def sample_result() -> ScrapeResult:
    return result_with(
        listings=[
            ListingRecord(title="Toyota Camry 2020", url="https://haraj.com.sa/1", price="55000 SAR"),
            ListingRecord(title="iPhone 15 Pro", url="https://haraj.com.sa/2"),
        ],
        pages=[PageResult(url="https://haraj.com.sa/tags/cars", count=2)],
    )


class TestRootEndpoint:
    """Test the root endpoint."""

    def test_root_returns_json(self, client):
        """Test that root endpoint returns expected JSON."""
        response = client.get("/")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["message"] == "Haraj Scraper API"
        assert "version" in data

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "ok"}


class TestScrapeEndpoints:
    """Test the JSON scrape endpoints."""

    def test_scrape_data(self, client, orchestrator_override):
        fake = orchestrator_override(sample_result())

        response = client.get("/api/scraper/scrape-data", params={"url": "https://haraj.com.sa/tags/cars"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [p["title"] for p in data["publications"]] == ["Toyota Camry 2020", "iPhone 15 Pro"]
        assert data["publications"][1]["phone"] == "undefined"
        assert data["pages"][0]["status"] == "ok"
        assert fake.calls == [('one', "https://haraj.com.sa/tags/cars")]

    def test_scrape_data_requires_url(self, client, orchestrator_override):
        fake = orchestrator_override(sample_result())

        response = client.get("/api/scraper/scrape-data")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert fake.calls == []

    def test_scrape_multi_splits_urls(self, client, orchestrator_override):
        fake = orchestrator_override(sample_result())

        response = client.get("/api/scraper/scrape-multi", params={"urls": " https://a.example , ,https://b.example"})

        assert response.status_code == status.HTTP_200_OK
        assert fake.calls == [('many', ["https://a.example", "https://b.example"])]

    def test_scrape_multi_rejects_blank_list(self, client, orchestrator_override):
        fake = orchestrator_override(sample_result())

        response = client.get("/api/scraper/scrape-multi", params={"urls": " , ,"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert fake.calls == []

    def test_scrape_all(self, client, orchestrator_override):
        fake = orchestrator_override(sample_result())

        response = client.get("/api/scraper/scrape-all", params={"homepageUrl": "https://haraj.com.sa"})

        assert response.status_code == status.HTTP_200_OK
        assert fake.calls == [('all', "https://haraj.com.sa")]

    def test_scrape_all_requires_homepage(self, client, orchestrator_override):
        orchestrator_override(sample_result())

        response = client.get("/api/scraper/scrape-all", params={"homepageUrl": "  "})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_empty_result_is_404(self, client, orchestrator_override):
        orchestrator_override(result_with(pages=[
            PageResult(url="https://haraj.com.sa/tags/none", status=PageStatus.EMPTY),
        ]))

        response = client.get("/api/scraper/scrape-data", params={"url": "https://haraj.com.sa/tags/none"})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_failed_result_is_502_with_page_reports(self, client, orchestrator_override):
        orchestrator_override(result_with(pages=[
            PageResult(url="https://haraj.com.sa/tags/x", status=PageStatus.FAILED, error="RenderTimeout: gone"),
        ]))

        response = client.get("/api/scraper/scrape-data", params={"url": "https://haraj.com.sa/tags/x"})

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        detail = response.json()["detail"]
        assert detail["pages"][0]["status"] == "failed"
        assert detail["pages"][0]["error"] == "RenderTimeout: gone"


class TestExportEndpoints:
    """Test the spreadsheet endpoints."""

    @pytest.mark.parametrize("path,params", [
        ("/api/scraper/export-excel", {"url": "https://haraj.com.sa/tags/cars"}),
        ("/api/scraper/export-excel-multi", {"urls": "https://haraj.com.sa/tags/cars"}),
        ("/api/scraper/export-excel-all", {"homepageUrl": "https://haraj.com.sa"}),
    ])
    def test_export_returns_workbook(self, client, orchestrator_override, path, params):
        orchestrator_override(sample_result())

        response = client.get(path, params=params)

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert 'filename="publications.xlsx"' in response.headers["content-disposition"]
        df = pd.read_excel(io.BytesIO(response.content), sheet_name="Publications")
        assert list(df["Title"]) == ["Toyota Camry 2020", "iPhone 15 Pro"]

    def test_export_requires_urls(self, client, orchestrator_override):
        orchestrator_override(sample_result())

        response = client.get("/api/scraper/export-excel-multi")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_export_empty_is_404(self, client, orchestrator_override):
        orchestrator_override(result_with())

        response = client.get("/api/scraper/export-excel", params={"url": "https://haraj.com.sa/tags/none"})

        assert response.status_code == status.HTTP_404_NOT_FOUND


def test_split_urls():
    assert split_urls("a, b,,c ,") == ["a", "b", "c"]
