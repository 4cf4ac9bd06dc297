"""Shared pytest fixtures and configuration for the estatesearch test suite.

This file is loaded automatically by pytest before any test module.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import pytest
from pydantic_settings import SettingsConfigDict

from estatesearch.core import configure_logging
from estatesearch.core.settings import Settings


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _configure_test_logging() -> None:
    """Force DEBUG logging in text format for every test."""
    configure_logging(level="DEBUG", fmt="text", force=True)


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove estatesearch env vars and disable ``.env`` loading for a test."""
    for key in list(os.environ):
        if key in {
            "LISTINGS_PATH",
            "SUGGESTION_LIMIT",
            "PRICE_BUFFER_RATIO",
            "LOG_LEVEL",
            "LOG_FORMAT",
        }:
            monkeypatch.delenv(key, raising=False)

    monkeypatch.setattr(
        Settings,
        "model_config",
        SettingsConfigDict(
            env_file=None,
            env_file_encoding="utf-8",
            extra="ignore",
        ),
    )


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_listings() -> list[dict[str, Any]]:
    """A small mixed-schema collection (canonical and legacy fields)."""
    return [
        {
            "id": "a",
            "propertyId": "SPS-TH-01",
            "title": "ทาวน์โฮม ใกล้นิคมอุตสาหกรรม",
            "description": "ผ่อนตรงกับเจ้าของ ไม่ต้องกู้ธนาคาร",
            "type": "SPS-TH-2CLASS-ID",
            "tags": ["ผ่อนตรง"],
            "location": {"province": "ชลบุรี", "district": "ศรีราชา", "subDistrict": "บ่อวิน"},
            "price": 1_800_000,
            "bedrooms": 3,
            "bathrooms": 2,
            "area": 120,
            "listingType": "sale",
            "propertyCondition": "มือ 2",
            "availability": "available",
        },
        {
            "id": "b",
            "propertyId": "SPS-CD-02",
            "title": "คอนโด ใจกลางเมือง",
            "description": "ใกล้ BTS",
            "type": "SPS-CD-ID",
            "tags": [],
            "location": {"province": "กรุงเทพมหานคร", "district": "บางรัก"},
            "price": 2_500_000,
            "bedrooms": 1,
            "bathrooms": 1,
            "area": 35,
            "isRental": False,
            "propertySubStatus": "มือ1",
            "status": "ว่าง",
        },
        {
            "id": "c",
            "propertyId": "SPS-S-03",
            "title": "บ้านเดี่ยว มือ 2 ราคาถูก",
            "type": "SPS-S-1CLASS-ID",
            "locationDisplay": "ชลบุรี เมืองชลบุรี",
            "price": "900,000",
            "bedrooms": 2,
            "listingType": "sale",
            "propertyCondition": "มือ2",
            "status": "sold",
        },
        {
            "id": "d",
            "title": "บ้านเช่า ผ่อนตรง",
            "type": "SPS-RP-ID",
            "location": {"province": "ระยอง", "district": "ปลวกแดง"},
            "price": 8_500,
            "isRental": True,
            "directInstallment": True,
            "availability": "reserved",
        },
    ]


@pytest.fixture()
def logger() -> logging.Logger:
    """Return a ``logging.Logger`` scoped to test code."""
    return logging.getLogger("tests")
