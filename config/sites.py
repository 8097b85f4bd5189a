"""
config/sites.py
───────────────
Seed fleet registry: the renewable sites registered on first start.

Sites are written to the store only when the site table is empty, so
edits here do not touch an existing database.
"""
from datetime import date

from src.data.models import Site, SiteStatus, SiteType

# ── Fleet ─────────────────────────────────────────────────────────────────────
SEED_SITES: list[Site] = [
    Site(
        site_id="SOL-AZ-01",
        name="Sonoran Ridge Solar",
        location="Maricopa County, AZ",
        site_type=SiteType.SOLAR,
        capacity_mw=120.0,
        inverter_count=48,
        commissioned_date=date(2019, 4, 12),
        last_maintenance_date=date(2024, 3, 2),
        health_score=94.0,
    ),
    Site(
        site_id="SOL-NV-02",
        name="Dry Lake Solar Array",
        location="Clark County, NV",
        site_type=SiteType.SOLAR,
        capacity_mw=85.0,
        inverter_count=34,
        commissioned_date=date(2020, 9, 30),
        last_maintenance_date=date(2024, 1, 18),
        health_score=88.0,
    ),
    Site(
        site_id="WND-TX-01",
        name="Panhandle Wind Farm",
        location="Carson County, TX",
        site_type=SiteType.WIND,
        capacity_mw=200.0,
        inverter_count=66,
        commissioned_date=date(2017, 6, 5),
        last_maintenance_date=date(2023, 11, 21),
        health_score=76.0,
        status=SiteStatus.DEGRADED,
    ),
    Site(
        site_id="WND-WY-02",
        name="Medicine Bow Wind",
        location="Carbon County, WY",
        site_type=SiteType.WIND,
        capacity_mw=150.0,
        inverter_count=50,
        commissioned_date=date(2018, 10, 14),
        last_maintenance_date=date(2024, 2, 7),
        health_score=91.0,
    ),
    Site(
        site_id="HYB-CA-01",
        name="Mojave Hybrid Plant",
        location="Kern County, CA",
        site_type=SiteType.HYBRID,
        capacity_mw=175.0,
        inverter_count=60,
        commissioned_date=date(2021, 3, 22),
        last_maintenance_date=date(2024, 4, 9),
        health_score=97.0,
    ),
]
