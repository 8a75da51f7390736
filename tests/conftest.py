"""Shared pytest configuration and fixtures."""

import pytest

from paperlink.models import Document, Relationship


# ---------------------------------------------------------------------------
# Sample collection: genome editing and climate groups plus one stray
# ---------------------------------------------------------------------------

_DOCUMENTS = [
    Document(
        id="crispr_1",
        title="CRISPR base editing in human cells",
        abstract="Base editors enable precise CRISPR genome editing of point mutations "
        "in human cells without double-strand breaks.",
        tags=["crispr", "gene editing"],
        year=2019,
        role="supports",
        citation_count=120,
    ),
    Document(
        id="crispr_2",
        title="Off-target activity of CRISPR base editors",
        abstract="Genome-wide profiling reveals CRISPR base editor off-target editing "
        "in human cells and embryos.",
        tags=["CRISPR", "safety"],
        year=2020,
        role="contradicts",
        citation_count=80,
    ),
    Document(
        id="crispr_3",
        title="Prime editing expands CRISPR genome editing",
        abstract="Prime editors write new genetic information into a target site, "
        "extending CRISPR genome editing beyond base editors.",
        tags=["crispr", "gene editing"],
        year=2021,
        role="method",
        citation_count=200,
    ),
    Document(
        id="climate_1",
        title="Sea level rise projections",
        abstract="Global sea levels are rising due to climate change and thermal "
        "expansion of oceans.",
        tags=["climate", "ocean"],
        year=2023,
        role="background",
    ),
    Document(
        id="climate_2",
        title="Ocean temperature trends",
        abstract="Sea surface temperatures and oceanic heat content have been "
        "increasing over decades of climate change.",
        tags=["climate", "ocean"],
        year=2022,
        role="background",
    ),
    Document(id="stray_1", title="Medieval manuscript illumination", role="other"),
]

_RELATIONSHIPS = [
    Relationship("crispr_1", "crispr_2"),
    Relationship("crispr_3", "crispr_1"),
    Relationship("climate_1", "climate_2"),
]


@pytest.fixture
def sample_documents():
    return list(_DOCUMENTS)


@pytest.fixture
def sample_relationships():
    return list(_RELATIONSHIPS)


@pytest.fixture(autouse=True)
def isolated_config_home(tmp_path, monkeypatch):
    """Keep tests away from a real ~/.paperlink/config.json."""
    home = tmp_path / "paperlink_home"
    monkeypatch.setenv("PAPERLINK_HOME", str(home))
    return home
