"""Tests for the blob -> SQL migration script."""

import importlib.util
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from utils.conversion_store import ConversionStore, DatabaseConversionStore, MemoryStorage

_SCRIPT = os.path.join(os.path.dirname(os.path.dirname(__file__)), "scripts", "migrate_blob_to_postgres.py")


def _load_script():
    spec = importlib.util.spec_from_file_location("migrate_blob_to_postgres", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_migrate_copies_and_skips_existing(sample_records):
    """Test records are copied once, keeping newest-first order."""
    from core.database import Base
    import models.conversions  # noqa: F401

    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine)

    source = ConversionStore(MemoryStorage([r.to_dict() for r in sample_records]))
    target = DatabaseConversionStore(factory)
    target.append(sample_records[-1])

    migrate = _load_script()
    copied = migrate.migrate_conversions(source, target, factory)

    assert copied == 3
    assert target.list_all() == sample_records
    assert migrate.migrate_conversions(source, target, factory) == 0
