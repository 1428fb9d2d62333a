from datetime import datetime, timedelta, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from gotid_cloud.models import Base
from gotid_cloud.models.ai_event import AiEvent
from gotid_cloud.models.anpr_event import AnprEvent
from gotid_cloud.models.scan_event import ScanEventRecord
from gotid_cloud.models.vehicle import Vehicle
from gotid_cloud.services.correlation import (
    latest_ai_near,
    latest_anpr_near,
    previous_counter,
    to_ai_observation,
    to_anpr_observation,
)
from gotid_cloud.services.registry import SqlRegistry

ANCHOR = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def _make_session():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    return SessionLocal()


def _anpr(db, plate="BT55WMO", offset=0.0, confidence=0.9, raw_json=None) -> AnprEvent:
    row = AnprEvent(plate=plate, ts=ANCHOR + timedelta(seconds=offset), camera_id="CAM", confidence=confidence, raw_json=raw_json)
    db.add(row)
    db.commit()
    return row


def test_registry_lookup_by_plate_and_key():
    db = _make_session()
    db.add(Vehicle(plate="BT55WMO", make="AUDI", public_key="04ABCD", has_gotid=None, status="ACTIVE"))
    db.commit()
    registry = SqlRegistry(db)

    by_plate = registry.find_by_plate("BT55WMO")
    assert by_plate.make == "AUDI"
    assert by_plate.has_gotid is None
    assert by_plate.meta["id"]
    assert registry.find_by_public_key("04ABCD").plate == "BT55WMO"
    assert registry.find_by_public_key("ABCD") is None
    assert registry.find_by_plate("") is None
    assert registry.find_by_plate("ZZ99ZZZ") is None


def test_anpr_join_uses_strict_window_and_latest_event():
    db = _make_session()
    _anpr(db, offset=-10)
    _anpr(db, offset=10)
    assert latest_anpr_near(db, "BT55WMO", ANCHOR, 10) is None

    early = _anpr(db, offset=-6)
    late = _anpr(db, offset=4)
    _anpr(db, plate="OTHER1", offset=1)
    found = latest_anpr_near(db, "BT55WMO", ANCHOR, 10)
    assert found.id == late.id
    assert found.id != early.id


def test_join_needs_a_plate():
    db = _make_session()
    _anpr(db, offset=0)
    assert latest_anpr_near(db, "", ANCHOR, 10) is None
    assert latest_anpr_near(db, None, ANCHOR, 10) is None


def test_anpr_confidence_falls_back_to_raw_payload():
    db = _make_session()
    row = _anpr(db, confidence=None, raw_json={"confidence": 0.72})
    obs = to_anpr_observation(row)
    assert obs.confidence == 0.72
    assert obs.event_id == row.id
    assert obs.ts.tzinfo is not None


def test_ai_join_and_confidence():
    db = _make_session()
    row = AiEvent(plate="BT55WMO", ts=ANCHOR - timedelta(seconds=2), vehicle_conf=None, make="AUDI", raw_json={"confidence": 0.91})
    db.add(row)
    db.add(AiEvent(plate="BT55WMO", ts=ANCHOR - timedelta(seconds=30), vehicle_conf=0.99))
    db.commit()

    found = latest_ai_near(db, "BT55WMO", ANCHOR, 10)
    assert found.id == row.id
    obs = to_ai_observation(found)
    assert obs.confidence == 0.91
    assert obs.make == "AUDI"


def test_previous_counter_excludes_current_scan():
    db = _make_session()
    first = ScanEventRecord(created_at=ANCHOR - timedelta(seconds=60), uuid="TAG-1", counter=7)
    other = ScanEventRecord(created_at=ANCHOR - timedelta(seconds=30), uuid="TAG-2", counter=99)
    current = ScanEventRecord(created_at=ANCHOR, uuid="TAG-1", counter=8)
    db.add_all([first, other, current])
    db.commit()

    assert previous_counter(db, "TAG-1", exclude_scan_id=current.id) == 7
    assert previous_counter(db, "TAG-1") == 8
    assert previous_counter(db, None, exclude_scan_id=current.id) is None
    assert previous_counter(db, "TAG-3") is None
