import json
import logging
from datetime import timedelta

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import sessionmaker

from gotid_cloud.models import Base, utc_now
from gotid_cloud.models.ai_event import AiEvent
from gotid_cloud.models.anpr_event import AnprEvent
from gotid_cloud.models.fusion_event import FusionEvent
from gotid_cloud.models.scan_event import ScanEventRecord
from gotid_cloud.models.vehicle import Vehicle
from gotid_cloud.services.errors import IngestRejected
from gotid_cloud.services.scan_ingest import ingest_scan, sanitize_scan

KEY = "04" + "AB" * 32


def _make_session():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    return SessionLocal()


def _enroll(db, plate="BT55WMO", public_key=KEY, has_gotid=True, status="ACTIVE"):
    db.add(Vehicle(plate=plate, make="AUDI", model="A3", colour="BLUE", public_key=public_key, has_gotid=has_gotid, status=status))
    db.commit()


def _ingest(db, body, **kwargs):
    kwargs.setdefault("window_sec", 10)
    kwargs.setdefault("dedup_sec", 0)
    kwargs.setdefault("max_raw_json_bytes", 8192)
    return ingest_scan(db, body, **kwargs)


def test_sanitize_clamps_and_parses_leniently():
    clean = sanitize_scan(
        {
            "plate": " bt55 wmo ",
            "counter": "-3",
            "sig_valid": "no",
            "chal_valid": 1,
            "tamper_flag": "YES",
            "pubkey_match": "maybe",
            "rssi": -500,
            "est_distance_m": "9999",
            "gps_lat": 91,
            "gps_lon": "nope",
            "scanner_id": "S" * 100,
            "pubkey_hex": "ab cd",
        },
        max_raw_json_bytes=8192,
    )
    assert clean.plate == "BT55WMO"
    assert clean.counter == 0
    assert clean.sig_valid is False
    assert clean.chal_valid is True
    assert clean.tamper is True
    assert clean.pubkey_match is None
    assert clean.rssi == -120
    assert clean.est_distance_m == 5000
    assert clean.gps_lat == 90
    assert clean.gps_lon is None
    assert len(clean.scanner_id) == 64
    assert clean.pubkey_hex == "ABCD"
    assert clean.result == "UNKNOWN"


def test_sanitize_defaults_and_counter_ceiling():
    clean = sanitize_scan({"counter": 5_000_000_000, "pubkey_hex": KEY}, max_raw_json_bytes=8192)
    assert clean.counter == 2_000_000_000
    assert clean.sig_valid is True
    assert clean.chal_valid is True
    assert clean.tamper is False
    assert clean.rssi is None
    assert clean.uuid is None


def test_without_pubkey_crypto_is_not_claimed():
    clean = sanitize_scan({"sig_valid": True, "chal_valid": True}, max_raw_json_bytes=8192)
    assert clean.has_identity is False
    assert clean.sig_valid is False
    assert clean.chal_valid is False


def test_pubkey_from_raw_json_wins_over_top_level():
    clean = sanitize_scan({"raw_json": {"pubkey_hex": "0a0b"}, "pubkey_hex": "ffff"}, max_raw_json_bytes=8192)
    assert clean.pubkey_hex == "0A0B"


def test_rejects_oversized_raw_json_and_non_hex_key():
    with pytest.raises(IngestRejected) as exc:
        sanitize_scan({"raw_json": {"blob": "x" * 200}}, max_raw_json_bytes=100)
    assert exc.value.status_code == 413

    with pytest.raises(IngestRejected) as exc:
        sanitize_scan({"pubkey_hex": "04ZZ"}, max_raw_json_bytes=8192)
    assert exc.value.status_code == 400
    assert exc.value.error == "pubkey_hex malformed (non-hex)"


def test_authentic_scan_with_cameras_is_strong_match(caplog):
    db = _make_session()
    _enroll(db)
    now = utc_now()
    anpr = AnprEvent(plate="BT55WMO", ts=now - timedelta(seconds=2), confidence=0.95)
    ai = AiEvent(plate="BT55WMO", ts=now - timedelta(seconds=1), vehicle_conf=0.95, make="Audi", colour="Blue")
    db.add_all([anpr, ai])
    db.commit()
    caplog.set_level(logging.INFO, logger="scan_ingest")

    outcome = _ingest(db, {"plate": "bt55 wmo", "uuid": "TAG-1", "counter": 5, "pubkey_hex": KEY, "pubkey_match": True})
    resp = outcome.to_response()

    assert resp["ok"] is True
    assert resp["cloud_verdict"] == "AUTHENTIC"
    assert resp["cloud_action"] == "NONE"
    assert resp["fusion_verdict"] == "MATCH"
    assert resp["visual_confidence"] == "STRONG"
    assert resp["final_label"] == "MATCH_STRONG"
    assert resp["anpr_id"] == anpr.id
    assert resp["ai_id"] == ai.id
    assert resp["cloud_vehicle"]["plate"] == "BT55WMO"
    assert resp["deduplicated"] is False

    row = db.get(FusionEvent, resp["fusion_id"])
    assert row.scan_id == resp["id"]
    assert row.anpr_id == anpr.id
    assert row.raw_json["cloud"]["cloud_verdict"] == "AUTHENTIC"
    assert row.raw_json["cloud"]["registry_vehicle"]["public_key"] == KEY
    assert row.raw_json["linked"] == {"scan_id": resp["id"], "anpr_id": anpr.id, "ai_id": ai.id}
    json.dumps(row.raw_json)
    assert any("Scan ingested" in rec.getMessage() for rec in caplog.records)


def test_stale_camera_events_are_not_joined():
    db = _make_session()
    _enroll(db)
    db.add(AnprEvent(plate="BT55WMO", ts=utc_now() - timedelta(seconds=60), confidence=0.99))
    db.commit()
    resp = _ingest(db, {"plate": "BT55WMO", "pubkey_hex": KEY, "pubkey_match": True}).to_response()
    assert resp["anpr_id"] is None
    assert resp["final_label"] == "MATCH_WEAK_VISUAL"


def test_missing_tag_on_enrolled_plate():
    db = _make_session()
    _enroll(db)
    resp = _ingest(db, {"plate": "BT55WMO", "sig_valid": True}).to_response()
    assert resp["cloud_verdict"] == "UUID_MISSING"
    assert resp["cloud_action"] == "INVESTIGATE"
    assert resp["fusion_verdict"] == "UUID_MISSING"
    assert resp["final_label"] == "CLONE_MISSING_TAG_WEAK"

    scan = db.get(ScanEventRecord, resp["id"])
    assert scan.sig_valid is False
    assert scan.chal_valid is False


def test_cloned_plate_with_foreign_key_is_clone_suspect():
    db = _make_session()
    _enroll(db)
    resp = _ingest(db, {"plate": "BT55WMO", "pubkey_hex": "04" + "CD" * 32}).to_response()
    assert resp["cloud_verdict"] == "KEY_MISMATCH"
    assert resp["cloud_action"] == "STOP"
    assert resp["fusion_verdict"] == "MISMATCH"
    assert resp["final_label"] == "CLONE_SUSPECT"


def test_unknown_plate_is_not_enrolled():
    db = _make_session()
    resp = _ingest(db, {"plate": "ZZ99ZZZ"}).to_response()
    assert resp["cloud_verdict"] == "UNREGISTERED_VEHICLE"
    assert resp["fusion_verdict"] == "NOT_ENROLLED"
    assert resp["final_label"] == "NOT_ENROLLED"
    assert resp["cloud_vehicle"] is None


def test_counter_rollback_across_scans():
    db = _make_session()
    _enroll(db)
    body = {"plate": "BT55WMO", "uuid": "TAG-1", "pubkey_hex": KEY, "pubkey_match": True}
    first = _ingest(db, {**body, "counter": 10}).to_response()
    assert first["fusion_verdict"] == "MATCH"

    second = _ingest(db, {**body, "counter": 5}).to_response()
    assert second["fusion_verdict"] == "COUNTER_ROLLBACK"
    assert second["final_label"] == "CLONE_CRYPTO"

    third = _ingest(db, {**body, "counter": 5}).to_response()
    assert third["fusion_verdict"] == "MATCH"
    assert any("did not advance" in reason for reason in third["reasons"])


def test_uuid_missing_dedup_reuses_recent_row():
    db = _make_session()
    _enroll(db)
    first = _ingest(db, {"plate": "BT55WMO"}, dedup_sec=600).to_response()
    second = _ingest(db, {"plate": "BT55WMO"}, dedup_sec=600).to_response()

    assert second["deduplicated"] is True
    assert second["fusion_id"] == first["fusion_id"]
    assert second["id"] != first["id"]
    assert db.query(FusionEvent).count() == 1
    assert db.query(ScanEventRecord).count() == 2


def test_uuid_missing_dedup_locks_registry_row():
    db = _make_session()
    _enroll(db)
    statements = []

    @event.listens_for(db, "do_orm_execute")
    def _capture(state):
        if state.is_select:
            statements.append(str(state.statement.compile(dialect=postgresql.dialect())))

    _ingest(db, {"plate": "BT55WMO"}, dedup_sec=600)
    locks = [sql for sql in statements if "FOR UPDATE" in sql]
    assert len(locks) == 1
    assert "FROM vehicles" in locks[0]

    statements.clear()
    _ingest(db, {"plate": "BT55WMO", "pubkey_hex": KEY, "pubkey_match": True}, dedup_sec=600)
    assert not [sql for sql in statements if "FOR UPDATE" in sql]


def test_dedup_disabled_writes_every_row():
    db = _make_session()
    _enroll(db)
    _ingest(db, {"plate": "BT55WMO"})
    _ingest(db, {"plate": "BT55WMO"})
    assert db.query(FusionEvent).count() == 2


def test_failure_rolls_back_scan_row(monkeypatch):
    db = _make_session()
    from gotid_cloud.services import scan_ingest

    def _boom(**_kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(scan_ingest, "decide_fusion", _boom)
    with pytest.raises(RuntimeError):
        _ingest(db, {"plate": "BT55WMO"})
    assert db.query(ScanEventRecord).count() == 0
