from gotid_cloud.fusion.identity import pubkey_candidates, resolve_identity
from gotid_cloud.fusion.types import CloudAction, CloudVerdict, RegistryVehicle

KEY = "04" + "AB" * 32


class _Registry:
    def __init__(self, *vehicles: RegistryVehicle):
        self.vehicles = list(vehicles)
        self.key_lookups: list[str] = []

    def find_by_plate(self, plate):
        return next((v for v in self.vehicles if v.plate == plate), None)

    def find_by_public_key(self, public_key):
        self.key_lookups.append(public_key)
        return next((v for v in self.vehicles if v.public_key == public_key), None)


def _vehicle(plate="BT55WMO", public_key=KEY, status="ACTIVE") -> RegistryVehicle:
    return RegistryVehicle(plate=plate, make="AUDI", colour="BLUE", public_key=public_key, status=status, has_gotid=True)


def test_pubkey_candidates_toggle_uncompressed_prefix():
    assert pubkey_candidates(KEY) == [KEY, KEY[2:]]
    assert pubkey_candidates(KEY[2:]) == [KEY[2:], KEY]
    assert pubkey_candidates(" ab cd ") == ["ABCD", "04ABCD"]
    assert pubkey_candidates("") == []
    assert pubkey_candidates("XYZ") == []


def test_no_key_and_no_plate_is_uuid_missing():
    res = resolve_identity(_Registry(_vehicle()), pubkey_hex="", plate="")
    assert res.verdict is CloudVerdict.UUID_MISSING
    assert res.vehicle is None
    assert res.action is CloudAction.INVESTIGATE
    assert res.reasons


def test_no_key_enrolled_plate_is_uuid_missing_with_vehicle():
    res = resolve_identity(_Registry(_vehicle()), pubkey_hex=None, plate="bt55 wmo")
    assert res.verdict is CloudVerdict.UUID_MISSING
    assert res.vehicle.plate == "BT55WMO"
    assert len(res.reasons) == 2


def test_no_key_unknown_plate_is_unregistered_vehicle():
    res = resolve_identity(_Registry(_vehicle()), pubkey_hex=None, plate="ZZ99ZZZ")
    assert res.verdict is CloudVerdict.UNREGISTERED_VEHICLE
    assert res.vehicle is None


def test_non_hex_key_is_invalid_identity():
    res = resolve_identity(_Registry(_vehicle()), pubkey_hex="not-a-key", plate="BT55WMO")
    assert res.verdict is CloudVerdict.INVALID_IDENTITY
    assert res.action is CloudAction.STOP_INVESTIGATE


def test_key_without_prefix_matches_registry_key_with_prefix():
    registry = _Registry(_vehicle())
    res = resolve_identity(registry, pubkey_hex=KEY[2:].lower(), plate="BT55WMO")
    assert res.verdict is CloudVerdict.AUTHENTIC
    assert res.action is CloudAction.NONE
    assert registry.key_lookups == [KEY[2:], KEY]


def test_key_with_prefix_matches_registry_key_without_prefix():
    res = resolve_identity(_Registry(_vehicle(public_key=KEY[2:])), pubkey_hex=KEY, plate="")
    assert res.verdict is CloudVerdict.AUTHENTIC


def test_unknown_key_on_enrolled_plate_is_key_mismatch():
    res = resolve_identity(_Registry(_vehicle()), pubkey_hex="04" + "CD" * 32, plate="BT55WMO")
    assert res.verdict is CloudVerdict.KEY_MISMATCH
    assert res.action is CloudAction.STOP
    assert res.vehicle.plate == "BT55WMO"
    assert "Possible clone" in res.reasons[0]


def test_unknown_key_and_unknown_plate_is_unregistered_identity():
    res = resolve_identity(_Registry(_vehicle()), pubkey_hex="04" + "CD" * 32, plate="ZZ99ZZZ")
    assert res.verdict is CloudVerdict.UNREGISTERED_IDENTITY
    assert res.vehicle is None


def test_inactive_status_is_revoked():
    res = resolve_identity(_Registry(_vehicle(status="stolen")), pubkey_hex=KEY, plate="BT55WMO")
    assert res.verdict is CloudVerdict.REVOKED_VEHICLE
    assert res.reasons == ["Registry status=STOLEN"]


def test_blank_status_counts_as_active():
    res = resolve_identity(_Registry(_vehicle(status="")), pubkey_hex=KEY, plate="BT55WMO")
    assert res.verdict is CloudVerdict.AUTHENTIC


def test_key_bound_to_other_plate_is_mismatch():
    res = resolve_identity(_Registry(_vehicle()), pubkey_hex=KEY, plate="AB12CDE")
    assert res.verdict is CloudVerdict.MISMATCH
    assert res.reasons == ["Plate mismatch observed=AB12CDE assigned=BT55WMO"]
