"""Registry documents: Mongo mapping and BSON sanitizing."""

from adapters.external.database.helper_repo import sanitize_for_mongo
from core.domain.entities.adapter_registry_entity import AdapterRegistryEntity
from core.domain.enums.adapter_enums import AdapterKind, CorrectionKind


def test_from_mongo_maps_id_and_legacy_timestamps():
    ent = AdapterRegistryEntity.from_mongo(
        {
            "_id": 42,
            "chain": "avalanche",
            "name": "GmxAdapter",
            "kind": "gmx",
            "pool": "0x9ab2de34a33fb459b538c43f251eb825645e8595",
            "created_at": "2024-01-14T14:44:08Z",
        }
    )
    assert ent.id == "42"
    assert ent.kind == "gmx"
    assert ent.created_at_iso == "2024-01-14T14:44:08Z"
    assert ent.created_at == 1705243448000
    assert ent.status == "ACTIVE"


def test_from_mongo_none():
    assert AdapterRegistryEntity.from_mongo(None) is None


def test_to_mongo_drops_none_and_sets_timestamps():
    ent = AdapterRegistryEntity(
        chain="avalanche",
        name="CurveAaveAdapter",
        kind=AdapterKind.CURVE_PLAIN,
        pool="0x7f90122bf0700f9e7e1f688fe926940e8839f353",
        token_count=3,
        correction_kind=CorrectionKind.BPS,
        correction_value=4,
    ).touch_for_insert()
    doc = ent.to_mongo()
    assert "_id" not in doc
    assert "fee" not in doc
    assert doc["kind"] == "curve_plain"
    assert doc["correction_kind"] == "bps"
    assert doc["created_at"] == doc["updated_at"]
    assert ent.to_public()["created_at"] == ent.created_at_iso


def test_sanitize_for_mongo():
    big = 2**200
    doc = sanitize_for_mongo({"a": big, "b": [1, (2, big)], "c": True, "d": CorrectionKind.UNIT})
    assert doc == {"a": str(big), "b": [1, [2, str(big)]], "c": True, "d": "unit"}
