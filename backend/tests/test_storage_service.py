from omnimarket.extensions import db
from omnimarket.models import StorageEntry
from omnimarket.services import storage_service


def test_missing_key_is_none(storage):
    assert storage_service.get_value("nothing-here") is None


def test_set_replaces_whole_document(storage):
    storage_service.set_value("products", [{"id": "A"}, {"id": "B"}])
    storage_service.set_value("products", [{"id": "C"}])

    assert storage_service.get_value("products") == [{"id": "C"}]
    assert db.session.query(StorageEntry).count() == 1


def test_non_ascii_text_survives(storage):
    storage_service.set_value("app_config", {"appName": "Toko Café"})
    entry = db.session.get(StorageEntry, "app_config")
    assert "Café" in entry.value
    assert storage_service.get_value("app_config") == {"appName": "Toko Café"}


def test_uncommitted_writes_roll_back_together(storage):
    storage_service.set_value("transactions", [1], commit=False)
    storage_service.set_value("products", [2], commit=False)
    db.session.rollback()

    assert storage_service.get_value("transactions") is None
    assert storage_service.get_value("products") is None


def test_delete_value(storage):
    storage_service.set_value("visits", [])
    assert storage_service.delete_value("visits") is True
    assert storage_service.delete_value("visits") is False


def test_append_record_and_record_ids(storage):
    from omnimarket.models import MotoristVisit

    visit = MotoristVisit(
        id="V-1",
        motorist_name="Rina",
        shop_name="Toko Maju",
        timestamp="2026-10-19T09:00:00.000Z",
        latitude=-6.2,
        longitude=106.8,
        notes="",
    )
    storage_service.append_record("visits", visit)
    storage_service.append_record("visits", visit)

    assert storage_service.record_ids("visits") == ["V-1", "V-1"]
    assert storage_service.record_ids("transactions") == []
    assert storage_service.get_value("visits")[0]["shopName"] == "Toko Maju"
