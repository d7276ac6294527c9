import json

import pytest

from config import (
    DEFAULT_FAMILIES,
    default_store_path,
    dict_to_trip,
    get_default_families,
    load_families,
    load_trips,
    save_trips,
    trip_to_dict,
)
from models import CATEGORIES

from conftest import make_item, make_trip, reimbursement

SAVED_TRIP = {
    "id": 1718000000000,
    "nombre": "Pirineo",
    "fechaInicio": "2026-07-01",
    "fechaFin": "2026-07-08",
    "fechaCreacion": "2026-01-05",
    "familias": ["García", "López"],
    "compensaciones": [
        {"deudor": "López", "acreedor": "García", "cantidad": 40, "fecha": "2026-02-01T09:00:00.000Z"}
    ],
    "itinerario": {"2026-07-01": [{"id": "i1", "texto": "Llegada", "completado": False}]},
    "conceptos": {
        "Casa": [{"id": "c1", "nombre": "Casa rural", "coste": 800, "pagado": True, "pagadoPor": "García"}],
        "Comida": [{"id": "c2", "nombre": "Super", "coste": "", "pagado": False, "pagadoPor": ""}],
    },
    "socialLinks": [{"id": "s1", "url": "https://youtu.be/x", "platform": "youtube", "note": ""}],
    "locations": [{"id": "l1", "lat": 42.6, "lng": 0.5, "name": "Lago", "type": "interest"}],
}


def test_dict_to_trip_reads_saved_data():
    trip = dict_to_trip(SAVED_TRIP)

    assert trip.name == "Pirineo"
    assert trip.families == ["García", "López"]
    assert trip.start_date == "2026-07-01"
    assert trip.reimbursements[0].debtor == "López"
    assert trip.reimbursements[0].amount == 40
    casa = trip.items["Casa"][0]
    assert (casa.name, casa.cost, casa.paid, casa.paid_by) == ("Casa rural", 800, True, "García")
    # missing categories are filled in
    assert set(CATEGORIES) <= set(trip.items)


def test_trip_round_trip_keeps_untouched_sections():
    out = trip_to_dict(dict_to_trip(SAVED_TRIP))

    assert out["itinerario"] == SAVED_TRIP["itinerario"]
    assert out["socialLinks"] == SAVED_TRIP["socialLinks"]
    assert out["locations"] == SAVED_TRIP["locations"]
    assert out["compensaciones"] == SAVED_TRIP["compensaciones"]
    assert out["conceptos"]["Casa"] == SAVED_TRIP["conceptos"]["Casa"]
    assert out["conceptos"]["Comida"] == SAVED_TRIP["conceptos"]["Comida"]


def test_dict_to_trip_tolerates_missing_fields():
    trip = dict_to_trip({"id": 5, "conceptos": {"Casa": [{"nombre": "x"}]}})

    assert trip.families == []
    assert trip.reimbursements == []
    item = trip.items["Casa"][0]
    assert (item.cost, item.paid, item.paid_by) == (0, False, "")


def test_save_and_load_trips(store_path):
    trip = make_trip(["Ana", "Bea"], [make_item(30.5, "Ana")], [reimbursement("Bea", "Ana", 15.25)])
    save_trips([trip], store_path)

    with open(store_path, encoding="utf-8") as f:
        raw = json.load(f)
    assert raw[0]["familias"] == ["Ana", "Bea"]

    assert load_trips(store_path) == [trip]


def test_save_keeps_non_ascii(store_path):
    save_trips([dict_to_trip(SAVED_TRIP)], store_path)
    with open(store_path, encoding="utf-8") as f:
        assert "García" in f.read()


def test_load_missing_store_is_empty(tmp_path):
    assert load_trips(str(tmp_path / "nope.json")) == []


def test_load_rejects_bad_json(store_path):
    with open(store_path, "w", encoding="utf-8") as f:
        f.write("{not json")
    with pytest.raises(ValueError):
        load_trips(store_path)


def test_load_rejects_non_list(store_path):
    with open(store_path, "w", encoding="utf-8") as f:
        json.dump({"trips": []}, f)
    with pytest.raises(ValueError, match="list of trips"):
        load_trips(store_path)


def test_default_families(tmp_path, monkeypatch):
    monkeypatch.setenv("TRIP_LEDGER_HOME", str(tmp_path))
    assert get_default_families() == DEFAULT_FAMILIES

    with open(tmp_path / "families.json", "w", encoding="utf-8") as f:
        json.dump({"families": ["Norte", "Sur"]}, f)
    assert load_families(str(tmp_path / "families.json")) == ["Norte", "Sur"]
    assert get_default_families() == ["Norte", "Sur"]


def test_default_store_path(tmp_path, monkeypatch):
    monkeypatch.delenv("TRIP_LEDGER_DATA", raising=False)
    monkeypatch.setenv("TRIP_LEDGER_HOME", str(tmp_path))
    assert default_store_path() == str(tmp_path / "viajeros_app_data.json")

    monkeypatch.setenv("TRIP_LEDGER_DATA", "/somewhere/trips.json")
    assert default_store_path() == "/somewhere/trips.json"
