from csv_handler import export_items_to_csv, import_items_from_csv

from conftest import make_item


def test_export_then_import_items(tmp_path):
    path = str(tmp_path / "items.csv")
    items = {
        "Casa": [make_item(450.0, "A", name="Apartamento", item_id="h1")],
        "Transporte": [],
        "Comida": [
            make_item(35.2, "B", name="Cena", item_id="f1"),
            make_item(12.0, "B", paid=False, name="Desayuno", item_id="f2"),
        ],
    }

    assert export_items_to_csv(items, path) == 3
    back = import_items_from_csv(path)

    assert list(back) == ["Casa", "Comida"]
    assert back["Casa"][0] == items["Casa"][0]
    assert back["Comida"] == items["Comida"]


def test_import_fills_gaps(tmp_path):
    path = tmp_path / "items.csv"
    path.write_text(
        "category,name,cost,paid_by\n"
        "Entradas,Museo,abc,\n"
        "Entradas,Parque,25,A\n"
        ",Huérfano,3,\n",
        encoding="utf-8",
    )
    back = import_items_from_csv(str(path))

    museo, parque = back["Entradas"]
    assert (museo.cost, museo.paid) == (0.0, False)
    assert (parque.cost, parque.paid, parque.paid_by) == (25.0, True, "A")
    assert museo.id and parque.id and museo.id != parque.id
    assert list(back) == ["Entradas"]


def test_export_writes_header(tmp_path):
    path = tmp_path / "items.csv"
    export_items_to_csv({}, str(path))
    assert path.read_text(encoding="utf-8").splitlines() == ["category,id,name,cost,paid,paid_by"]
