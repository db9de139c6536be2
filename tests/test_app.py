import json
import pytest
from dataclasses import replace
from artforge.app import load_components, main
from artforge.core.doc import CanvasDoc
from artforge.core.node import ComponentType, Size, create_node


@pytest.fixture
def export_file(tmp_path):
    doc = CanvasDoc()
    doc.add_component(create_node(ComponentType.CONTAINER, id="box"))
    doc.add_component(create_node(ComponentType.TEXT, id="label"), "box")
    doc.add_component(create_node(ComponentType.BUTTON, id="go"))
    path = tmp_path / "export.json"
    path.write_text(json.dumps(doc.to_dict()))
    return path


def test_load_components_accepts_all_shapes(tmp_path, export_file):
    assert [n.id for n in load_components(export_file)] == ["box", "go"]

    single = tmp_path / "single.json"
    single.write_text(json.dumps(create_node(ComponentType.TEXT).to_dict()))
    assert len(load_components(single)) == 1

    bad = tmp_path / "bad.json"
    bad.write_text("42")
    with pytest.raises(ValueError):
        load_components(bad)


def test_validate_ok(export_file, capsys):
    assert main(["validate", str(export_file)]) == 0
    assert "2 component(s) OK" in capsys.readouterr().out


def test_validate_reports_errors(tmp_path, capsys):
    bad = replace(create_node(ComponentType.TEXT, id="t"), size=Size(0, 10))
    box = replace(create_node(ComponentType.CONTAINER, id="b"), children=(bad,))
    path = tmp_path / "bad.json"
    path.write_text(json.dumps([box.to_dict()]))

    assert main(["validate", str(path)]) == 1
    out = capsys.readouterr().out
    assert "b: children[0].size.width: Width must be a positive number" in out
    assert "1 of 1 component(s) failed validation" in out


def test_info(export_file, capsys):
    assert main(["info", str(export_file)]) == 0
    out = capsys.readouterr().out
    assert "Top-level components: 2" in out
    assert "Total components: 3" in out
    assert "Max depth: 1" in out
    assert "container: 1" in out


def test_missing_file(tmp_path):
    assert main(["info", str(tmp_path / "nope.json")]) == 2


def test_command_is_required():
    with pytest.raises(SystemExit):
        main([])
