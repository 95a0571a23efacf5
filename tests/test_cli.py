import json

from click.testing import CliRunner

from flatcsv.cli import cli


def write_json(path, records):
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


def test_export_to_stdout(tmp_path):
    source = write_json(tmp_path / "people.json", [{"name": "Ann", "tags": ["x", "y"]}])

    result = CliRunner().invoke(cli, ["export", str(source), "--rows"])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["name,tags", "Ann,x", "Ann,y"]


def test_export_to_file_with_separator(tmp_path):
    source = write_json(tmp_path / "people.json", {"name": "Ann", "tags": ["x", "y"]})
    target = tmp_path / "out.csv"

    result = CliRunner().invoke(cli, ["export", str(source), "-o", str(target), "-s", ";"])

    assert result.exit_code == 0, result.output
    assert target.read_text(encoding="utf-8") == "name;tags0;tags1\nAnn;x;y\n"


def test_binarize_command(tmp_path):
    source = write_json(tmp_path / "rows.json", [{"id": 1, "c": "a"}, {"id": 2, "c": "b"}])

    result = CliRunner().invoke(cli, ["binarize", str(source), "--skip", "1"])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["id,c:a,c:b", "1,1,0", "2,0,1"]


def test_malformed_input_exits_with_error(tmp_path):
    source = tmp_path / "bad.json"
    source.write_text('{"a": ', encoding="utf-8")

    result = CliRunner().invoke(cli, ["export", str(source)])

    assert result.exit_code == 1
    assert "error:" in result.stderr


def test_export_header_holds_keys_of_every_record(tmp_path):
    source = write_json(tmp_path / "rows.json", [{"a": 1}, {"b": 2}])

    result = CliRunner().invoke(cli, ["export", str(source)])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["a,b", "1,", ",2"]


def test_stream_flag_writes_objects_as_they_are_mapped(tmp_path):
    source = write_json(tmp_path / "rows.json", [{"a": 1}, {"b": 2}])

    result = CliRunner().invoke(cli, ["export", str(source), "--stream"])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["a", "1", ",2"]
