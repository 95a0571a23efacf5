import enum
import io
from dataclasses import dataclass
from datetime import date
from typing import List

import pytest

from flatcsv.errors import ExportIOError, IntrospectionError
from flatcsv.exporter import Exporter, export_binary, export_csv
from flatcsv.models import ExportOptions
from flatcsv.policy import exportable


class Level(enum.Enum):
    LOW = 1
    HIGH = 2


@dataclass
class Person:
    name: str = exportable(name="Name", order=0)
    tags: List[str] = exportable(name="Tags", order=1, default_factory=list)


@dataclass
class Ticket:
    id: int = exportable(name="Id", order=0)
    level: Level = exportable(name="Level", order=1, default=Level.LOW)
    opened: date = exportable(name="Opened", order=2, default=date(2024, 5, 1))


def test_single_object_rows_mode():
    text = export_csv(Person("Ann", ["x", "y"]), ExportOptions(treat_enumerables_as_columns=False))

    assert text == "Name,Tags\nAnn,x\nAnn,y\n"


def test_single_object_columns_mode():
    text = export_csv(Person("Ann", ["x", "y"]))

    assert text == "Name,Tags0,Tags1\nAnn,x,y\n"


def test_collection_is_flushed_object_by_object():
    people = [Person("Ann", ["x"]), Person("Bob", ["y", "z"])]

    text = export_csv(people, ExportOptions(treat_enumerables_as_columns=False))

    assert text == "Name,Tags\nAnn,x\nBob,y\nBob,z\n"


def test_header_holds_columns_of_every_object():
    people = [Person("Ann", ["x"]), Person("Bob", ["y", "z"])]

    text = export_csv(people)

    assert text.splitlines() == ["Name,Tags0,Tags1", "Ann,x,", "Bob,y,z"]


def test_header_holds_keys_first_seen_in_later_records():
    assert export_csv([{"a": 1}, {"b": 2}]) == "a,b\n1,\n,2\n"


def test_streaming_export_writes_the_header_after_the_first_object():
    people = [Person("Ann", ["x"]), Person("Bob", ["y", "z"])]
    out = io.StringIO()

    Exporter().generate_csv(people, out)

    assert out.getvalue().splitlines() == ["Name,Tags0", "Ann,x", "Bob,y,z"]


def test_streaming_can_be_switched_off_for_an_exporter():
    out = io.StringIO()

    Exporter(ExportOptions(flush_each_object=False)).generate_csv([{"a": 1}, {"b": 2}], out)

    assert out.getvalue() == "a,b\n1,\n,2\n"


def test_cell_formatting():
    text = export_csv(Ticket(7, Level.HIGH))

    assert text == "Id,Level,Opened\n7,HIGH,2024-05-01\n"


def test_separator_applies_to_header_and_rows():
    text = export_csv(Person("Ann, Jr.", ["x"]), ExportOptions(separator=";"))

    assert text == "Name;Tags0\nAnn, Jr.;x\n"


def test_values_containing_the_separator_are_quoted():
    text = export_csv(Person("Ann, Jr.", []))

    assert text == 'Name\n"Ann, Jr."\n'


def test_auto_map_export():
    text = export_csv({"name": "Ann", "tags": ["x", "y"]}, ExportOptions(auto_map=True))

    assert text == "name,tags\nAnn,x\nAnn,y\n"


def test_generate_csv_to_path(tmp_path):
    target = tmp_path / "people.csv"

    with Exporter() as exporter:
        exporter.generate_csv([Person("Ann"), Person("Bob")], target)

    assert target.read_text(encoding="utf-8") == "Name\nAnn\nBob\n"
    assert exporter.objects == 2
    assert exporter.rows_written == 2
    assert exporter.columns == 1


def test_exporter_is_reusable():
    exporter = Exporter()
    first, second = io.StringIO(), io.StringIO()

    exporter.generate_csv(Person("Ann"), first)
    exporter.generate_csv({"city": "Oslo"}, second)

    assert first.getvalue() == "Name\nAnn\n"
    assert second.getvalue() == "city\nOslo\n"


def test_borrowed_stream_stays_open():
    out = io.StringIO()

    Exporter().generate_csv(Person("Ann"), out)

    assert not out.closed


def test_close_without_export_is_a_no_op():
    exporter = Exporter()
    exporter.close()
    exporter.close()


def test_unopenable_path_raises_export_io_error(tmp_path):
    missing = tmp_path / "no-such-dir" / "out.csv"

    with pytest.raises(ExportIOError):
        Exporter().generate_csv(Person("Ann"), missing)


def test_stream_is_released_when_mapping_fails(tmp_path):
    class Exploding:
        def __init__(self):
            self.__dict__["value"] = None

        @property
        def value(self):
            raise RuntimeError("boom")

    target = tmp_path / "out.csv"
    exporter = Exporter()
    with pytest.raises(IntrospectionError):
        exporter.generate_csv(Exploding(), target)

    assert exporter._stream is None
    assert exporter.grid.header == []
    assert target.exists()


def test_write_entity_then_flush():
    out = io.StringIO()
    exporter = Exporter()
    exporter.open(out)
    exporter.write_entity({"a": 1})
    exporter.write_entity({"a": 2, "b": 3})
    exporter.flush()

    assert out.getvalue() == "a,b\n1,\n2,3\n"


def test_flush_without_stream_raises():
    with pytest.raises(ExportIOError):
        Exporter().flush()


def test_binary_export():
    rows = [
        {"id": 1, "colour": "red"},
        {"id": 2, "colour": "blue"},
        {"id": 3, "colour": None},
    ]

    text = export_binary(rows, ExportOptions(first_columns_to_skip=1))

    assert text.splitlines() == [
        "id,colour:red,colour:blue,colour:na",
        "1,1,0,0",
        "2,0,1,0",
        "3,0,0,1",
    ]


def test_binary_export_skip_argument_overrides_options():
    out = io.StringIO()
    exporter = Exporter(ExportOptions(first_columns_to_skip=5))

    exporter.generate_binary_format([{"k": "a"}, {"k": "b"}], out, first_columns_to_skip=0)

    assert out.getvalue() == "k:a,k:b\n1,0\n0,1\n"
    assert exporter.columns == 2
    assert exporter.objects == 2


def test_empty_collection_writes_nothing():
    assert export_csv([]) == ""


class FailingWrites(io.StringIO):
    def write(self, s):
        raise OSError("disk full")


class FailingFlush(io.StringIO):
    def flush(self):
        raise OSError("disk full")


def test_write_failure_on_borrowed_stream_raises_export_io_error():
    with pytest.raises(ExportIOError, match="disk full"):
        Exporter().generate_csv(Person("Ann"), FailingWrites())


def test_write_failure_on_owned_stream_closes_it(tmp_path, monkeypatch):
    stream = FailingWrites()
    monkeypatch.setattr("flatcsv.exporter.open", lambda *args, **kwargs: stream, raising=False)

    exporter = Exporter()
    with pytest.raises(ExportIOError, match="disk full"):
        exporter.generate_csv(Person("Ann"), tmp_path / "out.csv")

    assert stream.closed
    assert exporter._stream is None


def test_flush_failure_on_close_raises_export_io_error(tmp_path, monkeypatch):
    stream = FailingFlush()
    monkeypatch.setattr("flatcsv.exporter.open", lambda *args, **kwargs: stream, raising=False)

    exporter = Exporter()
    with pytest.raises(ExportIOError, match="closing the output failed"):
        exporter.generate_csv(Person("Ann"), tmp_path / "out.csv")

    assert stream.closed
    exporter.close()


def test_binary_write_failure_raises_export_io_error():
    with pytest.raises(ExportIOError):
        Exporter().generate_binary_format([{"k": "a"}], FailingWrites())


@dataclass
class Dangling:
    ref: "NotDefinedAnywhere" = None  # noqa: F821


def test_unresolvable_annotation_fails_the_export():
    with pytest.raises(IntrospectionError) as exc_info:
        export_csv(Dangling())

    assert exc_info.value.owner == "Dangling"
