import pytest

from vegawidget import Changeset, columns_to_records

ROWS = [{"x": 1}, {"x": 2}]


def test_hard_reset_removes_everything():
    changeset = Changeset.hard_reset([{"x": 9}])
    assert changeset.removes_all
    assert changeset.apply(ROWS) == [{"x": 9}]


def test_append_keeps_existing_rows():
    changeset = Changeset.append([{"x": 3}])
    assert changeset.remove is None
    assert changeset.apply(ROWS) == [{"x": 1}, {"x": 2}, {"x": 3}]


def test_custom_predicate():
    changeset = Changeset(remove=lambda row: row["x"] > 1, insert=[])
    assert changeset.apply(ROWS) == [{"x": 1}]


def test_changeset_copies_input_rows():
    rows = [{"x": 1}]
    changeset = Changeset.hard_reset(rows)
    rows[0]["x"] = 100
    assert changeset.insert == [{"x": 1}]


def test_columns_to_records():
    assert columns_to_records({"x": [1, 2], "y": ["a", "b"]}) == [
        {"x": 1, "y": "a"},
        {"x": 2, "y": "b"},
    ]


def test_columns_to_records_empty():
    assert columns_to_records({}) == []
    assert columns_to_records({"x": []}) == []


def test_columns_to_records_ragged():
    with pytest.raises(ValueError):
        columns_to_records({"x": [1, 2], "y": [1]})


def test_columns_to_records_rejects_rows():
    with pytest.raises(TypeError):
        columns_to_records([{"x": 1}])


def test_columns_to_records_dataframe_like():
    class Frame:
        def to_dict(self, orient):
            assert orient == "list"
            return {"x": [1, 2]}

    assert columns_to_records(Frame()) == [{"x": 1}, {"x": 2}]
