"""Tests for CSV report rendering."""

from estoque.delimited import to_delimited_text


def test_empty_rows():
    assert to_delimited_text([]) == ""


def test_header_and_quoting():
    text = to_delimited_text([
        {"produto": "Arroz", "quantidade": 10, "comprado": True},
        {"produto": 'Óleo "extra"', "quantidade": None, "comprado": False},
    ])
    assert text.split("\n") == [
        "produto,quantidade,comprado",
        '"Arroz","10","true"',
        '"Óleo ""extra""","","false"',
    ]


def test_columns_follow_first_row():
    text = to_delimited_text([
        {"a": 1, "b": 2},
        {"b": 3, "c": 4},
    ])
    assert text == 'a,b\n"1","2"\n"","3"'


def test_commas_stay_inside_quotes():
    text = to_delimited_text([{"obs": "linha 1, parte 2"}])
    assert text == 'obs\n"linha 1, parte 2"'
