import json
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import ner


@pytest.fixture
def inputs(tmp_path):
    grammar_file = tmp_path / "grammar.txt"
    grammar_file.write_text("cf<-CF\nrsvp<-RSVP\nthe<-THE\n", encoding="utf-8")
    text_file = tmp_path / "text.txt"
    text_file.write_text("Put the r.s.v.p. at the end.", encoding="utf-8")
    return grammar_file, text_file


def read_lines(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_json_lines_output(inputs, tmp_path):
    grammar_file, text_file = inputs
    output_file = tmp_path / "out.jsonl"
    status = ner.main(
        [
            str(grammar_file),
            str(text_file),
            "--case-insensitive-min-length",
            "4",
            "--fuzzy-min-length",
            "4",
            "-o",
            str(output_file),
        ]
    )
    assert status == 0
    assert read_lines(output_file) == [
        {"offset": 8, "length": 7, "ids": ["rsvp"], "match": "r.s.v.p"}
    ]


def test_default_options_find_nothing(inputs, tmp_path):
    grammar_file, text_file = inputs
    output_file = tmp_path / "out.jsonl"
    assert ner.main([str(grammar_file), str(text_file), "-o", str(output_file)]) == 0
    assert output_file.read_text(encoding="utf-8") == ""


def test_pretty_print(inputs, tmp_path):
    grammar_file, text_file = inputs
    text_file.write_text("THE RSVP", encoding="utf-8")
    output_file = tmp_path / "out.json"
    status = ner.main(
        [str(grammar_file), str(text_file), "--pretty-print", "-o", str(output_file)]
    )
    assert status == 0
    records = json.loads(output_file.read_text(encoding="utf-8"))
    assert [record["ids"] for record in records] == [["the"], ["rsvp"]]


def test_xml_output(inputs, tmp_path):
    grammar_file, text_file = inputs
    text_file.write_text("THE <RSVP>", encoding="utf-8")
    output_file = tmp_path / "out.xml"
    status = ner.main(
        [
            str(grammar_file),
            str(text_file),
            "--format",
            "xml",
            "--template",
            '<ne class="x" id=""/>',
            "-o",
            str(output_file),
        ]
    )
    assert status == 0
    assert output_file.read_text(encoding="utf-8") == (
        '<text><ne class="x" id="the">THE</ne> &lt;<ne class="x" id="rsvp">RSVP</ne>&gt;</text>\n'
    )


def test_offsets_count_carriage_returns(inputs, tmp_path):
    grammar_file, text_file = inputs
    text_file.write_bytes(b"x\r\nRSVP")
    output_file = tmp_path / "out.jsonl"
    assert ner.main([str(grammar_file), str(text_file), "-o", str(output_file)]) == 0
    assert read_lines(output_file)[0]["offset"] == 3


def test_bad_grammar(tmp_path, capsys):
    grammar_file = tmp_path / "grammar.txt"
    grammar_file.write_text("badline\n", encoding="utf-8")
    text_file = tmp_path / "text.txt"
    text_file.write_text("x", encoding="utf-8")
    assert ner.main([str(grammar_file), str(text_file)]) == 1
    assert "line 1" in capsys.readouterr().err


def test_missing_files(inputs, tmp_path):
    grammar_file, text_file = inputs
    assert ner.main([str(tmp_path / "missing.txt"), str(text_file)]) == 1
    assert ner.main([str(grammar_file), str(tmp_path / "missing.txt")]) == 1


def test_bad_options(inputs):
    grammar_file, text_file = inputs
    args = [str(grammar_file), str(text_file), "--fuzzy-min-length", "-5"]
    assert ner.main(args) == 1
    args = [str(grammar_file), str(text_file), "--format", "xml", "--template", "<ne/>"]
    assert ner.main(args) == 1


def test_stats_and_timing(inputs, tmp_path, capsys):
    grammar_file, text_file = inputs
    text_file.write_text("THE RSVP THE", encoding="utf-8")
    output_file = tmp_path / "out.jsonl"
    status = ner.main(
        [
            str(grammar_file),
            str(text_file),
            "--show-stats",
            "--show-timing",
            "-o",
            str(output_file),
        ]
    )
    assert status == 0
    err = capsys.readouterr().err
    assert "Recognition Statistics" in err
    assert "the: 2" in err
    assert "Scan time" in err


def test_version(capsys):
    assert ner.main(["--version"]) == 0
    assert "grammar format" in capsys.readouterr().out


def test_missing_arguments():
    with pytest.raises(SystemExit):
        ner.main([])
