"""Tests for the output record encoder."""

import pytest

from llmbatch.core.record_encoder import OutputRecord, decode_record, encode_record


class TestEncodeRecord:
    """Tests for encode_record."""

    @pytest.mark.unit
    def test_plain_fields(self):
        assert encode_record("Hi", "Hello!", 42) == '"Hi","Hello!","42 milliseconds"\n'

    @pytest.mark.unit
    def test_quotes_are_doubled(self):
        line = encode_record('say "yes"', 'He said "ok"', 5)
        assert line == '"say ""yes""","He said ""ok""","5 milliseconds"\n'

    @pytest.mark.unit
    def test_newlines_become_backslash_n(self):
        line = encode_record("a", "line one\nline two", 7)
        assert line == '"a","line one\\nline two","7 milliseconds"\n'
        assert line.count("\n") == 1

    @pytest.mark.unit
    def test_commas_are_left_alone(self):
        assert encode_record("a,b", "c,d", 0) == '"a,b","c,d","0 milliseconds"\n'

    @pytest.mark.unit
    def test_error_record(self):
        line = encode_record("Hi", "Error: Unknown model", 0)
        assert line == '"Hi","Error: Unknown model","0 milliseconds"\n'

    @pytest.mark.unit
    def test_empty_prompt(self):
        assert encode_record("", "", 0) == '"","","0 milliseconds"\n'

    @pytest.mark.unit
    def test_output_record_encode(self):
        record = OutputRecord(prompt="p", response="r", elapsed_ms=3)
        assert record.encode() == encode_record("p", "r", 3)


class TestDecodeRecord:
    """Tests for decode_record."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "prompt,response",
        [
            ("Hi", "Hello"),
            ('quote "inside"', '""'),
            ("multi\nline", "answer\nwith\nbreaks"),
            ('"', 'ends with quote"'),
            ("a,b,c", '"x","y"'),
            ("", ""),
        ],
    )
    def test_recovers_encoded_fields(self, prompt, response):
        record = decode_record(encode_record(prompt, response, 123))
        assert record == OutputRecord(prompt=prompt, response=response, elapsed_ms=123)

    @pytest.mark.unit
    def test_rejects_missing_field(self):
        with pytest.raises(ValueError):
            decode_record('"a","b"\n')

    @pytest.mark.unit
    def test_rejects_bad_duration(self):
        with pytest.raises(ValueError):
            decode_record('"a","b","soon"\n')

    @pytest.mark.unit
    def test_rejects_trailing_garbage(self):
        with pytest.raises(ValueError):
            decode_record('"a","b","1 milliseconds"x\n')
