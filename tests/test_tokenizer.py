import pytest

from flaremap.errors import MapFormatError, MapNotFoundError
from flaremap.tokenizer import FileParser, parse_direction, read_list, to_bool, to_int


def _tokens(text):
    infile = FileParser(on_error=lambda msg: None).open_text(text)
    out = []
    while infile.next():
        out.append((infile.section, infile.key, infile.val, infile.new_section))
    return out


def test_to_int():
    assert to_int('42') == 42
    assert to_int(' -3') == -3
    assert to_int('12abc') == 12
    assert to_int('') == 0
    assert to_int('abc', 7) == 7
    assert to_int('', 5) == 5


def test_to_bool():
    assert to_bool('true')
    assert to_bool('Yes')
    assert to_bool('1')
    assert not to_bool('false')
    assert not to_bool('')


def test_parse_direction_names_and_numbers():
    assert parse_direction('N') == 3
    assert parse_direction('sw') == 0
    assert parse_direction('S') == 7
    assert parse_direction('5') == 5


def test_parse_direction_out_of_range():
    with pytest.raises(ValueError):
        parse_direction('9')


def test_sections_and_keys():
    toks = _tokens("# comment\n[header]\nwidth=3\n\nheight = 4\n[npc]\ntype=npc\n")
    assert toks == [
        ('header', 'width', '3', True),
        ('header', 'height', '4', False),
        ('npc', 'type', 'npc', True),
    ]


def test_repeated_section_flags_each_occurrence():
    toks = _tokens("[enemy]\na=1\nb=2\n[enemy]\na=3\n")
    assert [t[3] for t in toks] == [True, False, True]


def test_value_keeps_equals_signs():
    toks = _tokens("[x]\nmsg=a=b\n")
    assert toks[0][2] == 'a=b'


def test_malformed_line_reported_and_skipped():
    errors = []
    infile = FileParser(on_error=errors.append).open_text("[x]\nbogus line\nk=v\n")
    assert infile.next()
    assert infile.key == 'k'
    assert len(errors) == 1
    assert 'bogus line' in errors[0]


def test_next_value_pops_in_order():
    infile = FileParser().open_text("[x]\nlocation= 1, 2 ,N\n")
    infile.next()
    assert infile.next_value() == '1'
    assert infile.next_value() == '2'
    assert infile.next_value() == 'N'
    assert infile.next_value() == ''
    assert infile.next_value() == ''


def test_read_list_stops_at_empty_value():
    infile = FileParser().open_text("[x]\nrequires_status=a,b,,c\n")
    infile.next()
    assert read_list(infile) == ['a', 'b']


def test_raw_lines_bypass_tokenizing():
    infile = FileParser().open_text("[layer]\ndata=\n1,2,\n[not a section\nk=v\n")
    infile.next()
    assert infile.key == 'data'
    assert infile.get_raw_line() == '1,2,'
    assert infile.get_raw_line() == '[not a section'
    assert infile.next()
    assert infile.key == 'k'


def test_raw_line_at_end_of_file():
    infile = FileParser().open_text("[layer]\ndata=\n")
    infile.next()
    assert infile.get_raw_line() == ''


def test_line_numbers_track_raw_lines():
    infile = FileParser().open_text("[layer]\ndata=\n1,\n2,\nk=v\n")
    infile.next()
    assert infile.line_number == 2
    infile.get_raw_line()
    infile.increment_line_num()
    infile.get_raw_line()
    infile.increment_line_num()
    assert infile.line_number == 4
    infile.next()
    assert infile.line_number == 5


def test_error_formats_arguments():
    errors = []
    infile = FileParser(on_error=errors.append).open_text("[x]\nk=v\n")
    infile.next()
    assert infile.error("'%s' is not a valid key.", 'k') == "'k' is not a valid key."
    assert errors == ["'k' is not a valid key."]


def test_open_missing_file(tmp_path):
    with pytest.raises(MapNotFoundError):
        FileParser().open(tmp_path / 'missing.txt')
    with pytest.raises(FileNotFoundError):
        FileParser().open(tmp_path / 'missing.txt')


def test_open_undecodable_file(tmp_path):
    path = tmp_path / 'binary.txt'
    path.write_bytes(b"[header]\ntitle=\xff\xfe\n")
    with pytest.raises(MapFormatError) as exc:
        FileParser().open(path)
    assert exc.value.filename == str(path)
    assert isinstance(exc.value.__cause__, UnicodeDecodeError)
