from liquid.tokens import SourceLoc, Token, TokenType


def test_default_source_loc_is_zero():
    assert SourceLoc().is_zero() is True


def test_source_loc_with_path_is_not_zero():
    assert SourceLoc(pathname="page.html").is_zero() is False


def test_source_loc_with_line_is_not_zero():
    assert SourceLoc(line_no=4).is_zero() is False


def test_source_loc_str_with_path():
    assert str(SourceLoc("page.html", 3)) == "page.html:3"


def test_source_loc_str_without_path():
    assert str(SourceLoc(line_no=2)) == "line 2"


def test_token_source_location_and_text():
    loc = SourceLoc("dir/file.html", 7)
    tok = Token(TokenType.TAG, loc, name="if", args="x", source="{% if x %}")
    assert tok.source_location() == loc
    assert tok.source_text() == "{% if x %}"


def test_text_token_str():
    assert str(Token(TokenType.TEXT, source="pre")) == 'TextTokenType{"pre"}'


def test_tag_token_str():
    tok = Token(TokenType.TAG, name="tag", args="args", source="{% tag args %}")
    assert str(tok) == 'TagTokenType{Tag:"tag", Args:"args"}'


def test_object_token_str():
    tok = Token(TokenType.OBJ, args="object", source="{{ object }}")
    assert str(tok) == 'ObjTokenType{"object"}'


def test_trim_token_str():
    assert str(Token(TokenType.TRIM_LEFT)) == "-"
    assert str(Token(TokenType.TRIM_RIGHT)) == "-"


def test_tokens_compare_by_value():
    assert Token(TokenType.OBJ, args="a", source="{{a}}") == Token(
        TokenType.OBJ, args="a", source="{{a}}"
    )
    assert Token(TokenType.OBJ, args="a") != Token(TokenType.OBJ, args="b")