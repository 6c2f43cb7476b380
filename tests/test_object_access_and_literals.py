from jsrecover.literals import decode_hex_unicode
from jsrecover.object_access import simplify_object_access


def test_identifier_keys_become_dot_access(transform):
    code, count = transform(simplify_object_access, "a['foo'].b['bar-baz'] = c['_x$1'];")
    assert code == 'a.foo.b["bar-baz"]=c._x$1;'
    assert count == 2


def test_numeric_and_dynamic_keys_are_kept(transform):
    code, count = transform(simplify_object_access, "a[0] = a[k] + a['1st'];")
    assert code == 'a[0]=a[k]+a["1st"];'
    assert count == 0


def test_hex_escapes_are_decoded(parsed):
    tree = parsed(r'x = "\x48\x69";')
    assert decode_hex_unicode(tree) == 1
    literal = tree.body[0].expression.right
    assert literal.value == "Hi"
    assert literal.raw == '"Hi"'


def test_unicode_escapes_are_decoded(parsed):
    tree = parsed(r"x = '\u0041BC';")
    assert decode_hex_unicode(tree) == 1
    assert tree.body[0].expression.right.raw == '"ABC"'


def test_escaped_backslash_is_not_an_escape(parsed):
    tree = parsed(r'x = "\\x41";')
    assert decode_hex_unicode(tree) == 0


def test_plain_strings_are_untouched(parsed):
    tree = parsed("x = 'plain';")
    assert decode_hex_unicode(tree) == 0
