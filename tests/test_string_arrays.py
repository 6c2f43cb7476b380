from conftest import compact

from jsrecover.sandbox import Sandbox
from jsrecover.string_arrays import literal_arguments, resolve_string_arrays

TABLE = 'function arr() { return ["a", "b", "c", "d", "e", "f"]; }\n'
DECODER = "function dec(i) { return arr()[i]; }\n"

ROTATED = """
function arr() {
  var table = ["f", "a", "b", "c", "d", "e"];
  arr = function () { return table; };
  return arr();
}
(function (get, times) {
  var list = get();
  while (times--) { list.push(list.shift()); }
})(arr, 1);
function dec(i) { return arr()[i]; }
x = dec(0);
"""


def test_decoder_call_is_replaced_and_infrastructure_removed():
    result = resolve_string_arrays(TABLE + DECODER + "console.log(dec(2));")
    assert compact(result.code) == 'console.log("c");'
    assert result.replacements == 1
    assert result.removed_nodes == 2


def test_repeated_calls_share_results():
    result = resolve_string_arrays(TABLE + DECODER + "x = [dec(0), dec(5), dec(0)];")
    assert compact(result.code) == 'x=["a","f","a"];'
    assert result.replacements == 3


def test_alias_chains_are_followed_and_removed():
    source = TABLE + DECODER + "var d = dec;\nvar d2 = d;\nx = d2(1) + d(4);"
    result = resolve_string_arrays(source)
    assert compact(result.code) == 'x="b"+"e";'
    assert result.replacements == 2
    assert result.removed_nodes == 4


def test_rotation_fragment_is_applied():
    result = resolve_string_arrays(ROTATED)
    assert compact(result.code) == 'x="a";'
    assert result.replacements == 1
    assert result.removed_nodes == 3


def test_rotated_table_is_skipped_without_rotation():
    result = resolve_string_arrays(ROTATED, resolve_rotation=False)
    assert result.code == ROTATED
    assert result.replacements == 0


def test_unresolvable_call_keeps_infrastructure():
    result = resolve_string_arrays(TABLE + DECODER + "x = dec(2); y = dec(n);")
    code = compact(result.code)
    assert 'x="c";' in code
    assert "y=dec(n);" in code
    assert "functionarr()" in code
    assert "functiondec(i)" in code
    assert result.replacements == 1
    assert result.removed_nodes == 0


def test_throwing_decoder_leaves_call_unchanged():
    source = TABLE + "function dec(i) { if (i > 5) { throw new Error('no'); } return arr()[i]; }\nx = dec(9);"
    result = resolve_string_arrays(source)
    assert result.replacements == 0
    assert result.code == source


def test_small_arrays_are_not_tables():
    source = 'function arr() { return ["a", "b"]; }\n' + DECODER + "x = dec(1);"
    result = resolve_string_arrays(source)
    assert result.replacements == 0
    assert result.code == source


def test_unparsable_input_is_returned_unchanged():
    result = resolve_string_arrays("function (")
    assert result.code == "function ("
    assert (result.replacements, result.removed_nodes) == (0, 0)


def test_literal_arguments(parsed):
    call = parsed("f(1, 'x', -2, 0x10);").body[0].expression
    assert literal_arguments(call.arguments) == ["1", '"x"', "-2", "16"]
    call = parsed("f(1, y);").body[0].expression
    assert literal_arguments(call.arguments) is None


def test_alias_declarator_among_others_is_removed_alone():
    result = resolve_string_arrays(TABLE + DECODER + "var d = dec, keep = 1;\nx = d(0);")
    assert compact(result.code) == 'varkeep=1;x="a";'
    assert result.replacements == 1
    assert result.removed_nodes == 3


def test_sandbox_is_closed_after_resolution(monkeypatch):
    closed = []
    monkeypatch.setattr(Sandbox, "close", lambda self: closed.append(self))
    result = resolve_string_arrays(TABLE + DECODER + "x = dec(1);")
    assert result.replacements == 1
    assert len(closed) == 1
