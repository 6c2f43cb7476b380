from jsrecover.renamer import HEX_NAME, rename_hex_identifiers
from jsrecover.scope import analyze


def test_roles_get_their_own_counters(transform):
    source = """
    function _0x1a2b(_0x3c4d) { var _0x5e6f = _0x3c4d + 1; return _0x5e6f; }
    function other(_0x3c4d) { return _0x3c4d; }
    _0x1a2b(2);
    """
    code, count = transform(rename_hex_identifiers, source)
    assert code == (
        "functionfunc1(param1){varvar1=param1+1;returnvar1;}"
        "functionother(param2){returnparam2;}"
        "func1(2);"
    )
    assert count == 4


def test_shadowed_bindings_are_renamed_independently(transform):
    source = "var _0xa = 1; function f() { var _0xa = 2; return _0xa; } g(_0xa);"
    code, count = transform(rename_hex_identifiers, source)
    assert code == "varvar1=1;functionf(){varvar2=2;returnvar2;}g(var1);"
    assert count == 2


def test_block_scoped_bindings(transform):
    source = "let _0xa = 1; { let _0xa = 2; f(_0xa); } f(_0xa);"
    code, _ = transform(rename_hex_identifiers, source)
    assert code == "letvar1=1;{letvar2=2;f(var2);}f(var1);"


def test_existing_names_are_not_reused(transform):
    code, _ = transform(rename_hex_identifiers, "var var1 = 0; var _0xabc = 1; f(_0xabc, var1);")
    assert code == "varvar1=0;varvar2=1;f(var2,var1);"


def test_property_names_are_preserved(transform):
    code, _ = transform(rename_hex_identifiers, "var _0xa = {}; _0xa._0xb = 1; var o = {_0xc: _0xa};")
    assert code == "varvar1={};var1._0xb=1;varo={_0xc:var1};"


def test_shorthand_properties_keep_their_key(transform):
    code, _ = transform(rename_hex_identifiers, "var _0xa = 1; var o = {_0xa};")
    assert code == "varvar1=1;varo={_0xa:var1};"


def test_hoisted_var_in_nested_block(transform):
    code, _ = transform(rename_hex_identifiers, "function f() { if (x) { var _0xa = 1; } return _0xa; }")
    assert code == "functionf(){if(x){varvar1=1;}returnvar1;}"


def test_catch_parameter(transform):
    code, _ = transform(rename_hex_identifiers, "try { f(); } catch (_0xe) { log(_0xe); }")
    assert code == "try{f();}catch(var1){log(var1);}"


def test_globals_are_left_alone(transform):
    code, count = transform(rename_hex_identifiers, "_0xdead(1);")
    assert code == "_0xdead(1);"
    assert count == 0


def test_second_run_finds_nothing(parsed):
    tree = parsed("function _0xf(_0xa) { return _0xa; }")
    assert rename_hex_identifiers(tree) == 2
    assert rename_hex_identifiers(tree) == 0


def test_hex_name_pattern():
    assert HEX_NAME.match("_0x1f2e")
    assert HEX_NAME.match("a0_0xBEEF")
    assert not HEX_NAME.match("_0xzz")
    assert not HEX_NAME.match("value")


def test_scope_tree(parsed):
    root = analyze(parsed("var a = 1; function f(b) { let c = a + b; { const d = c; } }"))
    assert list(root.bindings) == ["a", "f"]
    function_scope = root.children[0]
    assert list(function_scope.bindings) == ["b", "c"]
    assert function_scope.bindings["b"].kind == "param"
    assert [ident.name for ident in root.bindings["a"].references] == ["a"]
    block_scope = function_scope.children[0]
    assert list(block_scope.bindings) == ["d"]
    assert len(function_scope.bindings["c"].references) == 1


def test_jsx_tags_are_references(transform):
    code, count = transform(rename_hex_identifiers, "var _0xa = 1; x = <_0xa><b /></_0xa>;")
    assert code == "varVar1=1;x=<Var1><b/></Var1>;"
    assert count == 1


def test_lowercase_jsx_tags_are_not_references(parsed):
    root = analyze(parsed("var div = 1; x = <div />;"))
    assert root.bindings["div"].references == []


def test_class_expression_name(transform):
    code, count = transform(rename_hex_identifiers, "var o = class _0xc { m() { return _0xc; } };")
    assert "_0xc" not in code
    assert code.count("var1") == 2
    assert count == 1
