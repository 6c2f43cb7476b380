from jsrecover.dead_code import remove_dead_code, static_test


def test_true_branch_is_spliced(transform):
    code, count = transform(remove_dead_code, "if (true) { x = 1; } else { x = 2; }")
    assert code == "x=1;"
    assert count == 1


def test_string_comparison_in_conditional(transform):
    code, count = transform(remove_dead_code, 'y = "a" === "b" ? 1 : 2;')
    assert code == "y=2;"
    assert count == 1


def test_false_without_alternate_disappears(transform):
    code, count = transform(remove_dead_code, "if (false) { x = 1; } z();")
    assert code == "z();"
    assert count == 1


def test_inequality_of_different_strings(transform):
    code, _ = transform(remove_dead_code, "if ('abc' !== 'xyz') { f(); } else { g(); }")
    assert code == "f();"


def test_block_with_lexical_declaration_stays_wrapped(transform):
    code, _ = transform(remove_dead_code, "if (true) { let a = 1; f(a); }")
    assert code == "{leta=1;f(a);}"


def test_removed_loop_body_becomes_empty_statement(transform):
    code, _ = transform(remove_dead_code, "while (x) if (false) y();")
    assert code == "while(x);"


def test_removed_else_if_drops_alternate(transform):
    code, _ = transform(remove_dead_code, "if (a) { f(); } else if (false) { g(); }")
    assert code == "if(a){f();}"


def test_dynamic_tests_are_kept(transform):
    code, count = transform(remove_dead_code, "if (a === 'b') { f(); }")
    assert code == 'if(a==="b"){f();}'
    assert count == 0


def test_static_test(parsed):
    def test_of(source):
        return parsed(source).body[0].expression

    assert static_test(test_of("true")) is True
    assert static_test(test_of("'a' == 'a'")) is True
    assert static_test(test_of("'a' != 'a'")) is False
    assert static_test(test_of("a == 'a'")) is None
