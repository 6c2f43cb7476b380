from jsrecover.expressions import fold_arithmetic, simplify_expressions


def test_folds_nested_arithmetic(transform):
    code, count = transform(simplify_expressions, "x = 1 + 2 * 3;")
    assert code == "x=7;"
    assert count == 2


def test_negative_result_is_emitted_as_unary_minus(transform):
    code, count = transform(simplify_expressions, "x = 5 - 8;")
    assert code == "x=-3;"
    assert count == 1


def test_unary_minus_operands_fold(transform):
    code, _ = transform(simplify_expressions, "x = -4 + 10;")
    assert code == "x=6;"


def test_fractional_division(parsed):
    tree = parsed("x = 7 / 2;")
    assert simplify_expressions(tree) == 1
    assert tree.body[0].expression.right.value == 3.5


def test_boolean_and_void_idioms(transform):
    code, count = transform(simplify_expressions, "a = !![]; b = ![]; c = void 0;")
    assert code == "a=true;b=false;c=undefined;"
    assert count == 3


def test_hex_literal_is_normalized(parsed):
    tree = parsed("x = 0x10;")
    assert simplify_expressions(tree) == 1
    literal = tree.body[0].expression.right
    assert literal.value == 16
    assert literal.raw == "16"


def test_adjacent_strings_are_joined(transform):
    code, count = transform(simplify_expressions, "x = 'Hello, ' + 'World';")
    assert code == 'x="Hello,World";'
    assert count == 1


def test_division_by_zero_is_left_alone(transform):
    code, count = transform(simplify_expressions, "x = 1 / 0;")
    assert code == "x=1/0;"
    assert count == 0


def test_non_literal_operands_are_left_alone(transform):
    code, count = transform(simplify_expressions, "x = a + 1;")
    assert code == "x=a+1;"
    assert count == 0


def test_fold_arithmetic():
    assert fold_arithmetic("*", 6, 7) == 42
    assert fold_arithmetic("/", 1, 0) is None
    assert fold_arithmetic("*", 1e308, 10) is None
