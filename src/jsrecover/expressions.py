import math
import operator

from esprima import nodes

from .astutil import (AstTransformer, boolean_literal, is_node, is_number, is_string, js_number,
                      number_literal, numeric_value, string_literal)

ARITHMETIC = {
    '+': operator.add,
    '-': operator.sub,
    '*': operator.mul,
    '/': operator.truediv,
}


def _is_empty_array(node):
    return is_node(node) and node.type == 'ArrayExpression' and not node.elements


def _is_negated_empty_array(node):
    return is_node(node) and node.type == 'UnaryExpression' and node.operator == '!' and _is_empty_array(node.argument)


def fold_arithmetic(op, left, right):
    """JavaScript double arithmetic on two numbers, or None if it is not finite."""
    if op == '/' and right == 0: return None
    try:
        result = ARITHMETIC[op](float(left), float(right))
    except OverflowError:
        return None
    return result if math.isfinite(result) else None


class ExpressionSimplifier(AstTransformer):
    def __init__(self):
        self.simplified_count = 0

    def visit_UnaryExpression(self, node):
        # !![] has to be seen before its inner ![] is folded
        if node.operator == '!' and _is_negated_empty_array(node.argument):
            self.simplified_count += 1
            return boolean_literal(True)
        node = self.generic_visit(node)
        if node.operator == '!' and _is_empty_array(node.argument):
            self.simplified_count += 1
            return boolean_literal(False)
        if node.operator == 'void' and is_number(node.argument) and node.argument.value == 0:
            self.simplified_count += 1
            return nodes.Identifier('undefined')
        return node

    def visit_BinaryExpression(self, node):
        node = self.generic_visit(node)
        left, right = numeric_value(node.left), numeric_value(node.right)
        if node.operator in ARITHMETIC and left is not None and right is not None:
            result = fold_arithmetic(node.operator, left, right)
            if result is not None:
                self.simplified_count += 1
                return number_literal(result)
        if node.operator == '+' and is_string(node.left) and is_string(node.right):
            self.simplified_count += 1
            return string_literal(node.left.value + node.right.value)
        return node

    def visit_Literal(self, node):
        if is_number(node) and isinstance(node.raw, str) and node.raw[:2].lower() == '0x':
            node.raw = js_number(node.value)
            self.simplified_count += 1
        return node


def simplify_expressions(tree):
    simplifier = ExpressionSimplifier()
    simplifier.visit(tree)
    return simplifier.simplified_count
