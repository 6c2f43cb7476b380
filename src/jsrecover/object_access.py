from esprima import nodes

from .astutil import IDENTIFIER_RE, AstTransformer, is_string


class ObjectAccessSimplifier(AstTransformer):
    """Turns obj['name'] into obj.name when name is a plain identifier."""

    def __init__(self):
        self.simplified_count = 0

    def visit_MemberExpression(self, node):
        node = self.generic_visit(node)
        if node.computed and is_string(node.property) and IDENTIFIER_RE.fullmatch(node.property.value):
            node.property = nodes.Identifier(node.property.value)
            node.computed = False
            self.simplified_count += 1
        return node


def simplify_object_access(tree):
    simplifier = ObjectAccessSimplifier()
    simplifier.visit(tree)
    return simplifier.simplified_count
