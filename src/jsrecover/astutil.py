import json
import math
import re

from esprima import nodes

from .errors import StructuralRemovalError

SKIP_FIELDS = ('type', 'loc', 'range', 'parent', 'errors', 'comments', 'tokens')
IDENTIFIER_RE = re.compile(r'^[a-zA-Z_$][a-zA-Z0-9_$]*$')


def is_node(value):
    return isinstance(value, nodes.Node) and value.type is not None


def node_fields(node):
    return [field for field in vars(node) if field not in SKIP_FIELDS]


def iter_children(node):
    for field in node_fields(node):
        value = getattr(node, field)
        if is_node(value):
            yield value
        elif isinstance(value, list):
            for child in value:
                if is_node(child): yield child


def link_children(node):
    for child in iter_children(node):
        setattr(child, 'parent', node)


def is_statement(node):
    return is_node(node) and (node.type.endswith('Statement') or node.type.endswith('Declaration'))


# --- AST traversal base classes ---
class AstVisitor:
    def visit(self, node):
        if node is None: return
        if isinstance(node, list):
            for item in node: self.visit(item)
            return
        if not is_node(node): return
        link_children(node)
        method_name = 'visit_' + node.type
        visitor = getattr(self, method_name, self.generic_visit)
        visitor(node)

    def generic_visit(self, node):
        for field in node_fields(node):
            value = getattr(node, field)
            if value is None: continue
            self.visit(value)


class AstTransformer(AstVisitor):
    """
    Rewrites a tree in place. A visit_* method returns the replacement node,
    None to delete a node from its list, or a list of statements to splice
    into the enclosing statement list.
    """

    def visit(self, node):
        if node is None: return None
        if isinstance(node, list):
            new_list = []
            for item in node:
                if item is None:
                    new_list.append(None)  # array holes
                    continue
                new_item = self.visit(item)
                if new_item is None: continue
                if isinstance(new_item, list): new_list.extend(new_item)
                else: new_list.append(new_item)
            return new_list
        if not is_node(node): return node
        link_children(node)
        method_name = 'visit_' + node.type
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node):
        for field in node_fields(node):
            old_value = getattr(node, field)
            if old_value is None: continue
            new_value = self.visit(old_value)
            if not isinstance(old_value, list):
                new_value = _fit_single_slot(field, old_value, new_value)
            if new_value is not old_value:
                setattr(node, field, new_value)
                if is_node(new_value): setattr(new_value, 'parent', node)
        return node


def _fit_single_slot(field, old_value, new_value):
    # A statement slot outside of a list (loop body, if branch) cannot take
    # a spliced list or vanish outright.
    if isinstance(new_value, list):
        return nodes.BlockStatement(new_value)
    if new_value is None and is_statement(old_value):
        return None if field == 'alternate' else nodes.EmptyStatement()
    return new_value


def link_parents(tree):
    AstVisitor().visit(tree)
    return tree


def detach(node):
    """Remove a node from the statement or declarator list that holds it."""
    parent = getattr(node, 'parent', None)
    if parent is None:
        raise StructuralRemovalError(f'{node.type} node has no parent')
    for field in node_fields(parent):
        value = getattr(parent, field)
        if isinstance(value, list) and any(item is node for item in value):
            value[:] = [item for item in value if item is not node]
            node.parent = None
            return parent
    raise StructuralRemovalError(f'{node.type} node is not held by its {parent.type} parent')


def is_inside(node, ancestors):
    parent = getattr(node, 'parent', None)
    while parent is not None:
        if any(parent is ancestor for ancestor in ancestors): return True
        parent = getattr(parent, 'parent', None)
    return False


# --- Literal helpers ---

def is_string(node):
    return is_node(node) and node.type == 'Literal' and isinstance(node.value, str) and node.regex is None


def is_number(node):
    return (is_node(node) and node.type == 'Literal' and isinstance(node.value, (int, float))
            and not isinstance(node.value, bool))


def is_boolean(node):
    return is_node(node) and node.type == 'Literal' and isinstance(node.value, bool)


def numeric_value(node):
    """Value of a numeric literal or of unary minus over one, else None."""
    if is_number(node):
        return node.value
    if is_node(node) and node.type == 'UnaryExpression' and node.operator == '-' and is_number(node.argument):
        return -node.argument.value
    return None


def js_number(value):
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value) if isinstance(value, int) else repr(value)


def quote_string(value):
    return json.dumps(value, ensure_ascii=False)


def string_literal(value):
    return nodes.Literal(value, quote_string(value))


def boolean_literal(value):
    return nodes.Literal(value, 'true' if value else 'false')


def number_literal(value):
    # the generator refuses negative numeric literals
    if value < 0 or (value == 0 and math.copysign(1.0, value) < 0):
        return nodes.UnaryExpression('-', number_literal(-value))
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return nodes.Literal(value, js_number(value))


def static_key(key, computed):
    """Name of a property key when it is known without evaluation."""
    if is_string(key): return key.value
    if is_node(key) and key.type == 'Identifier' and not computed: return key.name
    return None


def member_name(node):
    if not is_node(node) or node.type != 'MemberExpression': return None
    return static_key(node.property, node.computed)


class _NameCollector(AstVisitor):
    def __init__(self):
        self.names = set()

    def visit_Identifier(self, node):
        self.names.add(node.name)

    def visit_MemberExpression(self, node):
        self.visit(node.object)
        if node.computed: self.visit(node.property)

    def visit_Property(self, node):
        if node.computed: self.visit(node.key)
        self.visit(node.value)

    def visit_MethodDefinition(self, node):
        if node.computed: self.visit(node.key)
        self.visit(node.value)


def referenced_names(node):
    """Identifier names used in a subtree, ignoring plain property names."""
    collector = _NameCollector()
    collector.visit(node)
    return collector.names
