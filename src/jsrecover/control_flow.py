"""Undo switch-based control-flow flattening.

The obfuscator turns a run of statements into a state machine::

    var order = '2|0|1'.split('|'), i = 0;
    while (true) {
        switch (order[i++]) {
            case '0': b(); continue;
            case '1': c(); continue;
            case '2': a(); continue;
        }
        break;
    }

The label string spells out the original statement order, so the loop can be
replaced by the case bodies laid end to end: ``a(); b(); c();``.
"""

from .astutil import AstTransformer, is_node, is_number, is_string, js_number, member_name, node_fields

JUMPS = ('ContinueStatement', 'BreakStatement')


def split_order(node):
    """Labels of ``'<labels>'.split('|')``, else None."""
    if not is_node(node) or node.type != 'CallExpression': return None
    callee = node.callee
    if member_name(callee) != 'split' or not is_string(callee.object): return None
    if len(node.arguments) != 1 or not is_string(node.arguments[0]) or node.arguments[0].value != '|':
        return None
    return callee.object.value.split('|')


def is_state_increment(node):
    return (is_node(node) and node.type == 'UpdateExpression' and node.operator == '++'
            and not node.prefix and node.argument.type == 'Identifier')


def case_label(test):
    if is_string(test): return test.value
    if is_number(test): return js_number(test.value)
    return None


def preceding_siblings(node):
    parent = getattr(node, 'parent', None)
    if parent is None: return []
    for field in node_fields(parent):
        value = getattr(parent, field)
        if isinstance(value, list):
            for position, item in enumerate(value):
                if item is node: return value[:position]
    return []


def declared_order(loop, name):
    """Labels assigned to ``name`` by a declaration that precedes ``loop``."""
    order = None
    for statement in preceding_siblings(loop):
        if statement.type != 'VariableDeclaration': continue
        for declarator in statement.declarations:
            if declarator.id.type == 'Identifier' and declarator.id.name == name:
                order = split_order(declarator.init)
    return order


def dispatch_order(loop, discriminant):
    if discriminant.type != 'MemberExpression' or not discriminant.computed: return None
    if not is_state_increment(discriminant.property): return None
    order = split_order(discriminant.object)
    if order is None and discriminant.object.type == 'Identifier':
        order = declared_order(loop, discriminant.object.name)
    return order


class ControlFlowUnflattener(AstTransformer):
    def __init__(self):
        self.unflattened_count = 0

    def visit_WhileStatement(self, node):
        node = self.generic_visit(node)
        if node.body.type != 'BlockStatement': return node
        switch = next((s for s in node.body.body if s.type == 'SwitchStatement'), None)
        if switch is None: return node
        order = dispatch_order(node, switch.discriminant)
        if not order: return node

        cases = {}
        for case in switch.cases:
            label = case_label(case.test)
            if label is None: continue
            cases[label] = [s for s in case.consequent if s.type not in JUMPS]
        statements = []
        for label in order:
            statements.extend(cases.get(label, []))
        if not statements: return node
        self.unflattened_count += 1
        return statements


def undo_control_flow_flattening(tree):
    unflattener = ControlFlowUnflattener()
    unflattener.visit(tree)
    return unflattener.unflattened_count
