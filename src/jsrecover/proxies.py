from esprima import nodes

from .astutil import AstTransformer, AstVisitor, is_node, is_string, member_name, static_key, string_literal

FUNCTION_TYPES = ('FunctionExpression', 'ArrowFunctionExpression')


def _binding_name(node):
    if node.type == 'Identifier': return node.name
    if node.type in ('RestElement', 'SpreadElement') and node.argument.type == 'Identifier':
        return '...' + node.argument.name
    return None


def _param_names(function):
    return [_binding_name(param) for param in function.params]


def _returned_expression(function):
    body = function.body
    if body.type != 'BlockStatement':
        return body  # concise arrow body
    if len(body.body) == 1 and body.body[0].type == 'ReturnStatement':
        return body.body[0].argument
    return None


def _is_identifier(node, name):
    return is_node(node) and node.type == 'Identifier' and name is not None and node.name == name


def classify_property(value):
    """('string', text), ('binary', op), ('logical', op), ('call', None) or None."""
    if is_string(value):
        return ('string', value.value)
    if not is_node(value) or value.type not in FUNCTION_TYPES:
        return None
    returned = _returned_expression(value)
    if returned is None:
        return None
    params = _param_names(value)
    if returned.type in ('BinaryExpression', 'LogicalExpression') and len(params) >= 2:
        if _is_identifier(returned.left, params[0]) and _is_identifier(returned.right, params[1]):
            kind = 'binary' if returned.type == 'BinaryExpression' else 'logical'
            return (kind, returned.operator)
        return None
    if returned.type == 'CallExpression' and params and _is_identifier(returned.callee, params[0]):
        forwarded = returned.arguments
        if len(forwarded) == len(params) - 1 and all(
                name is not None and _binding_name(arg) == name for arg, name in zip(forwarded, params[1:])):
            return ('call', None)
    return None


class _ProxyObjectFinder(AstVisitor):
    def __init__(self):
        self.proxies = {}

    def visit_VariableDeclarator(self, node):
        self.generic_visit(node)
        if node.id.type != 'Identifier' or getattr(node.init, 'type', '') != 'ObjectExpression': return
        operations = {}
        for prop in node.init.properties:
            if prop.type != 'Property' or prop.kind != 'init': continue
            key = static_key(prop.key, prop.computed)
            operation = classify_property(prop.value) if key is not None else None
            if operation is not None: operations[key] = operation
        if operations:
            self.proxies[node.id.name] = operations


class ProxyFunctionResolver(AstTransformer):
    """
    Inlines calls through wrapper objects such as
    `var p = {add: function (a, b) { return a + b; }}`: `p.add(x, y)` becomes
    `x + y` and `p.name` becomes the string it holds.
    """

    def __init__(self, proxies):
        self.proxies = proxies
        self.replaced_count = 0

    def lookup(self, member):
        if not is_node(member) or member.type != 'MemberExpression': return None
        if member.object.type != 'Identifier' or member.object.name not in self.proxies: return None
        key = member_name(member)
        return self.proxies[member.object.name].get(key) if key is not None else None

    def visit_CallExpression(self, node):
        node = self.generic_visit(node)
        operation = self.lookup(node.callee)
        if operation is None: return node
        kind, operator = operation
        args = node.arguments
        if kind in ('binary', 'logical') and len(args) == 2 and not _has_spread(args):
            self.replaced_count += 1
            return nodes.BinaryExpression(operator, args[0], args[1])
        if kind == 'call' and len(args) >= 1 and args[0].type != 'SpreadElement':
            self.replaced_count += 1
            return nodes.CallExpression(args[0], args[1:])
        return node

    def visit_MemberExpression(self, node):
        node = self.generic_visit(node)
        if _is_written_or_called(node): return node
        operation = self.lookup(node)
        if operation is None or operation[0] != 'string': return node
        self.replaced_count += 1
        return string_literal(operation[1])


def _has_spread(args):
    return any(arg.type == 'SpreadElement' for arg in args)


def _is_written_or_called(member):
    parent = getattr(member, 'parent', None)
    if parent is None: return False
    if parent.type in ('CallExpression', 'NewExpression') and parent.callee is member: return True
    if parent.type == 'AssignmentExpression' and parent.left is member: return True
    if parent.type == 'UpdateExpression': return True
    if parent.type == 'UnaryExpression' and parent.operator == 'delete': return True
    return False


def replace_proxy_functions(tree):
    finder = _ProxyObjectFinder()
    finder.visit(tree)
    if not finder.proxies: return 0
    resolver = ProxyFunctionResolver(finder.proxies)
    resolver.visit(tree)
    return resolver.replaced_count
