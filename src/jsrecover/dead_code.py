from .astutil import AstTransformer, is_boolean, is_node, is_string

# operator -> whether equal strings make the test true
STRING_COMPARISONS = {'===': True, '==': True, '!==': False, '!=': False}
LEXICAL_DECLARATIONS = ('ClassDeclaration', 'FunctionDeclaration')


def static_test(test):
    """Outcome of a test that can be decided without running it, else None."""
    if is_boolean(test):
        return test.value
    if (is_node(test) and test.type == 'BinaryExpression' and test.operator in STRING_COMPARISONS
            and is_string(test.left) and is_string(test.right)):
        equal = test.left.value == test.right.value
        return equal if STRING_COMPARISONS[test.operator] else not equal
    return None


def declares_lexically(block):
    for statement in block.body:
        if statement.type in LEXICAL_DECLARATIONS: return True
        if statement.type == 'VariableDeclaration' and statement.kind != 'var': return True
    return False


class DeadCodeRemover(AstTransformer):
    def __init__(self):
        self.removed_count = 0

    def visit_ConditionalExpression(self, node):
        node = self.generic_visit(node)
        outcome = static_test(node.test)
        if outcome is None: return node
        self.removed_count += 1
        return node.consequent if outcome else node.alternate

    def visit_IfStatement(self, node):
        node = self.generic_visit(node)
        outcome = static_test(node.test)
        if outcome is None: return node
        self.removed_count += 1
        branch = node.consequent if outcome else node.alternate
        if branch is None: return None
        if branch.type == 'BlockStatement' and not declares_lexically(branch):
            return branch.body
        return branch


def remove_dead_code(tree):
    remover = DeadCodeRemover()
    remover.visit(tree)
    return remover.removed_count
