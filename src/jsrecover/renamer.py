import logging
import re

from esprima import nodes

from .astutil import AstVisitor
from .scope import analyze

logger = logging.getLogger(__name__)

# _0x3f2a, a1_0x3f2a
HEX_NAME = re.compile(r'^_0x[a-f0-9]+$|^a\d+_0x[a-f0-9]+$', re.IGNORECASE)
ROLE_PREFIXES = {'function': 'func', 'param': 'param', 'var': 'var'}


class _IdentifierNames(AstVisitor):
    def __init__(self):
        self.names = set()

    def visit_Identifier(self, node):
        self.names.add(node.name)

    visit_JSXIdentifier = visit_Identifier


class _ShorthandSplitter(AstVisitor):
    """
    `{_0x1}` shares one Identifier between key and value. Give the key its
    own node so that renaming the binding leaves the property name alone.
    """

    def visit_Property(self, node):
        if node.shorthand and not node.computed and node.key.type == 'Identifier' and HEX_NAME.match(node.key.name):
            node.key = nodes.Identifier(node.key.name)
            node.shorthand = False
        self.generic_visit(node)

    def visit_ImportSpecifier(self, node):
        if node.imported is node.local:
            node.imported = nodes.Identifier(node.local.name)

    def visit_ExportSpecifier(self, node):
        if node.exported is node.local:
            node.exported = nodes.Identifier(node.local.name)


class Renamer:
    def __init__(self, taken=()):
        self.taken = set(taken)
        self.counters = {role: 0 for role in ROLE_PREFIXES}
        self.renamed_count = 0

    def next_name(self, kind, component=False):
        prefix = ROLE_PREFIXES[kind]
        if component:
            prefix = prefix.capitalize()  # JSX reads lowercase tags as intrinsic elements
        while True:
            self.counters[kind] += 1
            name = f'{prefix}{self.counters[kind]}'
            if name not in self.taken:
                self.taken.add(name)
                return name

    def rename(self, tree):
        root = analyze(tree)
        for scope in root.walk():
            for binding in list(scope.bindings.values()):
                if not HEX_NAME.match(binding.name): continue
                component = any(ident.type == 'JSXIdentifier' for ident in binding.references)
                new_name = self.next_name(binding.kind, component)
                logger.debug("renaming %s to %s (%d references)", binding.name, new_name, len(binding.references))
                for ident in binding.identifiers:
                    ident.name = new_name
                self.renamed_count += 1
        return self.renamed_count


def rename_hex_identifiers(tree):
    _ShorthandSplitter().visit(tree)
    collector = _IdentifierNames()
    collector.visit(tree)
    return Renamer(collector.names).rename(tree)
