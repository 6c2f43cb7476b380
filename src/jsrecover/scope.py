"""Lexical scope analysis over an esprima tree.

The analysis runs in two walks. The first creates a :class:`Scope` for every
scope-introducing node and declares the bindings found there (``var`` and
function declarations are hoisted to the nearest function scope, ``let``,
``const`` and ``class`` stay in their block). The second walk resolves every
identifier in reference position to the innermost scope that declares it.
Identifiers that never resolve are implicit globals and are left out.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .astutil import AstVisitor


class Binding:
    def __init__(self, name: str, kind: str, scope: "Scope"):
        self.name = name
        self.kind = kind  # 'function', 'param' or 'var'
        self.scope = scope
        self.declarations: List = []
        self.references: List = []

    @property
    def identifiers(self):
        return self.declarations + self.references

    def __repr__(self):
        return f'<Binding {self.kind} {self.name} refs={len(self.references)}>'


class Scope:
    def __init__(self, node, parent: Optional["Scope"], is_function: bool):
        self.node = node
        self.parent = parent
        self.is_function = is_function
        self.bindings: Dict[str, Binding] = {}
        self.children: List["Scope"] = []
        if parent is not None:
            parent.children.append(self)

    def function_scope(self) -> "Scope":
        scope = self
        while not scope.is_function:
            scope = scope.parent
        return scope

    def declare(self, identifier, kind: str) -> Binding:
        binding = self.bindings.get(identifier.name)
        if binding is None:
            binding = self.bindings[identifier.name] = Binding(identifier.name, kind, self)
        elif kind == 'function':
            binding.kind = kind
        binding.declarations.append(identifier)
        return binding

    def lookup(self, name: str) -> Optional[Binding]:
        scope = self
        while scope is not None:
            if name in scope.bindings:
                return scope.bindings[name]
            scope = scope.parent
        return None

    def walk(self):
        """This scope and every nested scope, in source order."""
        yield self
        for child in self.children:
            yield from child.walk()


def pattern_identifiers(pattern):
    """Identifier nodes bound by a declaration target or parameter."""
    if pattern is None:
        return []
    if pattern.type == 'Identifier':
        return [pattern]
    if pattern.type == 'AssignmentPattern':
        return pattern_identifiers(pattern.left)
    if pattern.type == 'RestElement':
        return pattern_identifiers(pattern.argument)
    if pattern.type == 'ArrayPattern':
        return [ident for element in pattern.elements for ident in pattern_identifiers(element)]
    if pattern.type == 'ObjectPattern':
        found = []
        for prop in pattern.properties:
            found.extend(pattern_identifiers(prop.value if prop.type == 'Property' else prop))
        return found
    return []


class ScopeAnalyzer(AstVisitor):
    def __init__(self):
        self.root: Optional[Scope] = None
        self.scope: Optional[Scope] = None
        self.resolving = False
        self._scopes: Dict[int, Scope] = {}
        self._declared = set()

    def analyze(self, program) -> Scope:
        self.visit(program)
        self.resolving = True
        self.visit(program)
        return self.root

    # --- bookkeeping ---

    def _enter(self, node, is_function):
        previous = self.scope
        if self.resolving:
            self.scope = self._scopes[id(node)]
        else:
            self.scope = self._scopes[id(node)] = Scope(node, previous, is_function)
        return previous

    def _declare(self, scope, pattern, kind):
        if self.resolving: return
        for identifier in pattern_identifiers(pattern):
            scope.declare(identifier, kind)
            self._declared.add(id(identifier))

    # --- scopes ---

    def visit_Program(self, node):
        self._enter(node, True)
        self.root = self.scope
        self.visit(node.body)

    def _visit_function(self, node):
        previous = self._enter(node, True)
        if node.type == 'FunctionExpression' and node.id is not None:
            self._declare(self.scope, node.id, 'var')
        for param in node.params:
            self._declare(self.scope, param, 'param')
        self.visit(node.params)
        if node.body.type == 'BlockStatement':
            self.visit(node.body.body)
        else:
            self.visit(node.body)
        self.scope = previous

    def visit_FunctionDeclaration(self, node):
        if node.id is not None:
            self._declare(self.scope, node.id, 'function')
        self._visit_function(node)

    def visit_FunctionExpression(self, node):
        self._visit_function(node)

    def visit_ArrowFunctionExpression(self, node):
        self._visit_function(node)

    def _visit_block(self, node):
        previous = self._enter(node, False)
        self.generic_visit(node)
        self.scope = previous

    visit_BlockStatement = _visit_block
    visit_ForStatement = _visit_block
    visit_ForInStatement = _visit_block
    visit_ForOfStatement = _visit_block
    visit_SwitchStatement = _visit_block

    def visit_CatchClause(self, node):
        previous = self._enter(node, False)
        self._declare(self.scope, node.param, 'var')
        self.visit(node.param)
        self.visit(node.body.body)
        self.scope = previous

    # --- declarations ---

    def visit_VariableDeclaration(self, node):
        target = self.scope.function_scope() if node.kind == 'var' else self.scope
        for declarator in node.declarations:
            self._declare(target, declarator.id, 'var')
        self.visit(node.declarations)

    def visit_ClassDeclaration(self, node):
        if node.id is not None:
            self._declare(self.scope, node.id, 'var')
        self.visit(node.superClass)
        self.visit(node.body)

    def visit_ClassExpression(self, node):
        # the name of a class expression is only visible inside the class
        previous = self._enter(node, False)
        if node.id is not None:
            self._declare(self.scope, node.id, 'var')
        self.visit(node.superClass)
        self.visit(node.body)
        self.scope = previous

    def visit_ImportDeclaration(self, node):
        for specifier in node.specifiers:
            self._declare(self.root, specifier.local, 'var')

    # --- references ---

    def visit_Identifier(self, node):
        if not self.resolving or id(node) in self._declared: return
        binding = self.scope.lookup(node.name)
        if binding is not None:
            binding.references.append(node)

    def visit_MemberExpression(self, node):
        self.visit(node.object)
        if node.computed: self.visit(node.property)

    def visit_Property(self, node):
        if node.computed: self.visit(node.key)
        self.visit(node.value)

    def visit_MethodDefinition(self, node):
        if node.computed: self.visit(node.key)
        self.visit(node.value)

    def visit_LabeledStatement(self, node):
        self.visit(node.body)

    def visit_BreakStatement(self, node):
        pass

    def visit_ContinueStatement(self, node):
        pass

    def visit_MetaProperty(self, node):
        pass

    def visit_ExportSpecifier(self, node):
        self.visit(node.local)

    # JSX tag names starting with a lowercase letter are intrinsic elements
    def _resolve_tag(self, name):
        while name is not None and name.type == 'JSXMemberExpression':
            name = name.object
        if name is not None and name.type == 'JSXIdentifier' and not name.name[:1].islower():
            self.visit_Identifier(name)

    def visit_JSXOpeningElement(self, node):
        self._resolve_tag(node.name)
        self.visit(node.attributes)

    def visit_JSXClosingElement(self, node):
        self._resolve_tag(node.name)


def analyze(program) -> Scope:
    return ScopeAnalyzer().analyze(program)
