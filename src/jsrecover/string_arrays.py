import logging
from dataclasses import dataclass

from . import syntax
from .astutil import (AstTransformer, AstVisitor, detach, is_inside, is_string, js_number,
                      link_parents, member_name, numeric_value, quote_string, referenced_names,
                      string_literal)
from .errors import EvaluationError, GenerationError, ParseError, StructuralRemovalError
from .sandbox import Sandbox

logger = logging.getLogger(__name__)

MIN_TABLE_SIZE = 6
ROTATION_CALLS = {'push', 'shift'}


@dataclass(frozen=True)
class StringArrayResult:
    code: str
    replacements: int
    removed_nodes: int


# --- Tree scans ---

class _InfrastructureIndex(AstVisitor):
    """Everything the resolver needs from the tree, gathered in one walk."""

    def __init__(self):
        self.functions = []
        self.declarators = []
        self.calls = []

    def visit_FunctionDeclaration(self, node):
        if node.id is not None: self.functions.append(node)
        self.generic_visit(node)

    def visit_VariableDeclarator(self, node):
        if node.id.type == 'Identifier' and getattr(node.init, 'type', '') == 'Identifier':
            self.declarators.append(node)
        self.generic_visit(node)

    def visit_CallExpression(self, node):
        if node.callee.type == 'Identifier':
            self.calls.append(node)
        self.generic_visit(node)


class _StringTableFinder(AstVisitor):
    def __init__(self):
        self.found = False

    def visit(self, node):
        if self.found: return
        super().visit(node)

    def visit_ArrayExpression(self, node):
        elements = node.elements
        if len(elements) >= MIN_TABLE_SIZE and all(is_string(element) for element in elements):
            self.found = True
            return
        self.generic_visit(node)


class _MemberCallFinder(AstVisitor):
    def __init__(self):
        self.names = set()

    def visit_CallExpression(self, node):
        name = member_name(node.callee)
        if name is not None: self.names.add(name)
        self.generic_visit(node)


class _LiteralSubstituter(AstTransformer):
    def __init__(self, values):
        self.values = values
        self.count = 0

    def visit_CallExpression(self, node):
        if id(node) in self.values:
            self.count += 1
            return string_literal(self.values[id(node)])
        return self.generic_visit(node)


def has_string_table(function):
    finder = _StringTableFinder()
    finder.visit(function.body)
    return finder.found


def is_iife_statement(statement):
    if statement.type != 'ExpressionStatement': return False
    expression = statement.expression
    return (expression.type == 'CallExpression'
            and expression.callee.type in ('FunctionExpression', 'ArrowFunctionExpression'))


def member_calls(node):
    finder = _MemberCallFinder()
    finder.visit(node)
    return finder.names


def literal_arguments(arguments):
    """JavaScript source for each argument, or None if any is not a plain literal."""
    values = []
    for argument in arguments:
        if is_string(argument):
            values.append(quote_string(argument.value))
            continue
        number = numeric_value(argument)
        if number is None: return None
        values.append(js_number(number))
    return values


# --- Resolution ---

class StringArrayResolver:
    """
    Finds functions that hold a large table of string literals (providers),
    the functions that index into them (decoders) and the optional IIFE that
    rotates the table at startup. Every decoder call whose arguments are
    literals is run in a sandbox against exactly that code, and the call is
    replaced with the string it returns. Infrastructure is removed only when
    no call into it is left behind.
    """

    def __init__(self, tree, code, resolve_rotation=True):
        self.tree = link_parents(tree)
        self.code = code
        self.resolve_rotation = resolve_rotation
        self.index = _InfrastructureIndex()
        self.index.visit(tree)
        self.references = {id(fn): referenced_names(fn.body) for fn in self.index.functions}
        self.values = {}
        self.replacements = 0
        self.removed_nodes = 0

    def run(self):
        providers = [fn for fn in self.index.functions if has_string_table(fn)]
        provider_names = {fn.id.name for fn in providers}
        for provider in providers:
            name = provider.id.name
            decoders = [fn for fn in self.index.functions
                        if fn.id.name not in provider_names and name in self.references[id(fn)]]
            if not decoders: continue
            rotation = self.find_rotation(name)
            if rotation is not None and not self.resolve_rotation:
                # without its rotation the table would decode to the wrong strings
                logger.debug("skipping rotated string table %s", name)
                continue
            aliases = [self.aliases_of(decoder.id.name) for decoder in decoders]
            fully_resolved = [self.resolve_pair(provider, rotation, decoder, decoder_aliases)
                              for decoder, decoder_aliases in zip(decoders, aliases)]
            if all(fully_resolved):
                self.remove_infrastructure(provider, rotation, decoders, set().union(*aliases))

        substituter = _LiteralSubstituter(self.values)
        substituter.visit(self.tree)
        self.replacements = substituter.count
        return self

    def find_rotation(self, name):
        for statement in self.tree.body:
            if not is_iife_statement(statement): continue
            if name in referenced_names(statement) and ROTATION_CALLS <= member_calls(statement):
                return statement
        return None

    def aliases_of(self, name):
        aliases = {name}
        grew = True
        while grew:
            grew = False
            for declarator in self.index.declarators:
                if declarator.init.name in aliases and declarator.id.name not in aliases:
                    aliases.add(declarator.id.name)
                    grew = True
        return aliases

    def resolve_pair(self, provider, rotation, decoder, aliases):
        """Resolve every call of one decoder; True if none was left unresolved."""
        infrastructure = [node for node in (provider, rotation, decoder) if node is not None]
        calls = [call for call in self.index.calls
                 if call.callee.name in aliases and id(call) not in self.values
                 and not is_inside(call, infrastructure) and self.attached(call)]
        if not calls: return False

        fragment = '\n'.join(syntax.source_of(node, self.code) for node in infrastructure)
        arguments = [(call, literal_arguments(call.arguments)) for call in calls]
        unresolved = sum(1 for _, args in arguments if args is None)
        resolvable = [(call, args) for call, args in arguments if args is not None]
        if resolvable:
            with Sandbox() as sandbox:
                unresolved += self.evaluate_calls(sandbox, fragment, decoder.id.name, resolvable)

        if unresolved:
            logger.debug("%d call(s) of %s left unresolved", unresolved, decoder.id.name)
            return False
        return True

    def evaluate_calls(self, sandbox, fragment, decoder_name, calls):
        """Record the string each call returns; the number of calls that gave none."""
        cache = {}
        failed = 0
        for call, args in calls:
            key = tuple(args)
            if key not in cache:
                try:
                    cache[key] = sandbox.call_in_isolation(fragment, decoder_name, args)
                except EvaluationError:
                    cache[key] = None
            value = cache[key]
            if not isinstance(value, str):
                failed += 1
                continue
            logger.debug("resolved %s(%s) to %r", call.callee.name, ', '.join(args), value)
            self.values[id(call)] = value
        return failed

    def remove_infrastructure(self, provider, rotation, decoders, aliases):
        infrastructure = [node for node in (provider, rotation, *decoders) if node is not None]
        for node in infrastructure:
            self.remove(node)
        for declarator in self.index.declarators:
            if declarator.init.name in aliases and not is_inside(declarator, infrastructure):
                self.remove_declarator(declarator)

    def attached(self, node):
        while node.parent is not None:
            node = node.parent
        return node is self.tree

    def remove(self, node):
        try:
            detach(node)
        except StructuralRemovalError as e:
            logger.debug("could not remove %s: %s", node.type, e)
            return
        self.removed_nodes += 1

    def remove_declarator(self, declarator):
        declaration = declarator.parent
        if declaration is not None and len(declaration.declarations) == 1:
            self.remove(declaration)
        else:
            self.remove(declarator)


def resolve_string_arrays(code, resolve_rotation=True):
    """Inline the strings behind string-array decoders. Never raises on bad input."""
    try:
        tree = syntax.parse(code)
    except ParseError as e:
        logger.warning("string array resolution skipped: %s", e)
        return StringArrayResult(code, 0, 0)

    resolver = StringArrayResolver(tree, code, resolve_rotation).run()
    if not resolver.replacements and not resolver.removed_nodes:
        return StringArrayResult(code, 0, 0)
    try:
        new_code = syntax.generate(tree)
    except GenerationError as e:
        logger.warning("string array resolution discarded: %s", e)
        return StringArrayResult(code, 0, 0)
    return StringArrayResult(new_code, resolver.replacements, resolver.removed_nodes)
