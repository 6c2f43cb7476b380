"""Pipeline controller.

:func:`deobfuscate` runs the string-array resolver once, then the tree
matchers until they stop finding work (at most :data:`MAX_PASSES` passes),
then the renamer and finally the beautifier. Every stage is contained: a
failure is written to ``errors`` and the code from before that stage is kept.
"""

from __future__ import annotations

import logging
import time
from collections import namedtuple
from dataclasses import asdict, dataclass, field, fields
from typing import List, Mapping, Optional

from . import syntax
from .control_flow import undo_control_flow_flattening
from .dead_code import remove_dead_code
from .errors import ConfigurationError, GenerationError, ParseError
from .expressions import simplify_expressions
from .literals import decode_hex_unicode
from .object_access import simplify_object_access
from .proxies import replace_proxy_functions
from .renamer import rename_hex_identifiers
from .string_arrays import resolve_string_arrays

logger = logging.getLogger(__name__)

MAX_PASSES = 10


@dataclass(frozen=True)
class DeobfuscatorOptions:
    unpack_string_arrays: bool = True
    resolve_array_rotation: bool = True
    replace_proxy_functions: bool = True
    simplify_expressions: bool = True
    remove_dead_code: bool = True
    undo_control_flow_flattening: bool = True
    decode_hex_unicode: bool = True
    simplify_object_access: bool = True
    rename_variables: bool = True
    beautify_output: bool = True

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping] = None) -> "DeobfuscatorOptions":
        """Build options from snake_case or camelCase keys, as sent by JSON clients."""
        if mapping is None:
            return cls()
        known = {f.name: f.name for f in fields(cls)}
        known.update({camel_case(name): name for name in list(known)})
        values = {}
        for key, value in mapping.items():
            if key not in known:
                raise ConfigurationError(f'Unknown option: {key}')
            if not isinstance(value, bool):
                raise ConfigurationError(f'Option {key} must be a boolean, got {type(value).__name__}')
            values[known[key]] = value
        return cls(**values)

    def to_dict(self):
        return asdict(self)


def camel_case(name):
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


@dataclass(frozen=True)
class DeobfuscationResult:
    code: str
    time_ms: float
    transforms_applied: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            'code': self.code,
            'timeMs': self.time_ms,
            'transformsApplied': list(self.transforms_applied),
            'errors': list(self.errors),
        }


Matcher = namedtuple('Matcher', ['option', 'label', 'run', 'message'])

# fixed pass order
MATCHERS = (
    Matcher('simplify_expressions', 'Expression simplification', simplify_expressions, 'Simplified {} expressions'),
    Matcher('replace_proxy_functions', 'Proxy replacement', replace_proxy_functions, 'Replaced {} proxy function calls'),
    Matcher('remove_dead_code', 'Dead code removal', remove_dead_code, 'Removed {} dead code branches'),
    Matcher('undo_control_flow_flattening', 'Control flow unflattening', undo_control_flow_flattening,
            'Unflattened {} control flow blocks'),
    Matcher('simplify_object_access', 'Object access simplification', simplify_object_access,
            'Simplified {} object accesses'),
    Matcher('decode_hex_unicode', 'Hex/unicode decoding', decode_hex_unicode, 'Decoded {} hex/unicode escapes'),
)


class Pipeline:
    """State of one deobfuscate() call."""

    def __init__(self, source: str, options: DeobfuscatorOptions):
        self.code = source
        self.options = options
        self.transforms: List[str] = []
        self.errors: List[str] = []

    def record(self, message):
        if message not in self.transforms:
            self.transforms.append(message)

    def fail(self, message):
        logger.warning(message)
        self.errors.append(message)

    def run(self):
        if self.options.unpack_string_arrays:
            self.resolve_strings()
        self.run_matchers()
        if self.options.rename_variables:
            self.rename()
        if self.options.beautify_output:
            self.beautify()

    def resolve_strings(self):
        try:
            result = resolve_string_arrays(self.code, self.options.resolve_array_rotation)
        except Exception as e:
            self.fail(f'String resolution error: {e}')
            return
        if result.replacements > 0:
            self.code = result.code
            self.record(f'Resolved {result.replacements} encoded strings')
            if result.removed_nodes > 0:
                self.record(f'Removed {result.removed_nodes} decoder infrastructure nodes')

    def run_matchers(self):
        matchers = [m for m in MATCHERS if getattr(self.options, m.option)]
        if not matchers: return
        totals = {m.option: 0 for m in matchers}

        for pass_number in range(1, MAX_PASSES + 1):
            try:
                tree = syntax.parse(self.code)
            except ParseError as e:
                self.fail(f'Parse error (pass {pass_number}): {e}')
                break

            counts = self.run_pass(tree, matchers, pass_number)
            if counts is None:
                if not matchers: break
                continue  # retry from the last good text without the failed matcher
            if not any(counts.values()): break

            try:
                new_code = syntax.generate(tree)
            except GenerationError as e:
                self.fail(f'Generation error (pass {pass_number}): {e}')
                break
            for option, count in counts.items():
                totals[option] += count
            logger.debug("pass %d: %s", pass_number, counts)
            if new_code == self.code: break
            self.code = new_code

        for matcher in MATCHERS:
            if totals.get(matcher.option):
                self.record(matcher.message.format(totals[matcher.option]))

    def run_pass(self, tree, matchers, pass_number):
        """Change counts of one pass, or None if a matcher failed and was dropped."""
        counts = {}
        for matcher in list(matchers):
            try:
                counts[matcher.option] = matcher.run(tree)
            except Exception as e:
                self.fail(f'{matcher.label} error (pass {pass_number}): {e}')
                matchers.remove(matcher)
                return None
        return counts

    def rename(self):
        try:
            tree = syntax.parse(self.code)
            count = rename_hex_identifiers(tree)
            if count > 0:
                self.code = syntax.generate(tree)
                self.record(f'Renamed {count} variables')
        except Exception as e:
            self.fail(f'Variable rename error: {e}')

    def beautify(self):
        try:
            tree = syntax.parse(self.code)
            self.code = syntax.beautify(syntax.generate(tree))
        except Exception as e:
            logger.debug("beautification skipped: %s", e)
            return
        self.record('Beautified output')


def deobfuscate(source: str, options: Optional[DeobfuscatorOptions] = None) -> DeobfuscationResult:
    """Recover readable code from obfuscated ``source``. Never raises."""
    started = time.perf_counter()
    pipeline = Pipeline(source, options or DeobfuscatorOptions())
    try:
        pipeline.run()
    except Exception as e:
        logger.exception("deobfuscation aborted")
        pipeline.errors.append(f'Fatal error: {e}')
    elapsed = (time.perf_counter() - started) * 1000
    return DeobfuscationResult(pipeline.code, elapsed, pipeline.transforms, pipeline.errors)
