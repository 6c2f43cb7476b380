"""Forward direction: obfuscate clean code with javascript-obfuscator.

The browser bundle of javascript-obfuscator is evaluated in a sandbox and
called with the configuration built from :class:`ObfuscatorOptions`. This
module only translates options; all of the obfuscation happens in the bundle.
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass, fields
from typing import Mapping, Optional

from .deobfuscator import camel_case
from .errors import ConfigurationError
from .sandbox import Sandbox

logger = logging.getLogger(__name__)

BUNDLE_ENV = 'JSRECOVER_OBFUSCATOR_BUNDLE'
OBFUSCATE_TIMEOUT_MS = 30000
ENCODINGS = ('none', 'base64', 'rc4')
NAME_GENERATORS = ('hexadecimal', 'mangled')
GLOBAL_SHIMS = "var window = globalThis; var self = globalThis;"


@dataclass(frozen=True)
class ObfuscatorOptions:
    string_array_encoding: str = 'base64'
    string_array_rotation: bool = True
    string_array_shuffle: bool = True
    control_flow_flattening: bool = False
    control_flow_flattening_threshold: float = 0.75
    dead_code_injection: bool = False
    dead_code_injection_threshold: float = 0.4
    identifier_names_generator: str = 'hexadecimal'
    unicode_escape_sequence: bool = False
    disable_console_output: bool = False
    self_defending: bool = False
    compact: bool = True
    numbers_to_expressions: bool = False

    def __post_init__(self):
        if self.string_array_encoding not in ENCODINGS:
            raise ConfigurationError(f'string_array_encoding must be one of {", ".join(ENCODINGS)}')
        if self.identifier_names_generator not in NAME_GENERATORS:
            raise ConfigurationError(f'identifier_names_generator must be one of {", ".join(NAME_GENERATORS)}')
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name.endswith('_threshold'):
                if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 1:
                    raise ConfigurationError(f'{f.name} must be a number between 0 and 1')
            elif f.type in ('bool', bool) and not isinstance(value, bool):
                raise ConfigurationError(f'{f.name} must be a boolean')

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping] = None) -> "ObfuscatorOptions":
        if mapping is None:
            return cls()
        known = {f.name: f.name for f in fields(cls)}
        known.update({camel_case(name): name for name in list(known)})
        known['variableRenaming'] = 'identifier_names_generator'
        unknown = [key for key in mapping if key not in known]
        if unknown:
            raise ConfigurationError(f'Unknown option: {unknown[0]}')
        return cls(**{known[key]: value for key, value in mapping.items()})

    def to_config(self):
        """The javascript-obfuscator configuration object for these options."""
        return {
            'compact': self.compact,
            'controlFlowFlattening': self.control_flow_flattening,
            'controlFlowFlatteningThreshold': self.control_flow_flattening_threshold if self.control_flow_flattening else 0,
            'deadCodeInjection': self.dead_code_injection,
            'deadCodeInjectionThreshold': self.dead_code_injection_threshold,
            'identifierNamesGenerator': self.identifier_names_generator,
            'numbersToExpressions': self.numbers_to_expressions,
            'selfDefending': self.self_defending,
            'stringArray': True,
            'stringArrayEncoding': [] if self.string_array_encoding == 'none' else [self.string_array_encoding],
            'stringArrayRotate': self.string_array_rotation,
            'stringArrayShuffle': self.string_array_shuffle,
            'unicodeEscapeSequence': self.unicode_escape_sequence,
            'disableConsoleOutput': self.disable_console_output,
            'target': 'browser',
        }


@dataclass(frozen=True)
class ObfuscationResult:
    code: str
    time_ms: float
    error: Optional[str] = None

    def to_dict(self):
        result = {'code': self.code, 'timeMs': self.time_ms}
        if self.error is not None:
            result['error'] = self.error
        return result


def load_bundle(bundle_path=None):
    path = bundle_path or os.environ.get(BUNDLE_ENV)
    if not path:
        raise FileNotFoundError(f'javascript-obfuscator bundle not configured; set {BUNDLE_ENV}')
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def obfuscate_code(source: str, options: Optional[ObfuscatorOptions] = None, bundle_path=None) -> ObfuscationResult:
    """Obfuscate ``source``. Failures are reported in the result, never raised."""
    started = time.perf_counter()
    options = options or ObfuscatorOptions()
    try:
        bundle = load_bundle(bundle_path)
        script = (f"JavaScriptObfuscator.obfuscate({json.dumps(source)}, "
                  f"{json.dumps(options.to_config())}).getObfuscatedCode()")
        with Sandbox(timeout_ms=OBFUSCATE_TIMEOUT_MS) as sandbox:
            sandbox.evaluate(GLOBAL_SHIMS)
            sandbox.evaluate(bundle)
            code = sandbox.evaluate(script)
        if not isinstance(code, str):
            raise TypeError('obfuscator returned no code')
    except Exception as e:
        logger.warning("obfuscation failed: %s", e)
        return ObfuscationResult('', (time.perf_counter() - started) * 1000, str(e) or 'Obfuscation failed')
    return ObfuscationResult(code, (time.perf_counter() - started) * 1000)
