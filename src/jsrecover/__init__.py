from .deobfuscator import MAX_PASSES, DeobfuscationResult, DeobfuscatorOptions, deobfuscate
from .errors import (ConfigurationError, DeobfuscationError, EvaluationError, GenerationError, ParseError,
                     StructuralRemovalError)
from .obfuscator import ObfuscationResult, ObfuscatorOptions, obfuscate_code

__version__ = '0.1.0'

__all__ = [
    'MAX_PASSES',
    'DeobfuscationResult',
    'DeobfuscatorOptions',
    'deobfuscate',
    'ObfuscationResult',
    'ObfuscatorOptions',
    'obfuscate_code',
    'DeobfuscationError',
    'ParseError',
    'GenerationError',
    'EvaluationError',
    'StructuralRemovalError',
    'ConfigurationError',
]
