import re

from .astutil import AstTransformer, is_string, quote_string

# an unescaped backslash followed by x or u
ESCAPE_RE = re.compile(r'(?<!\\)(?:\\\\)*\\[xu]', re.IGNORECASE)


class EscapeDecoder(AstTransformer):
    """Rewrites '\\x48\\x69' style string literals to their plain spelling."""

    def __init__(self):
        self.decoded_count = 0

    def visit_Literal(self, node):
        if is_string(node) and isinstance(node.raw, str) and ESCAPE_RE.search(node.raw):
            node.raw = quote_string(node.value)
            self.decoded_count += 1
        return node


def decode_hex_unicode(tree):
    decoder = EscapeDecoder()
    decoder.visit(tree)
    return decoder.decoded_count
