import logging

from py_mini_racer import MiniRacer

from .errors import EvaluationError

logger = logging.getLogger(__name__)

EVAL_TIMEOUT_MS = 1000
CONSOLE_STUB = "var console = {log: function(){}, warn: function(){}, error: function(){}, info: function(){}, debug: function(){}};"


class Sandbox:
    """
    A private V8 context. Nothing from the analysed program is loaded into it
    except the fragments handed to evaluate(), and every evaluation is bounded
    by a timeout.
    """

    def __init__(self, timeout_ms=EVAL_TIMEOUT_MS):
        self.timeout_ms = timeout_ms
        self.js_ctx = MiniRacer()
        self.js_ctx.eval(CONSOLE_STUB)

    def evaluate(self, script):
        try:
            return self.js_ctx.eval(script, timeout=self.timeout_ms)
        except Exception as e:
            logger.debug("sandbox evaluation failed: %s", e)
            raise EvaluationError(f'{type(e).__name__}: {e}') from e

    def call_in_isolation(self, fragment, function_name, args):
        """Run `fragment` inside a fresh function scope and return function_name(*args)."""
        script = f"(function () {{\n{fragment}\nreturn {function_name}({', '.join(args)});\n}})()"
        return self.evaluate(script)


    def close(self):
        self.js_ctx.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
