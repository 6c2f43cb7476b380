import os

from flask import Flask, jsonify, request

from .deobfuscator import DeobfuscatorOptions, deobfuscate
from .errors import ConfigurationError
from .obfuscator import ObfuscatorOptions, obfuscate_code


def create_app(bundle_path=None):
    app = Flask(__name__)
    app.config['OBFUSCATOR_BUNDLE'] = bundle_path

    def read_request():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise ConfigurationError('Expected a JSON object')
        code = payload.get('code', '')
        if not isinstance(code, str):
            raise ConfigurationError('code must be a string')
        options = payload.get('options')
        if options is not None and not isinstance(options, dict):
            raise ConfigurationError('options must be an object')
        return code, options

    @app.errorhandler(ConfigurationError)
    def bad_request(error):
        return jsonify({'error': str(error)}), 400

    @app.route('/api/deobfuscate', methods=['POST'])
    def api_deobfuscate():
        code, options = read_request()
        result = deobfuscate(code, DeobfuscatorOptions.from_mapping(options))
        if result.errors:
            app.logger.info("deobfuscation completed with %d warning(s)", len(result.errors))
        return jsonify(result.to_dict())

    @app.route('/api/obfuscate', methods=['POST'])
    def api_obfuscate():
        code, options = read_request()
        result = obfuscate_code(code, ObfuscatorOptions.from_mapping(options), app.config['OBFUSCATOR_BUNDLE'])
        return jsonify(result.to_dict())

    return app


def main():
    app = create_app()
    # 0.0.0.0 makes it reachable from outside a container
    app.run(host=os.environ.get('JSRECOVER_HOST', '0.0.0.0'), port=int(os.environ.get('JSRECOVER_PORT', '8080')))


if __name__ == '__main__':
    main()
