import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from flask import Flask, jsonify

from h2j import ConfigLoader, ResourceManager
from h2j.utils import DEFAULT_TEMPLATE, H2JError
from src.routes.converter import converter_bp


def validate_converter_on_startup(config, manager):
    """Validate that the configured profiles and template load before serving"""
    print("🔍 Validating converter on startup...")

    try:
        profile = manager.load_profile(config.profiles.profile)
        print(f"✅ Segment profile loaded: {config.profiles.profile} ({len(profile.type_ids)} segments)")

        field_profile = manager.load_profile(config.profiles.field_profile)
        print(f"✅ Data type profile loaded: {config.profiles.field_profile} ({len(field_profile.type_ids)} types)")

        template_name = config.profiles.template or DEFAULT_TEMPLATE
        manager.load_template(template_name)
        print(f"✅ Template loaded: {template_name}")

        print("✅ Converter validation passed - app ready to start")

    except H2JError as e:
        print(f"❌ Converter validation failed: {e}")
        print("❌ App startup aborted due to converter issues")
        raise SystemExit(1)


def create_app(config_path=None):
    """
    Build the Flask app.

    The configuration file comes from ``config_path`` or the ``H2J_CONFIG``
    environment variable; built-in defaults apply when neither is set.
    """
    config_path = config_path or os.getenv('H2J_CONFIG')
    try:
        config = ConfigLoader.load(config_path)
    except H2JError as e:
        print(f"❌ Configuration Error: {e}")
        raise SystemExit(1)

    # Request parameters can only name bundled resources, never arbitrary files
    manager = ResourceManager(config.profiles.resources_directory, allow_filesystem=False)

    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = 10 * 1024 * 1024  # 10MB max message size
    app.config['H2J_CONFIG'] = config
    app.config['H2J_RESOURCES'] = manager
    app.json.sort_keys = False

    app.register_blueprint(converter_bp, url_prefix='/api/converter')

    @app.route('/')
    def index():
        return jsonify({
            'service': 'HL7 v2.x to JSON Converter',
            'endpoints': ['/api/converter/transform', '/api/converter/template',
                          '/api/converter/analyze', '/api/converter/health']
        })

    with app.app_context():
        validate_converter_on_startup(config, manager)

    return app


app = create_app()


if __name__ == '__main__':
    print("🚀 Starting HL7 to JSON Converter Service...")
    port = int(os.environ.get('PORT', 8000))
    app.run(host='0.0.0.0', port=port, debug=False, threaded=True)
