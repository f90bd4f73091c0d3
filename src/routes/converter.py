import os
from flask import Blueprint, current_app, request, jsonify
from werkzeug.exceptions import BadRequest
from werkzeug.utils import secure_filename

from h2j import HL7JsonTransformer, HL7Parser, TemplateTransformer
from h2j.utils import (
    DEFAULT_TEMPLATE, FILE_EXTENSIONS, ConfigurationError, HL7ParsingError, TemplateError,
    UnsupportedTemplateError
)
from h2j.version import get_version_info

converter_bp = Blueprint('converter', __name__)

ALLOWED_EXTENSIONS = {FILE_EXTENSIONS['HL7'], FILE_EXTENSIONS['TXT']}


def allowed_file(filename):
    """Check if file has allowed extension"""
    return os.path.splitext(filename)[1].lower() in ALLOWED_EXTENSIONS


def get_settings():
    """Configuration and shared resource manager of the running app"""
    return current_app.config['H2J_CONFIG'], current_app.config['H2J_RESOURCES']


def resource_name(argument, default):
    """Resource name from a query argument; names never reach outside the resources directory"""
    name = request.args.get(argument) or default
    safe_name = secure_filename(name) if name else ''
    if not safe_name:
        raise BadRequest(f"Invalid resource name for '{argument}'")
    return safe_name


def read_message(body=None):
    """
    Read the HL7 message from an uploaded file, a JSON body or the raw body.

    Raises:
        BadRequest: If no message was sent or the upload has the wrong type
    """
    if 'file' in request.files:
        file = request.files['file']
        if file.filename == '':
            raise BadRequest('No file selected')
        if not allowed_file(file.filename):
            raise BadRequest('Only .hl7 or .txt files are allowed')
        message = file.read().decode('utf-8', errors='replace')
    elif body is not None:
        message = body.get('message')
    else:
        message = request.get_data(as_text=True)

    if not isinstance(message, str) or not message.strip():
        raise BadRequest('No HL7 message provided')
    return message


def json_body():
    if not request.is_json:
        return None
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise BadRequest('Request body must be a JSON object')
    return body


@converter_bp.errorhandler(BadRequest)
def handle_bad_request(e):
    return jsonify({'error': e.description}), 400


@converter_bp.errorhandler(HL7ParsingError)
def handle_parsing_error(e):
    return jsonify({'error': f'HL7 parsing error: {e}'}), 400


@converter_bp.errorhandler(ConfigurationError)
def handle_configuration_error(e):
    return jsonify({'error': f'Profile error: {e}'}), 400


@converter_bp.errorhandler(UnsupportedTemplateError)
def handle_unsupported_template(e):
    return jsonify({'error': f'Unsupported template: {e}', 'path': e.path}), 422


@converter_bp.errorhandler(TemplateError)
def handle_template_error(e):
    return jsonify({'error': f'Template error: {e}'}), 400


@converter_bp.route('/transform', methods=['POST'])
def transform():
    """Direct mapping: segments, fields and components keyed by profile names"""
    config, manager = get_settings()
    message = read_message(json_body())

    transformer = HL7JsonTransformer.from_resources(
        message,
        resource_name('profile', config.profiles.profile),
        resource_name('fields_profile', config.profiles.field_profile),
        manager,
        config
    )
    return jsonify(transformer.transform())


@converter_bp.route('/template', methods=['POST'])
def template():
    """Template mapping: a named template resource or an inline template"""
    config, manager = get_settings()
    body = json_body()
    message = read_message(body)
    profile = manager.load_profile(resource_name('profile', config.profiles.profile))

    if body is not None and 'template' in body:
        transformer = TemplateTransformer(body['template'], profile, config)
    else:
        template_document = manager.load_template(
            resource_name('template', config.profiles.template or DEFAULT_TEMPLATE)
        )
        transformer = TemplateTransformer(template_document, profile, config)

    concat_delimiter = request.args.get('concat', config.output.concat_delimiter)
    return jsonify(transformer.transform(message, concat_delimiter))


@converter_bp.route('/analyze', methods=['POST'])
def analyze():
    """Message summary: header identifiers, segment counts and hierarchy"""
    config, manager = get_settings()
    message = read_message(json_body())
    profile = manager.load_profile(resource_name('profile', config.profiles.profile))
    return jsonify(HL7Parser(message, profile, config.encoding).analyze())


@converter_bp.route('/health', methods=['GET'])
def health():
    """Service status and bundled resource availability"""
    config, manager = get_settings()
    resources = {
        name: manager.is_available(name)
        for name in (config.profiles.profile, config.profiles.field_profile,
                     config.profiles.template or DEFAULT_TEMPLATE)
    }
    status = 'healthy' if all(resources.values()) else 'degraded'
    return jsonify({'status': status, 'resources': resources, **get_version_info()})
