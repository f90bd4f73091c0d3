import io

import pytest

from conftest import SAMPLE_MESSAGE
from src.main import create_app


@pytest.fixture
def client():
    app = create_app()
    app.config['TESTING'] = True
    return app.test_client()


def test_health(client):
    response = client.get('/api/converter/health')
    assert response.status_code == 200
    body = response.get_json()
    assert body['status'] == 'healthy'
    assert body['version'] == '1.0.0'
    assert all(body['resources'].values())


def test_transform_raw_body(client):
    response = client.post('/api/converter/transform', data=SAMPLE_MESSAGE, content_type='text/plain')
    assert response.status_code == 200
    body = response.get_json()
    assert body['MSH']['encoding_characters'] == '^~\\&'
    assert list(body) == ['MSH', 'SFT', 'PID', 'ORC']


def test_transform_json_body(client):
    response = client.post('/api/converter/transform', json={'message': SAMPLE_MESSAGE})
    assert response.status_code == 200
    assert response.get_json()['PID']['administrative_sex'] == 'M'


def test_transform_file_upload(client):
    data = {'file': (io.BytesIO(SAMPLE_MESSAGE.encode('utf-8')), 'message.hl7')}
    response = client.post('/api/converter/transform', data=data, content_type='multipart/form-data')
    assert response.status_code == 200
    assert response.get_json()['MSH']['message_control_id'] == 'MSG00001'


def test_upload_wrong_extension(client):
    data = {'file': (io.BytesIO(b'MSH|^~\\&|'), 'message.exe')}
    response = client.post('/api/converter/transform', data=data, content_type='multipart/form-data')
    assert response.status_code == 400
    assert 'Only .hl7 or .txt' in response.get_json()['error']


def test_missing_message(client):
    response = client.post('/api/converter/transform', json={})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'No HL7 message provided'


def test_not_hl7(client):
    response = client.post('/api/converter/transform', data='hello', content_type='text/plain')
    assert response.status_code == 400
    assert 'HL7 parsing error' in response.get_json()['error']


def test_unknown_profile(client):
    response = client.post('/api/converter/transform?profile=Missing.json', data=SAMPLE_MESSAGE,
                           content_type='text/plain')
    assert response.status_code == 400


def test_profile_name_cannot_escape_resources(client):
    response = client.post('/api/converter/transform?profile=../../../etc/passwd', data=SAMPLE_MESSAGE,
                           content_type='text/plain')
    assert response.status_code == 400
    assert 'Resource not found: etc_passwd' in response.get_json()['error']


def test_named_template(client):
    response = client.post('/api/converter/template?template=simpleTemplate.json&concat=,',
                           data=SAMPLE_MESSAGE, content_type='text/plain')
    assert response.status_code == 200
    body = response.get_json()
    assert body['patient']['ids'] == 'A123,B456'
    assert len(body['observations']) == 3


def test_inline_template(client):
    response = client.post('/api/converter/template', json={
        'message': SAMPLE_MESSAGE,
        'template': {'id': 'MSH-10', '$$OBX[2]-3.1': 'OBX[2]-5'}
    })
    assert response.status_code == 200
    assert response.get_json() == {'id': 'MSG00001', '2345-7': ['1', '2', '3']}


def test_unsupported_template(client):
    response = client.post('/api/converter/template', json={
        'message': SAMPLE_MESSAGE,
        'template': {'rows': [{'codes': ['OBX-3']}]}
    })
    assert response.status_code == 422
    assert response.get_json()['path'] == '$.rows[*].codes'


def test_inline_template_must_be_object(client):
    response = client.post('/api/converter/template', json={'message': SAMPLE_MESSAGE, 'template': ['MSH-10']})
    assert response.status_code == 400


def test_analyze(client):
    response = client.post('/api/converter/analyze', data=SAMPLE_MESSAGE, content_type='text/plain')
    assert response.status_code == 200
    body = response.get_json()
    assert body['message_type'] == 'ORU^R01^ORU_R01'
    assert body['segment_count'] == 10
