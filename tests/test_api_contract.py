import json

import pytest

from .conftest import T0


# Helper to assert unified response shape

def assert_api_envelope(resp, *, expect_success: bool | None = None):
    data = resp.get_json()
    assert isinstance(data, dict), "Response must be JSON object"
    assert 'success' in data, "Missing success field"
    assert 'timestamp' in data, "Missing timestamp"
    assert 'request_id' in data, "Missing request_id"
    assert data['timestamp'].endswith('Z')
    assert resp.headers['X-Request-ID'] == data['request_id']
    if expect_success is not None:
        assert data['success'] is expect_success, f"Expected success={expect_success} got {data['success']}"
    if not data['success']:
        assert 'message' in data, "Error responses must contain message"
        assert 'error_code' in data, "Error responses must contain error_code"
    return data

# -------- Tests --------

def test_healthz(client):
    resp = client.get('/healthz')
    assert resp.status_code == 200
    data = assert_api_envelope(resp, expect_success=True)
    assert data['data']['ok'] is True


def test_readyz(client):
    resp = client.get('/readyz')
    assert resp.status_code == 200
    data = assert_api_envelope(resp, expect_success=True)
    assert data['data']['variable_exists'] is True


def test_readyz_host_offline(client, host):
    host.offline = True
    resp = client.get('/readyz')
    assert resp.status_code == 503
    data = assert_api_envelope(resp, expect_success=False)
    assert data['error_code'] == 'host_unavailable'


def test_register_task(client, host):
    resp = client.post('/api/housekeeping/tasks', json={
        'targets': [10], 'delay_seconds': 25, 'command': 'turnOn'
    })
    assert resp.status_code == 201
    data = assert_api_envelope(resp, expect_success=True)
    expected = {'10': {'time': T0 + 25, 'cmd': 'turnOn'}}
    assert data['data']['schedule'] == expected
    assert json.loads(host.globals['HOUSEKEEPING']) == expected


def test_register_task_with_arguments(client, host):
    resp = client.post('/api/housekeeping/tasks', json={
        'targets': [10, 11], 'delay_seconds': 0, 'command': ['setValue', 50]
    })
    assert resp.status_code == 201
    schedule = json.loads(host.globals['HOUSEKEEPING'])
    assert schedule['11'] == {'time': T0, 'cmd': 'setValue', 'value': 50}


def test_register_defaults_to_turn_off(client, host):
    client.post('/api/housekeeping/tasks', json={'targets': 7})
    assert json.loads(host.globals['HOUSEKEEPING'])['7']['cmd'] == 'turnOff'


@pytest.mark.parametrize("body,error_code", [
    ({'targets': 'NoSuchVariable', 'delay_seconds': 5}, 'invalid_targets'),
    ({'delay_seconds': 5}, 'invalid_targets'),
    ({'targets': [10], 'delay_seconds': -5}, 'invalid_delay'),
    ({'targets': [10], 'delay_seconds': 5, 'command': 'setValue'}, 'invalid_command'),
])
def test_register_validation_errors(client, host, body, error_code):
    resp = client.post('/api/housekeeping/tasks', json=body)
    assert resp.status_code == 400
    data = assert_api_envelope(resp, expect_success=False)
    assert data['error_code'] == error_code
    assert host.globals['HOUSEKEEPING'] == '{}'


def test_register_requires_json_body(client):
    resp = client.post('/api/housekeeping/tasks', data='targets=10')
    assert resp.status_code == 400
    assert assert_api_envelope(resp, expect_success=False)['error_code'] == 'invalid_request'


def test_get_schedule(client, host):
    client.post('/api/housekeeping/tasks', json={'targets': [10], 'delay_seconds': 60})
    resp = client.get('/api/housekeeping')
    data = assert_api_envelope(resp, expect_success=True)
    assert data['data']['count'] == 1
    assert '10' in data['data']['schedule']


def test_get_corrupt_schedule(client, host):
    host.globals['HOUSEKEEPING'] = 'garbage'
    resp = client.get('/api/housekeeping')
    assert resp.status_code == 409
    assert assert_api_envelope(resp, expect_success=False)['error_code'] == 'corrupt_schedule'


def test_run_due_tasks(client, host):
    client.post('/api/housekeeping/tasks', json={'targets': [10], 'delay_seconds': 0, 'command': 'turnOn'})
    resp = client.post('/api/housekeeping/run')
    data = assert_api_envelope(resp, expect_success=True)
    assert data['data']['executed'] == ['10']
    assert host.device_calls == [(10, 'turnOn', ())]


def test_run_resets_corrupt_schedule(client, host):
    host.globals['HOUSEKEEPING'] = '[]'
    data = assert_api_envelope(client.post('/api/housekeeping/run'), expect_success=True)
    assert data['data']['reset'] is True
    assert host.globals['HOUSEKEEPING'] == '{}'


def test_reset_schedule(client, host):
    client.post('/api/housekeeping/tasks', json={'targets': [10], 'delay_seconds': 60})
    resp = client.delete('/api/housekeeping')
    assert_api_envelope(resp, expect_success=True)
    assert host.globals['HOUSEKEEPING'] == '{}'


def test_services_health(client):
    data = assert_api_envelope(client.get('/api/services/health'), expect_success=True)
    assert data['data']['overall_healthy'] is True
    assert data['data']['services']['housekeeping']['status']['loop_running'] is False


def test_unknown_route_is_json(client):
    resp = client.get('/api/nope')
    assert resp.status_code == 404
    assert assert_api_envelope(resp, expect_success=False)['error_code'] == 'not_found'


@pytest.mark.parametrize("command", [['setProperty', 'a', None], ['setValue', None]])
def test_register_rejects_null_arguments(client, host, command):
    client.post('/api/housekeeping/tasks', json={'targets': [10], 'delay_seconds': 3600, 'command': 'turnOn'})
    resp = client.post('/api/housekeeping/tasks', json={'targets': [12], 'delay_seconds': 0, 'command': command})
    assert resp.status_code == 400
    assert assert_api_envelope(resp, expect_success=False)['error_code'] == 'invalid_command'
    assert list(json.loads(host.globals['HOUSEKEEPING'])) == ['10']
