import pytest
from garage import create_app
from garage.extensions import db
from garage.repositories import MaintenanceRepository
from config import TestingConfig

@pytest.fixture
def app():
    """创建测试应用实例并写入默认标签"""
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        MaintenanceRepository(db.session).seed_default_tags()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """创建测试客户端"""
    return app.test_client()

@pytest.fixture
def tags(client):
    return {tag['name']: tag['id'] for tag in client.get('/api/maintenance/tags').json}

@pytest.fixture
def civic(client):
    return client.post('/api/vehicles', json={
        'type': 'car', 'make': 'Honda', 'model': 'Civic',
        'current_mileage': 13800, 'oil_change_interval_miles': 5000,
    }).json

def _create_log(client, vehicle_id, **body):
    return client.post(f'/api/maintenance/vehicle/{vehicle_id}', json=body)

# ================ 语句测试 ================

def test_create_and_fetch_log(client, civic, tags):
    """语句测试：创建维修记录并按ID查询"""
    response = _create_log(client, civic['id'], date='2024-05-01', description='Oil Change',
                           mileage=9000, cost=45, tag_ids=[tags['Oil Change']])
    assert response.status_code == 201
    log = response.json

    fetched = client.get(f"/api/maintenance/{log['id']}").json
    assert fetched['description'] == 'Oil Change'
    assert fetched['vehicle_type'] == 'car'
    assert [tag['name'] for tag in fetched['tags']] == ['Oil Change']

def test_vehicle_logs_and_recent(client, civic):
    """语句测试：按车辆查询与最近记录"""
    _create_log(client, civic['id'], date='2024-01-01', description='A')
    _create_log(client, civic['id'], date='2024-02-01', description='B')

    logs = client.get(f"/api/maintenance/vehicle/{civic['id']}").json
    assert [log['description'] for log in logs] == ['B', 'A']
    assert [log['description'] for log in client.get('/api/maintenance/recent?limit=1').json] == ['B']

def test_update_and_delete_log(client, civic, tags):
    """语句测试：更新替换标签，删除后返回404"""
    log = _create_log(client, civic['id'], date='2024-05-01', description='Service',
                      tag_ids=[tags['Battery']]).json

    updated = client.put(f"/api/maintenance/{log['id']}", json={'tag_ids': [tags['Electrical']], 'cost': 12.5})
    assert updated.status_code == 200
    assert [tag['name'] for tag in updated.json['tags']] == ['Electrical']
    assert updated.json['cost'] == 12.5

    deleted = client.delete(f"/api/maintenance/{log['id']}")
    assert deleted.json == {'message': 'Maintenance log deleted successfully'}
    assert client.get(f"/api/maintenance/{log['id']}").status_code == 404

def test_cost_summary_and_date_range(client, civic):
    """语句测试：费用汇总与日期区间查询"""
    _create_log(client, civic['id'], date='2024-01-01', description='A', cost=10)
    _create_log(client, civic['id'], date='2024-02-01', description='B')
    _create_log(client, civic['id'], date='2024-03-01', description='C', cost=20)

    summary = client.get(f"/api/maintenance/cost-summary?vehicleId={civic['id']}").json
    assert summary['total_logs'] == 3
    assert summary['total_cost'] == 30
    assert summary['average_cost'] == 15

    logs = client.get('/api/maintenance/date-range?startDate=2024-02-01&endDate=2024-03-01').json
    assert [log['description'] for log in logs] == ['C', 'B']

def test_tags_endpoints(client, civic, tags):
    """语句测试：创建标签、按标签查询记录"""
    response = client.post('/api/maintenance/tags', json={'name': 'Detailing', 'color': '#123456'})
    assert response.status_code == 201
    assert response.json['icon'] == 'tag'

    log = _create_log(client, civic['id'], date='2024-05-01', description='Wax',
                      tag_ids=[response.json['id']]).json
    logs = client.get(f"/api/maintenance/tags/{response.json['id']}/logs").json
    assert [item['id'] for item in logs] == [log['id']]

    usage = {tag['name']: tag['usage_count'] for tag in client.get('/api/maintenance/tags').json}
    assert usage['Detailing'] == 1

def test_quick_add_and_last_oil_change(client, civic, tags):
    """语句测试：快捷换油后可查询到最近一次换油"""
    response = client.post(f"/api/maintenance/vehicle/{civic['id']}/quick-add",
                           json={'type': 'oil-change', 'mileage': 9000})
    assert response.status_code == 201
    assert [tag['id'] for tag in response.json['tags']] == [tags['Oil Change']]

    last = client.get(f"/api/maintenance/vehicle/{civic['id']}/last-oil-change").json
    assert last['id'] == response.json['id']

def test_last_oil_change_none(client, civic):
    response = client.get(f"/api/maintenance/vehicle/{civic['id']}/last-oil-change")
    assert response.status_code == 200
    assert response.json is None

def test_oil_change_status(client, civic):
    """语句测试：换油状态（注入基准日期）"""
    _create_log(client, civic['id'], date='2024-05-01', description='Oil change', mileage=9000)

    report = client.get('/api/maintenance/oil-change-status?today=2024-06-01').json
    assert len(report) == 1
    assert report[0]['vehicle_id'] == civic['id']
    assert report[0]['next_due_miles'] == 14000
    assert report[0]['miles_remaining'] == 200
    assert report[0]['status'] == 'soon'

# ================ 路径测试 ================

def test_missing_fields(client, civic):
    """路径测试：缺少日期或描述返回400"""
    response = _create_log(client, civic['id'], description='Oil Change')
    assert response.status_code == 400
    assert response.json == {'error': 'date required'}

    response = _create_log(client, civic['id'], date='2024-05-01')
    assert response.json == {'error': 'description required'}

def test_not_found_mapping(client):
    """路径测试：不存在的车辆/记录/标签返回404"""
    assert _create_log(client, 999, date='2024-05-01', description='x').json == {'error': 'Vehicle not found'}
    assert client.get('/api/maintenance/999').json == {'error': 'Maintenance log not found'}
    assert client.put('/api/maintenance/999', json={'description': 'x'}).status_code == 404
    assert client.delete('/api/maintenance/999').status_code == 404
    assert client.get('/api/maintenance/tags/999/logs').json == {'error': 'Tag not found'}

def test_duplicate_tag_conflict(client):
    """路径测试：重复标签名返回409"""
    response = client.post('/api/maintenance/tags', json={'name': 'Oil Change'})
    assert response.status_code == 409
    assert response.json == {'error': 'Tag name already exists'}

def test_unknown_tag_rejected_atomically(client, civic, tags):
    """路径测试：包含未知标签ID时不创建记录"""
    response = _create_log(client, civic['id'], date='2024-05-01', description='Oil Change',
                           tag_ids=[tags['Oil Change'], 9999])
    assert response.status_code == 400
    assert client.get('/api/maintenance').json == []

def test_invalid_quick_add_and_date_range(client, civic):
    """路径测试：未知快捷类型与缺少日期参数"""
    response = client.post(f"/api/maintenance/vehicle/{civic['id']}/quick-add", json={'type': 'wash'})
    assert response.status_code == 400
    assert response.json == {'error': 'Invalid maintenance type'}

    response = client.get('/api/maintenance/date-range?startDate=2024-01-01')
    assert response.status_code == 400
    assert response.json == {'error': 'Start date and end date required'}

def test_store_failure_maps_to_500(client, civic, monkeypatch):
    """路径测试：未归类的异常返回 500 Failed to <action>"""
    def boom(self, *args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(MaintenanceRepository, 'get_all', boom)
    response = client.get('/api/maintenance')
    assert response.status_code == 500
    assert response.json == {'error': 'Failed to fetch maintenance logs'}
