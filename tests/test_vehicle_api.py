import io
import json
import pytest
from garage import create_app
from garage.extensions import db
from config import TestingConfig

@pytest.fixture
def app(tmp_path):
    """创建测试应用实例，上传目录指向临时目录"""
    app = create_app(TestingConfig)
    app.config['UPLOAD_FOLDER'] = str(tmp_path)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """创建测试客户端"""
    return app.test_client()

@pytest.fixture
def civic(client):
    response = client.post('/api/vehicles', json={
        'type': 'car', 'make': 'Honda', 'model': 'Civic', 'year': 2018, 'current_mileage': 42000,
    })
    return response.json

# ================ 语句测试 ================

def test_health(client):
    """语句测试：健康检查"""
    response = client.get('/api/health')
    assert response.status_code == 200
    assert response.json['status'] == 'ok'

def test_create_and_get_vehicle(client, civic):
    """语句测试：创建车辆后可按ID查询"""
    response = client.get(f"/api/vehicles/{civic['id']}")

    print(f"响应内容: {json.dumps(response.json, ensure_ascii=False, indent=2)}")
    assert response.status_code == 200
    assert response.json['make'] == 'Honda'
    assert response.json['current_mileage'] == 42000

def test_list_grouped_and_stats(client, civic):
    """语句测试：分组列表与统计"""
    client.post('/api/vehicles', json={'type': 'bike', 'make': 'Trek', 'model': 'Domane'})

    grouped = client.get('/api/vehicles').json
    assert [v['model'] for v in grouped['car']] == ['Civic']
    assert [v['model'] for v in grouped['bike']] == ['Domane']
    assert grouped['motorcycle'] == []

    stats = client.get('/api/vehicles/stats').json
    assert stats['total_count'] == 2
    assert stats['car_count'] == 1

def test_search_and_type_filter(client, civic):
    """语句测试：搜索与按类型过滤"""
    assert [v['id'] for v in client.get('/api/vehicles/search?q=civ').json] == [civic['id']]
    assert client.get('/api/vehicles/type/motorcycle').json == []
    assert len(client.get('/api/vehicles/recent?limit=1').json) == 1

def test_update_vehicle(client, civic):
    """语句测试：部分更新"""
    response = client.put(f"/api/vehicles/{civic['id']}", json={'color': 'Red', 'make': ''})

    assert response.status_code == 200
    assert response.json['color'] == 'Red'
    assert response.json['make'] == 'Honda'
    assert response.json['current_mileage'] == 42000

def test_create_vehicle_with_image(client, app, tmp_path):
    """语句测试：multipart 创建车辆并保存图片"""
    response = client.post('/api/vehicles', data={
        'type': 'motorcycle', 'make': 'Yamaha', 'model': 'MT-07',
        'image': (io.BytesIO(b'fake image'), 'mt07.png'),
    }, content_type='multipart/form-data')

    assert response.status_code == 201
    image_path = response.json['image_path']
    assert image_path.startswith('/uploads/vehicles/')
    assert (tmp_path / image_path[len('/uploads/'):]).is_file()

    served = client.get(image_path)
    assert served.status_code == 200
    assert served.data == b'fake image'

    client.delete(f"/api/vehicles/{response.json['id']}")
    assert not (tmp_path / image_path[len('/uploads/'):]).exists()

def test_delete_vehicle_cascades(client, civic):
    """语句测试：删除车辆后其维修记录一并删除"""
    client.post(f"/api/maintenance/vehicle/{civic['id']}", json={'date': '2024-05-01', 'description': 'Oil Change'})

    response = client.delete(f"/api/vehicles/{civic['id']}")
    assert response.status_code == 200
    assert response.json == {'message': 'Vehicle deleted successfully'}
    assert client.get('/api/maintenance').json == []

# ================ 路径测试 ================

def test_vehicle_not_found(client):
    """路径测试：不存在的车辆返回404"""
    for method in (client.get, client.delete):
        response = method('/api/vehicles/999')
        assert response.status_code == 404
        assert response.json == {'error': 'Vehicle not found'}

    response = client.put('/api/vehicles/999', json={'make': 'Nope'})
    assert response.status_code == 404

def test_create_vehicle_missing_field(client):
    """路径测试：缺少必填字段返回400"""
    response = client.post('/api/vehicles', json={'type': 'car', 'make': 'Honda'})
    assert response.status_code == 400
    assert response.json == {'error': 'model required'}

    response = client.post('/api/vehicles', json={'type': 'truck', 'make': 'Ford', 'model': 'F-150'})
    assert response.status_code == 400
    assert response.json == {'error': 'Invalid vehicle type'}

def test_rejected_image_type(client, tmp_path):
    """路径测试：图片扩展名不允许时不创建车辆"""
    response = client.post('/api/vehicles', data={
        'type': 'car', 'make': 'Honda', 'model': 'Civic',
        'image': (io.BytesIO(b'not an image'), 'civic.exe'),
    }, content_type='multipart/form-data')

    assert response.status_code == 400
    assert client.get('/api/vehicles/stats').json['total_count'] == 0

def test_failed_create_removes_uploaded_image(client, tmp_path):
    """路径测试：入库失败时删除已保存的图片"""
    response = client.post('/api/vehicles', data={
        'type': 'car', 'make': 'Honda',
        'image': (io.BytesIO(b'fake image'), 'civic.jpg'),
    }, content_type='multipart/form-data')

    assert response.status_code == 400
    assert list((tmp_path / 'vehicles').iterdir()) == []

def test_search_requires_term(client):
    response = client.get('/api/vehicles/search')
    assert response.status_code == 400
