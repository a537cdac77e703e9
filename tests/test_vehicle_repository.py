import pytest
from garage import create_app
from garage.errors import NotFound, ValidationError
from garage.extensions import db
from garage.repositories import (MaintenanceRepository, ManualRepository, VehiclePatch,
                                 VehicleRepository, VideoRepository)
from config import TestingConfig

@pytest.fixture
def app():
    """创建测试应用实例"""
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def repo(app):
    return VehicleRepository(db.session)

@pytest.fixture
def garage_vehicles(repo):
    """三种类型的测试车辆"""
    return {
        'civic': repo.create({'type': 'car', 'make': 'Honda', 'model': 'Civic', 'year': 2018, 'current_mileage': 42000}),
        'corolla': repo.create({'type': 'car', 'make': 'Toyota', 'model': 'Corolla', 'year': 2020}),
        'mt07': repo.create({'type': 'motorcycle', 'make': 'Yamaha', 'model': 'MT-07', 'year': 2021}),
        'trek': repo.create({'type': 'bike', 'make': 'Trek', 'model': 'Domane', 'year': 2019}),
    }

# ================ 语句测试 ================

def test_create_vehicle(repo):
    """语句测试：创建车辆并返回完整字段"""
    vehicle = repo.create({
        'type': 'car', 'make': 'Honda', 'model': 'Civic', 'year': '2018',
        'purchase_date': '2019-02-14', 'purchase_price': '18500.50', 'oil_change_interval_miles': 5000,
    })

    assert vehicle['id'] is not None
    assert vehicle['year'] == 2018
    assert vehicle['purchase_date'] == '2019-02-14'
    assert vehicle['purchase_price'] == 18500.5
    assert vehicle['oil_change_interval_miles'] == 5000
    assert vehicle['vin'] is None

def test_get_all_grouped_by_type(repo, garage_vehicles):
    """语句测试：按类型分组，组内按年份倒序"""
    grouped = repo.get_all()

    assert set(grouped) == {'bike', 'motorcycle', 'car'}
    assert [v['model'] for v in grouped['car']] == ['Corolla', 'Civic']
    assert [v['model'] for v in grouped['motorcycle']] == ['MT-07']
    assert [v['model'] for v in grouped['bike']] == ['Domane']
    assert grouped['car'][0]['manual_count'] == 0
    assert grouped['car'][0]['maintenance_count'] == 0

def test_get_all_counts_dependents(repo, garage_vehicles):
    """语句测试：分组结果附带手册/视频/维修记录数量"""
    civic_id = garage_vehicles['civic']['id']
    ManualRepository(db.session).create(civic_id, 'Owner Manual', '/uploads/manuals/civic.pdf')
    VideoRepository(db.session).create(civic_id, 'Oil DIY', 'youtube', 'https://www.youtube.com/embed/abcdefghijk')
    maintenance = MaintenanceRepository(db.session)
    maintenance.create(civic_id, '2024-01-01', 'Oil Change')
    maintenance.create(civic_id, '2024-02-01', 'Wash')

    civic = next(v for v in repo.get_all()['car'] if v['id'] == civic_id)
    assert civic['manual_count'] == 1
    assert civic['video_count'] == 1
    assert civic['maintenance_count'] == 2

def test_search_matches_make_model_and_year(repo, garage_vehicles):
    """语句测试：品牌/型号/年份模糊搜索，不区分大小写"""
    assert [v['model'] for v in repo.search('honda')] == ['Civic']
    assert [v['model'] for v in repo.search('MT')] == ['MT-07']
    assert [v['make'] for v in repo.search('2019')] == ['Trek']
    assert repo.search('nothing-like-this') == []

def test_get_stats(repo, garage_vehicles):
    """语句测试：统计各类型车辆数量"""
    MaintenanceRepository(db.session).create(garage_vehicles['mt07']['id'], '2024-01-01', 'Chain lube')
    stats = repo.get_stats()

    assert stats == {
        'bike_count': 1,
        'motorcycle_count': 1,
        'car_count': 2,
        'total_count': 4,
        'total_manuals': 0,
        'total_videos': 0,
        'total_maintenance': 1,
    }

def test_update_keeps_omitted_fields(repo, garage_vehicles):
    """语句测试：部分更新，未提供的字段保持原值"""
    civic = garage_vehicles['civic']
    updated = repo.update(civic['id'], {'color': 'Blue', 'current_mileage': '43000'})

    assert updated['color'] == 'Blue'
    assert updated['current_mileage'] == 43000
    assert updated['make'] == 'Honda'
    assert updated['year'] == 2018

def test_update_explicit_null_clears_optional_field(repo, garage_vehicles):
    """语句测试：显式置空的可选字段变为 NULL，标识字段为空时保持原值"""
    civic = garage_vehicles['civic']
    updated = repo.update(civic['id'], VehiclePatch(current_mileage=None, make='', model=None))

    assert updated['current_mileage'] is None
    assert updated['make'] == 'Honda'
    assert updated['model'] == 'Civic'

def test_get_recent_and_by_type(repo, garage_vehicles):
    """语句测试：最近添加与按类型查询"""
    recent = repo.get_recent(2)
    assert [v['model'] for v in recent] == ['Domane', 'MT-07']
    assert [v['model'] for v in repo.get_by_type('car')] == ['Corolla', 'Civic']

# ================ 路径测试 ================

def test_create_requires_identity_fields(repo):
    """路径测试：缺少 make 时报 ValidationError"""
    with pytest.raises(ValidationError) as exc:
        repo.create({'type': 'car', 'model': 'Civic'})
    assert exc.value.message == 'make required'

def test_create_rejects_invalid_type(repo):
    """路径测试：无效的车辆类型"""
    with pytest.raises(ValidationError):
        repo.create({'type': 'truck', 'make': 'Ford', 'model': 'F-150'})
    with pytest.raises(ValidationError):
        repo.get_by_type('truck')

def test_missing_vehicle_raises_not_found(repo):
    """路径测试：不存在的车辆ID"""
    with pytest.raises(NotFound) as exc:
        repo.get_by_id(999)
    assert exc.value.message == 'Vehicle not found'

    with pytest.raises(NotFound):
        repo.update(999, {'make': 'Nope'})
    with pytest.raises(NotFound):
        repo.delete(999)

def test_delete_removes_vehicle(repo, garage_vehicles):
    """路径测试：删除后再次查询报 NotFound"""
    trek_id = garage_vehicles['trek']['id']
    deleted = repo.delete(trek_id)

    assert deleted['id'] == trek_id
    with pytest.raises(NotFound):
        repo.get_by_id(trek_id)
    assert repo.get_all()['bike'] == []
