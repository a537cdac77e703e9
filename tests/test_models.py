import pytest
from datetime import date
from sqlalchemy import func, select
from garage import create_app
from garage.extensions import db
from garage.models import MaintenanceLog, MaintenanceTag, Manual, Vehicle, Video, maintenance_log_tags
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

def _count(table):
    return db.session.scalar(select(func.count()).select_from(table))

def test_vehicle_relationships(app):
    """测试车辆与手册/视频/维修记录的关联"""
    car = Vehicle(type='car', make='Honda', model='Civic', year=2018)
    car.manuals.append(Manual(title='Owner Manual', file_path='/uploads/manuals/civic.pdf'))
    car.videos.append(Video(title='Oil DIY', type='youtube', path_or_url='https://www.youtube.com/embed/abcdefghijk'))
    car.maintenance_logs.append(MaintenanceLog(date=date(2024, 5, 1), description='Oil Change', mileage=30000))
    db.session.add(car)
    db.session.commit()

    assert car.id is not None
    assert car.manuals[0].file_type == 'pdf'
    assert car.videos[0].is_local is False
    assert car.maintenance_logs[0].vehicle is car
    assert car.created_at is not None

def test_log_to_dict_includes_vehicle_and_tags(app):
    """测试维修记录序列化：车辆标识字段和按ID排序的标签"""
    car = Vehicle(type='motorcycle', make='Yamaha', model='MT-07', year=2021)
    second = MaintenanceTag(name='Brake Service', color='#ef4444', icon='disc')
    first = MaintenanceTag(name='Oil Change', color='#f59e0b', icon='droplet')
    db.session.add_all([car, first, second])
    db.session.commit()

    log = MaintenanceLog(vehicle=car, date=date(2024, 3, 1), description='Service', cost=120.5)
    log.tags.extend([first, second])
    db.session.add(log)
    db.session.commit()
    db.session.expire_all()

    data = db.session.get(MaintenanceLog, log.id).to_dict()
    assert data['date'] == '2024-03-01'
    assert data['cost'] == 120.5
    assert data['make'] == 'Yamaha'
    assert data['vehicle_type'] == 'motorcycle'
    assert [tag['id'] for tag in data['tags']] == sorted([first.id, second.id])
    assert set(data['tags'][0]) == {'id', 'name', 'color', 'icon'}

def test_untagged_log_has_empty_tag_list(app):
    """测试无标签的维修记录返回空列表而不是 None"""
    car = Vehicle(type='car', make='Toyota', model='Corolla')
    log = MaintenanceLog(vehicle=car, date=date(2024, 1, 1), description='Wash')
    db.session.add(log)
    db.session.commit()

    assert log.to_dict()['tags'] == []

def test_vehicle_delete_cascades_in_database(app):
    """测试数据库级联：删除车辆后不留下孤立的手册/视频/记录/标签关联"""
    car = Vehicle(type='car', make='Honda', model='Civic')
    tag = MaintenanceTag(name='Oil Change')
    db.session.add_all([car, tag])
    db.session.commit()

    log = MaintenanceLog(vehicle=car, date=date(2024, 5, 1), description='Oil Change')
    log.tags.append(tag)
    db.session.add_all([
        log,
        Manual(vehicle=car, title='Manual', file_path='/uploads/manuals/m.pdf'),
        Video(vehicle=car, title='Video', type='local', path_or_url='/uploads/videos/v.mp4'),
    ])
    db.session.commit()
    assert _count(maintenance_log_tags) == 1

    car_id = car.id
    db.session.expire_all()
    db.session.delete(db.session.get(Vehicle, car_id))
    db.session.commit()

    assert _count(Manual.__table__) == 0
    assert _count(Video.__table__) == 0
    assert _count(MaintenanceLog.__table__) == 0
    assert _count(maintenance_log_tags) == 0
    # 标签本身保留
    assert _count(MaintenanceTag.__table__) == 1
