from datetime import datetime
from enum import Enum
from ..extensions import db
from ..utils.convert import format_date, format_datetime

class VehicleType(Enum):
    """车辆类型枚举"""
    BIKE = 'bike'
    MOTORCYCLE = 'motorcycle'
    CAR = 'car'

    @classmethod
    def values(cls):
        return [member.value for member in cls]

class Vehicle(db.Model):
    """
    车辆表
    +----------------------------+---------------+------+-----+-------------------+----------------------+
    | Field                      | Type          | Null | Key | Default           | Comment              |
    +----------------------------+---------------+------+-----+-------------------+----------------------+
    | id                         | Integer       | NO   | PRI | auto_increment    | 车辆ID               |
    | type                       | Enum          | NO   | MUL | NULL              | bike/motorcycle/car  |
    | make                       | String(100)   | NO   |     | NULL              | 品牌                 |
    | model                      | String(100)   | NO   |     | NULL              | 型号                 |
    | year                       | Integer       | YES  |     | NULL              | 年份                 |
    | current_mileage            | Integer       | YES  |     | NULL              | 当前里程             |
    | oil_change_interval_miles  | Integer       | YES  |     | NULL              | 换油间隔(英里)       |
    | oil_change_interval_months | Integer       | YES  |     | NULL              | 换油间隔(月)         |
    | image_path                 | String(255)   | YES  |     | NULL              | /uploads/vehicles/.. |
    | created_at                 | DateTime      | NO   |     | now               | 创建时间             |
    | updated_at                 | DateTime      | NO   |     | now               | 更新时间             |
    +----------------------------+---------------+------+-----+-------------------+----------------------+
    （其余为可选的登记/保险信息字段）
    """
    __tablename__ = 'vehicles'
    __table_args__ = {'comment': '车辆表'}

    id = db.Column(db.Integer, primary_key=True, autoincrement=True, comment='车辆ID')
    type = db.Column(db.Enum(*VehicleType.values(), name='vehicle_type_enum'), nullable=False, index=True, comment='车辆类型')
    make = db.Column(db.String(100), nullable=False, comment='品牌')
    model = db.Column(db.String(100), nullable=False, comment='型号')
    year = db.Column(db.Integer, nullable=True, comment='年份')
    vin = db.Column(db.String(32), nullable=True, comment='车架号')
    color = db.Column(db.String(50), nullable=True, comment='颜色')
    purchase_date = db.Column(db.Date, nullable=True, comment='购买日期')
    purchase_price = db.Column(db.Numeric(10, 2, asdecimal=False), nullable=True, comment='购买价格')
    current_mileage = db.Column(db.Integer, nullable=True, comment='当前里程')
    license_plate = db.Column(db.String(20), nullable=True, comment='车牌号')
    insurance_policy = db.Column(db.String(100), nullable=True, comment='保单号')
    insurance_expiry = db.Column(db.Date, nullable=True, comment='保险到期日')
    oil_type = db.Column(db.String(50), nullable=True, comment='机油型号')
    oil_change_interval_miles = db.Column(db.Integer, nullable=True, comment='换油间隔(英里)')
    oil_change_interval_months = db.Column(db.Integer, nullable=True, comment='换油间隔(月)')
    notes = db.Column(db.Text, nullable=True, comment='备注')
    image_path = db.Column(db.String(255), nullable=True, comment='车辆图片路径')
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now, comment='创建时间')
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.now, onupdate=datetime.now, comment='更新时间')

    # 一对多关系，删除车辆时级联删除其手册、视频和维修记录
    manuals = db.relationship('Manual', back_populates='vehicle', cascade='all, delete-orphan', passive_deletes=True)
    videos = db.relationship('Video', back_populates='vehicle', cascade='all, delete-orphan', passive_deletes=True)
    maintenance_logs = db.relationship('MaintenanceLog', back_populates='vehicle', cascade='all, delete-orphan', passive_deletes=True)

    # 可通过补丁修改的字段
    EDITABLE_FIELDS = (
        'type', 'make', 'model', 'year', 'vin', 'color', 'purchase_date', 'purchase_price',
        'current_mileage', 'license_plate', 'insurance_policy', 'insurance_expiry', 'oil_type',
        'oil_change_interval_miles', 'oil_change_interval_months', 'notes', 'image_path',
    )

    def __repr__(self):
        return f'<Vehicle {self.id}: {self.year} {self.make} {self.model}>'

    def to_dict(self):
        data = {"id": self.id}
        for field in self.EDITABLE_FIELDS:
            data[field] = getattr(self, field)
        data['purchase_date'] = format_date(self.purchase_date)
        data['insurance_expiry'] = format_date(self.insurance_expiry)
        data['created_at'] = format_datetime(self.created_at)
        data['updated_at'] = format_datetime(self.updated_at)
        return data

    def identity_dict(self):
        """附加到手册/视频/维修记录上的车辆标识字段"""
        return {
            "make": self.make,
            "model": self.model,
            "year": self.year,
            "vehicle_type": self.type,
        }
