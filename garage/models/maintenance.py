from datetime import datetime
from ..extensions import db
from ..utils.convert import format_date, format_datetime
from .association import maintenance_log_tags

DEFAULT_TAG_COLOR = '#6b7280'
DEFAULT_TAG_ICON = 'tag'

# 初始化数据库时写入的默认标签
DEFAULT_TAGS = [
    {'name': 'Oil Change', 'color': '#f59e0b', 'icon': 'droplet'},
    {'name': 'Tire Rotation', 'color': '#3b82f6', 'icon': 'refresh-cw'},
    {'name': 'Brake Service', 'color': '#ef4444', 'icon': 'disc'},
    {'name': 'Filter Replacement', 'color': '#8b5cf6', 'icon': 'wind'},
    {'name': 'Battery', 'color': '#10b981', 'icon': 'battery'},
    {'name': 'Inspection', 'color': '#6366f1', 'icon': 'search'},
    {'name': 'Fluid Check', 'color': '#06b6d4', 'icon': 'droplets'},
    {'name': 'Tune Up', 'color': '#ec4899', 'icon': 'wrench'},
    {'name': 'Chain/Belt', 'color': '#84cc16', 'icon': 'link'},
    {'name': 'Electrical', 'color': '#f97316', 'icon': 'zap'},
]

class MaintenanceTag(db.Model):
    """
    维修标签表（与车辆无关，可被多条维修记录复用）
    +--------+--------------+------+-----+-----------+------------------+
    | Field  | Type         | Null | Key | Default   | Comment          |
    +--------+--------------+------+-----+-----------+------------------+
    | id     | Integer      | NO   | PRI | auto_inc  | 标签ID           |
    | name   | String(50)   | NO   | UNI | NULL      | 标签名           |
    | color  | String(7)    | YES  |     | '#6b7280' | 十六进制颜色     |
    | icon   | String(50)   | YES  |     | NULL      | 图标名           |
    +--------+--------------+------+-----+-----------+------------------+
    """
    __tablename__ = 'maintenance_tags'
    __table_args__ = {'comment': '维修标签表'}

    id = db.Column(db.Integer, primary_key=True, autoincrement=True, comment='标签ID')
    name = db.Column(db.String(50), nullable=False, unique=True, comment='标签名')
    color = db.Column(db.String(7), nullable=True, default=DEFAULT_TAG_COLOR, comment='颜色')
    icon = db.Column(db.String(50), nullable=True, comment='图标')

    logs = db.relationship('MaintenanceLog', secondary=maintenance_log_tags, back_populates='tags', passive_deletes=True)

    def __repr__(self):
        return f'<MaintenanceTag {self.id}: {self.name}>'

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "icon": self.icon,
        }

class MaintenanceLog(db.Model):
    """
    维修记录表
    +-------------+---------------+------+-----+----------------+------------------+
    | Field       | Type          | Null | Key | Default        | Comment          |
    +-------------+---------------+------+-----+----------------+------------------+
    | id          | Integer       | NO   | PRI | auto_increment | 记录ID           |
    | vehicle_id  | Integer       | NO   | MUL | NULL           | 所属车辆ID       |
    | date        | Date          | NO   | MUL | NULL           | 维修日期         |
    | description | Text          | NO   |     | NULL           | 描述             |
    | mileage     | Integer       | YES  |     | NULL           | 维修时里程       |
    | cost        | Numeric(10,2) | YES  |     | NULL           | 费用             |
    | created_at  | DateTime      | NO   |     | now            | 创建时间(微秒)   |
    +-------------+---------------+------+-----+----------------+------------------+
    """
    __tablename__ = 'maintenance_logs'
    __table_args__ = {'comment': '维修记录表'}

    id = db.Column(db.Integer, primary_key=True, autoincrement=True, comment='记录ID')
    vehicle_id = db.Column(db.Integer, db.ForeignKey('vehicles.id', ondelete='CASCADE'), nullable=False, index=True, comment='所属车辆ID')
    date = db.Column(db.Date, nullable=False, index=True, comment='维修日期')
    description = db.Column(db.Text, nullable=False, comment='描述')
    mileage = db.Column(db.Integer, nullable=True, comment='里程')
    cost = db.Column(db.Numeric(10, 2, asdecimal=False), nullable=True, comment='费用')
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now, comment='创建时间')

    vehicle = db.relationship('Vehicle', back_populates='maintenance_logs')
    tags = db.relationship(
        'MaintenanceTag',
        secondary=maintenance_log_tags,
        back_populates='logs',
        order_by='MaintenanceTag.id'
    )

    def __repr__(self):
        return f'<MaintenanceLog {self.id}: {self.date} {self.description}>'

    def to_dict(self, with_vehicle=True):
        data = {
            "id": self.id,
            "vehicle_id": self.vehicle_id,
            "date": format_date(self.date),
            "description": self.description,
            "mileage": self.mileage,
            "cost": self.cost,
            "created_at": format_datetime(self.created_at),
            "tags": [tag.to_dict() for tag in self.tags],
        }
        if with_vehicle and self.vehicle is not None:
            data.update(self.vehicle.identity_dict())
        return data
