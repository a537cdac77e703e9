from datetime import datetime
from ..extensions import db
from ..utils.convert import format_datetime

class Manual(db.Model):
    """
    维修手册表
    +------------+--------------+------+-----+-------------------+----------------------+
    | Field      | Type         | Null | Key | Default           | Comment              |
    +------------+--------------+------+-----+-------------------+----------------------+
    | id         | Integer      | NO   | PRI | auto_increment    | 手册ID               |
    | vehicle_id | Integer      | NO   | MUL | NULL              | 所属车辆ID           |
    | title      | String(200)  | NO   |     | NULL              | 标题                 |
    | file_path  | String(255)  | NO   |     | NULL              | /uploads/manuals/..  |
    | file_type  | String(20)   | YES  |     | 'pdf'             | 文件类型             |
    | created_at | DateTime     | NO   |     | now               | 创建时间             |
    +------------+--------------+------+-----+-------------------+----------------------+
    """
    __tablename__ = 'manuals'
    __table_args__ = {'comment': '维修手册表'}

    id = db.Column(db.Integer, primary_key=True, autoincrement=True, comment='手册ID')
    vehicle_id = db.Column(db.Integer, db.ForeignKey('vehicles.id', ondelete='CASCADE'), nullable=False, index=True, comment='所属车辆ID')
    title = db.Column(db.String(200), nullable=False, comment='标题')
    file_path = db.Column(db.String(255), nullable=False, comment='文件路径')
    file_type = db.Column(db.String(20), nullable=True, default='pdf', comment='文件类型')
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now, comment='创建时间')

    vehicle = db.relationship('Vehicle', back_populates='manuals')

    def __repr__(self):
        return f'<Manual {self.id}: {self.title}>'

    def to_dict(self, with_vehicle=True):
        data = {
            "id": self.id,
            "vehicle_id": self.vehicle_id,
            "title": self.title,
            "file_path": self.file_path,
            "file_type": self.file_type,
            "created_at": format_datetime(self.created_at),
        }
        if with_vehicle and self.vehicle is not None:
            data.update(self.vehicle.identity_dict())
        return data
