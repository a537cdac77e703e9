from datetime import datetime
from enum import Enum
from ..extensions import db
from ..utils.convert import format_datetime

class VideoType(Enum):
    """视频来源枚举"""
    LOCAL = 'local'      # 本地上传
    YOUTUBE = 'youtube'  # YouTube 嵌入链接

    @classmethod
    def values(cls):
        return [member.value for member in cls]

class Video(db.Model):
    """
    教学视频表
    +----------------+--------------+------+-----+-------------------+---------------------------+
    | Field          | Type         | Null | Key | Default           | Comment                   |
    +----------------+--------------+------+-----+-------------------+---------------------------+
    | id             | Integer      | NO   | PRI | auto_increment    | 视频ID                    |
    | vehicle_id     | Integer      | NO   | MUL | NULL              | 所属车辆ID                |
    | title          | String(200)  | NO   |     | NULL              | 标题                      |
    | description    | Text         | YES  |     | NULL              | 描述                      |
    | type           | Enum         | NO   |     | NULL              | local/youtube             |
    | path_or_url    | String(500)  | NO   |     | NULL              | 本地路径或嵌入链接        |
    | thumbnail_path | String(500)  | YES  |     | NULL              | 缩略图路径或链接          |
    | created_at     | DateTime     | NO   |     | now               | 创建时间                  |
    +----------------+--------------+------+-----+-------------------+---------------------------+
    """
    __tablename__ = 'videos'
    __table_args__ = {'comment': '教学视频表'}

    id = db.Column(db.Integer, primary_key=True, autoincrement=True, comment='视频ID')
    vehicle_id = db.Column(db.Integer, db.ForeignKey('vehicles.id', ondelete='CASCADE'), nullable=False, index=True, comment='所属车辆ID')
    title = db.Column(db.String(200), nullable=False, comment='标题')
    description = db.Column(db.Text, nullable=True, comment='描述')
    type = db.Column(db.Enum(*VideoType.values(), name='video_type_enum'), nullable=False, comment='视频来源')
    path_or_url = db.Column(db.String(500), nullable=False, comment='路径或链接')
    thumbnail_path = db.Column(db.String(500), nullable=True, comment='缩略图')
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now, comment='创建时间')

    vehicle = db.relationship('Vehicle', back_populates='videos')

    def __repr__(self):
        return f'<Video {self.id}: {self.title} ({self.type})>'

    @property
    def is_local(self):
        return self.type == VideoType.LOCAL.value

    def to_dict(self, with_vehicle=True):
        data = {
            "id": self.id,
            "vehicle_id": self.vehicle_id,
            "title": self.title,
            "description": self.description,
            "type": self.type,
            "path_or_url": self.path_or_url,
            "thumbnail_path": self.thumbnail_path,
            "created_at": format_datetime(self.created_at),
        }
        if with_vehicle and self.vehicle is not None:
            data.update(self.vehicle.identity_dict())
        return data
