from sqlalchemy import func, or_, select
from sqlalchemy.orm import contains_eager
from ..errors import ValidationError
from ..models import Vehicle, VehicleType, Video, VideoType
from ..utils.convert import parse_text
from .base import BaseRepository
from .patch import VideoPatch, parse_video_type


class VideoRepository(BaseRepository):
    """教学视频仓储，区分本地上传(local)与YouTube(youtube)两种来源"""

    NEWEST_FIRST = (Video.created_at.desc(), Video.id.desc())

    def _query(self):
        return select(Video).join(Video.vehicle).options(contains_eager(Video.vehicle))

    def _fetch(self, stmt):
        return [video.to_dict() for video in self.session.scalars(stmt)]

    def get_by_vehicle_id(self, vehicle_id):
        self.get_or_404(Vehicle, vehicle_id, 'Vehicle')
        return self._fetch(self._query().where(Video.vehicle_id == vehicle_id).order_by(*self.NEWEST_FIRST))

    def get_by_id(self, video_id):
        return self.get_or_404(Video, video_id, 'Video').to_dict()

    def get_by_type(self, video_type):
        if parse_video_type(video_type) is None:
            raise ValidationError("Invalid video type")
        return self._fetch(self._query().where(Video.type == video_type).order_by(*self.NEWEST_FIRST))

    def create(self, vehicle_id, title, video_type, path_or_url, description=None, thumbnail_path=None):
        title = parse_text(title)
        if not title:
            raise ValidationError.required('title')
        if parse_video_type(video_type) is None:
            raise ValidationError.required('type')
        if not path_or_url:
            raise ValidationError.required('path_or_url')

        self.get_or_404(Vehicle, vehicle_id, 'Vehicle')
        with self.atomic('add video'):
            video = Video(
                vehicle_id=vehicle_id,
                title=title,
                description=description,
                type=video_type,
                path_or_url=path_or_url,
                thumbnail_path=thumbnail_path,
            )
            self.session.add(video)

        self.logger.success(f"车辆 {vehicle_id} 新增{video_type}视频: {video.id} {title}")
        return video.to_dict()

    def update(self, video_id, patch):
        """修改标题/描述/缩略图，未提供的字段保持原值"""
        if not isinstance(patch, VideoPatch):
            patch = VideoPatch.from_dict(patch)

        with self.atomic('update video'):
            video = self.get_or_404(Video, video_id, 'Video')
            patch.apply(video)
        return video.to_dict()

    def delete(self, video_id):
        """删除视频记录，返回被删除的数据供路由层清理本地文件"""
        with self.atomic('delete video'):
            video = self.get_or_404(Video, video_id, 'Video')
            deleted = video.to_dict()
            self.session.delete(video)
        return deleted

    def get_all(self):
        return self._fetch(self._query().order_by(*self.NEWEST_FIRST))

    def search(self, term):
        pattern = f"%{term}%"
        stmt = (
            self._query()
            .where(or_(
                Video.title.ilike(pattern),
                Video.description.ilike(pattern),
                Vehicle.make.ilike(pattern),
                Vehicle.model.ilike(pattern),
            ))
            .order_by(*self.NEWEST_FIRST)
        )
        return self._fetch(stmt)

    def get_recent(self, limit=5):
        return self._fetch(self._query().order_by(*self.NEWEST_FIRST).limit(limit))

    def get_count_by_vehicle_type(self):
        rows = self.session.execute(
            select(Vehicle.type, func.count(Video.id)).select_from(Video).join(Video.vehicle).group_by(Vehicle.type)
        ).all()
        counts = {vehicle_type: 0 for vehicle_type in VehicleType.values()}
        counts.update(dict(rows))
        return counts

    def get_count_by_video_type(self):
        rows = self.session.execute(select(Video.type, func.count(Video.id)).group_by(Video.type)).all()
        counts = {video_type: 0 for video_type in VideoType.values()}
        counts.update(dict(rows))
        return counts
