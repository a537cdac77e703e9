from sqlalchemy import func, or_, select
from sqlalchemy.orm import contains_eager
from ..errors import ValidationError
from ..models import Manual, Vehicle, VehicleType
from ..utils.convert import parse_text
from .base import BaseRepository


class ManualRepository(BaseRepository):
    """维修手册仓储"""

    NEWEST_FIRST = (Manual.created_at.desc(), Manual.id.desc())

    def _query(self):
        return select(Manual).join(Manual.vehicle).options(contains_eager(Manual.vehicle))

    def _fetch(self, stmt):
        return [manual.to_dict() for manual in self.session.scalars(stmt)]

    def get_by_vehicle_id(self, vehicle_id):
        self.get_or_404(Vehicle, vehicle_id, 'Vehicle')
        return self._fetch(self._query().where(Manual.vehicle_id == vehicle_id).order_by(*self.NEWEST_FIRST))

    def get_by_id(self, manual_id):
        return self.get_or_404(Manual, manual_id, 'Manual').to_dict()

    def create(self, vehicle_id, title, file_path, file_type='pdf'):
        title = parse_text(title)
        if not title:
            raise ValidationError.required('title')
        if not file_path:
            raise ValidationError("Manual file required")

        self.get_or_404(Vehicle, vehicle_id, 'Vehicle')
        with self.atomic('upload manual'):
            manual = Manual(vehicle_id=vehicle_id, title=title, file_path=file_path, file_type=file_type)
            self.session.add(manual)

        self.logger.success(f"车辆 {vehicle_id} 新增手册: {manual.id} {title}")
        return manual.to_dict()

    def update(self, manual_id, title):
        """手册只允许修改标题"""
        title = parse_text(title)
        if not title:
            raise ValidationError.required('title')

        with self.atomic('update manual'):
            manual = self.get_or_404(Manual, manual_id, 'Manual')
            manual.title = title
        return manual.to_dict()

    def delete(self, manual_id):
        """删除手册记录，返回被删除的数据供路由层清理文件"""
        with self.atomic('delete manual'):
            manual = self.get_or_404(Manual, manual_id, 'Manual')
            deleted = manual.to_dict()
            self.session.delete(manual)
        return deleted

    def get_all(self):
        return self._fetch(self._query().order_by(*self.NEWEST_FIRST))

    def search(self, term):
        pattern = f"%{term}%"
        stmt = (
            self._query()
            .where(or_(Manual.title.ilike(pattern), Vehicle.make.ilike(pattern), Vehicle.model.ilike(pattern)))
            .order_by(*self.NEWEST_FIRST)
        )
        return self._fetch(stmt)

    def get_recent(self, limit=5):
        return self._fetch(self._query().order_by(*self.NEWEST_FIRST).limit(limit))

    def get_count_by_type(self):
        """按车辆类型统计手册数量，缺失的类型补 0"""
        rows = self.session.execute(
            select(Vehicle.type, func.count(Manual.id)).select_from(Manual).join(Manual.vehicle).group_by(Vehicle.type)
        ).all()
        counts = {vehicle_type: 0 for vehicle_type in VehicleType.values()}
        counts.update(dict(rows))
        return counts
