from sqlalchemy import String, cast, func, or_, select
from ..errors import ValidationError
from ..models import MaintenanceLog, Manual, Vehicle, VehicleType, Video
from .base import BaseRepository
from .patch import VehiclePatch, parse_vehicle_type


def _count_of(model):
    """统计某车辆下关联记录数的相关子查询"""
    return (
        select(func.count(model.id))
        .where(model.vehicle_id == Vehicle.id)
        .correlate(Vehicle)
        .scalar_subquery()
    )


class VehicleRepository(BaseRepository):
    """车辆仓储：增删改查、按类型分组、搜索与统计"""

    DISPLAY_ORDER = (Vehicle.year.desc(), Vehicle.make, Vehicle.model)

    def _with_counts(self):
        return select(
            Vehicle,
            _count_of(Manual).label('manual_count'),
            _count_of(Video).label('video_count'),
            _count_of(MaintenanceLog).label('maintenance_count'),
        )

    @staticmethod
    def _row_to_dict(row):
        vehicle, manual_count, video_count, maintenance_count = row
        data = vehicle.to_dict()
        data.update(
            manual_count=manual_count,
            video_count=video_count,
            maintenance_count=maintenance_count,
        )
        return data

    def get_all(self):
        """获取所有车辆并按类型分组，未知类型的车辆不出现在结果中"""
        stmt = self._with_counts().order_by(Vehicle.type, *self.DISPLAY_ORDER)

        grouped = {vehicle_type: [] for vehicle_type in VehicleType.values()}
        for row in self.session.execute(stmt):
            vehicle_type = row[0].type
            if vehicle_type in grouped:
                grouped[vehicle_type].append(self._row_to_dict(row))
        return grouped

    def get_by_type(self, vehicle_type):
        if parse_vehicle_type(vehicle_type) is None:
            raise ValidationError("Invalid vehicle type")
        stmt = self._with_counts().where(Vehicle.type == vehicle_type).order_by(*self.DISPLAY_ORDER)
        return [self._row_to_dict(row) for row in self.session.execute(stmt)]

    def get_by_id(self, vehicle_id):
        return self.get_or_404(Vehicle, vehicle_id, 'Vehicle').to_dict()

    def create(self, data):
        """创建车辆，type/make/model 必填"""
        patch = data if isinstance(data, VehiclePatch) else VehiclePatch.from_dict(data)

        vehicle = patch.apply(Vehicle())
        for field in ('type', 'make', 'model'):
            if getattr(vehicle, field) is None:
                raise ValidationError.required(field)

        with self.atomic('create vehicle'):
            self.session.add(vehicle)

        self.logger.success(f"成功创建车辆: {vehicle.id} {vehicle.make} {vehicle.model}")
        return vehicle.to_dict()

    def update(self, vehicle_id, patch):
        """
        部分更新车辆信息

        :param patch: VehiclePatch 或请求字典；未提供的字段保持原值
        """
        if not isinstance(patch, VehiclePatch):
            patch = VehiclePatch.from_dict(patch)

        with self.atomic('update vehicle'):
            vehicle = self.get_or_404(Vehicle, vehicle_id, 'Vehicle')
            patch.apply(vehicle)

        self.logger.info(f"更新车辆 {vehicle_id}: {patch.supplied()}")
        return vehicle.to_dict()

    def delete(self, vehicle_id):
        """
        删除车辆，手册/视频/维修记录及其标签关联由数据库级联删除

        :return: 被删除车辆的数据（路由层据此清理图片文件）
        """
        with self.atomic('delete vehicle'):
            vehicle = self.get_or_404(Vehicle, vehicle_id, 'Vehicle')
            deleted = vehicle.to_dict()
            self.session.delete(vehicle)

        self.logger.warning(f"已删除车辆 {vehicle_id} 及其关联数据")
        return deleted

    def search(self, term):
        """按品牌、型号、年份模糊搜索（不区分大小写）"""
        pattern = f"%{term}%"
        stmt = (
            select(Vehicle)
            .where(or_(
                Vehicle.make.ilike(pattern),
                Vehicle.model.ilike(pattern),
                cast(Vehicle.year, String).ilike(pattern),
            ))
            .order_by(Vehicle.type, *self.DISPLAY_ORDER)
        )
        return [vehicle.to_dict() for vehicle in self.session.scalars(stmt)]

    def get_recent(self, limit=5):
        stmt = select(Vehicle).order_by(Vehicle.created_at.desc(), Vehicle.id.desc()).limit(limit)
        return [vehicle.to_dict() for vehicle in self.session.scalars(stmt)]

    def get_stats(self):
        """各类型车辆数量以及全系统手册/视频/维修记录总数"""
        by_type = dict(self.session.execute(
            select(Vehicle.type, func.count(Vehicle.id)).group_by(Vehicle.type)
        ).all())

        stats = {f"{vehicle_type}_count": by_type.get(vehicle_type, 0) for vehicle_type in VehicleType.values()}
        stats['total_count'] = self.session.scalar(select(func.count(Vehicle.id)))
        stats['total_manuals'] = self.session.scalar(select(func.count(Manual.id)))
        stats['total_videos'] = self.session.scalar(select(func.count(Video.id)))
        stats['total_maintenance'] = self.session.scalar(select(func.count(MaintenanceLog.id)))
        return stats
