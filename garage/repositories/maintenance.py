from datetime import date
from sqlalchemy import delete, func, insert, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import contains_eager, selectinload
from ..errors import Conflict, NotFound, ValidationError
from ..models import DEFAULT_TAGS, MaintenanceLog, MaintenanceTag, Vehicle, maintenance_log_tags
from ..models.maintenance import DEFAULT_TAG_COLOR, DEFAULT_TAG_ICON
from ..utils.convert import decimal_to_float, format_date, parse_date, parse_float, parse_int, parse_text
from .base import BaseRepository
from .patch import MaintenanceLogPatch, parse_id_list

# 快捷添加模板：类型键 -> 固定描述 + 按名称精确匹配的标签
QUICK_ADD_TEMPLATES = {
    'oil-change': {'description': 'Oil Change', 'tag_names': ['Oil Change']},
    'tire-rotation': {'description': 'Tire Rotation', 'tag_names': ['Tire Rotation']},
    'brake-service': {'description': 'Brake Service', 'tag_names': ['Brake Service']},
    'inspection': {'description': 'Vehicle Inspection', 'tag_names': ['Inspection']},
}


class MaintenanceRepository(BaseRepository):
    """
    维修记录与标签仓储

    多语句的写操作（记录 + 标签关联）都在同一个事务中完成，
    任何一步失败都会整体回滚，调用方不会看到只写了一半的记录
    """

    NEWEST_FIRST = (MaintenanceLog.date.desc(), MaintenanceLog.created_at.desc(), MaintenanceLog.id.desc())

    # ---------------------------------------------------------------- 查询

    def _query(self):
        """维修记录查询：附带车辆标识字段，标签通过 selectin 一次性加载"""
        return (
            select(MaintenanceLog)
            .join(MaintenanceLog.vehicle)
            .options(contains_eager(MaintenanceLog.vehicle), selectinload(MaintenanceLog.tags))
        )

    def _fetch(self, stmt):
        return [log.to_dict() for log in self.session.scalars(stmt)]

    def get_all(self):
        return self._fetch(self._query().order_by(*self.NEWEST_FIRST))

    def get_by_vehicle_id(self, vehicle_id):
        self.get_or_404(Vehicle, vehicle_id, 'Vehicle')
        return self._fetch(self._query().where(MaintenanceLog.vehicle_id == vehicle_id).order_by(*self.NEWEST_FIRST))

    def get_by_id(self, log_id):
        log = self.session.scalars(self._query().where(MaintenanceLog.id == log_id)).first()
        if log is None:
            raise NotFound('Maintenance log')
        return log.to_dict()

    def get_by_date_range(self, start_date, end_date):
        """获取日期区间内（包含两端）的维修记录，仅按日期倒序"""
        start, end = parse_date(start_date, 'startDate'), parse_date(end_date, 'endDate')
        if start is None or end is None:
            raise ValidationError("Start date and end date required")

        stmt = (
            self._query()
            .where(MaintenanceLog.date.between(start, end))
            .order_by(MaintenanceLog.date.desc())
        )
        return self._fetch(stmt)

    def get_recent(self, limit=5):
        return self._fetch(self._query().order_by(*self.NEWEST_FIRST).limit(limit))

    def get_by_tag_id(self, tag_id):
        """获取引用了某标签的维修记录，每条记录附带其完整的标签集合"""
        self.get_or_404(MaintenanceTag, tag_id, 'Tag')
        tagged = select(maintenance_log_tags.c.log_id).where(maintenance_log_tags.c.tag_id == tag_id)
        stmt = self._query().where(MaintenanceLog.id.in_(tagged)).order_by(*self.NEWEST_FIRST)
        return self._fetch(stmt)

    def get_cost_summary(self, vehicle_id=None):
        """
        费用汇总，可限定某辆车

        cost 为 NULL 的记录计入 total_logs，但不参与 sum/avg/min/max
        """
        stmt = select(
            func.count(MaintenanceLog.id),
            func.sum(MaintenanceLog.cost),
            func.avg(MaintenanceLog.cost),
            func.min(MaintenanceLog.cost),
            func.max(MaintenanceLog.cost),
            func.min(MaintenanceLog.date),
            func.max(MaintenanceLog.date),
        )
        if vehicle_id is not None:
            stmt = stmt.where(MaintenanceLog.vehicle_id == vehicle_id)

        total_logs, total, average, minimum, maximum, first, last = self.session.execute(stmt).one()
        return {
            "total_logs": total_logs,
            "total_cost": decimal_to_float(total),
            "average_cost": decimal_to_float(average),
            "min_cost": decimal_to_float(minimum),
            "max_cost": decimal_to_float(maximum),
            "first_maintenance": format_date(first),
            "last_maintenance": format_date(last),
        }

    def get_last_oil_change(self, vehicle_id):
        """
        最近一次换油记录

        描述包含 "oil change" 或任一标签名包含 "oil"（均不区分大小写）即视为换油，
        按日期、ID倒序取第一条；没有匹配时返回 None
        """
        self.get_or_404(Vehicle, vehicle_id, 'Vehicle')
        stmt = (
            self._query()
            .outerjoin(maintenance_log_tags, MaintenanceLog.id == maintenance_log_tags.c.log_id)
            .outerjoin(MaintenanceTag, MaintenanceTag.id == maintenance_log_tags.c.tag_id)
            .where(
                MaintenanceLog.vehicle_id == vehicle_id,
                or_(
                    func.lower(MaintenanceLog.description).like('%oil change%'),
                    func.lower(MaintenanceTag.name).like('%oil%'),
                ),
            )
            .order_by(MaintenanceLog.date.desc(), MaintenanceLog.id.desc())
            .limit(1)
        )
        log = self.session.scalars(stmt).first()
        return log.to_dict() if log is not None else None

    # ---------------------------------------------------------------- 写操作

    def _insert_tag_links(self, log_id, tag_ids):
        """为记录插入标签关联，存在未知标签ID时抛出 ValidationError（由事务回滚）"""
        if not tag_ids:
            return

        known = set(self.session.scalars(select(MaintenanceTag.id).where(MaintenanceTag.id.in_(tag_ids))))
        missing = [tag_id for tag_id in tag_ids if tag_id not in known]
        if missing:
            raise ValidationError(f"Unknown tag id: {', '.join(str(tag_id) for tag_id in missing)}")

        self.session.execute(
            insert(maintenance_log_tags),
            [{"log_id": log_id, "tag_id": tag_id} for tag_id in tag_ids]
        )

    def create(self, vehicle_id, date, description, mileage=None, cost=None, tag_ids=None):
        """
        创建维修记录及其标签关联（同一事务）

        :param date: 维修日期 (date 或 YYYY-MM-DD)
        :param tag_ids: 标签ID列表，重复的ID只插入一次
        :return: 新记录（含ID、车辆字段和标签）
        """
        log_date = parse_date(date)
        if log_date is None:
            raise ValidationError.required('date')
        description = parse_text(description)
        if description is None:
            raise ValidationError.required('description')
        mileage = parse_int(mileage, 'mileage')
        cost = parse_float(cost, 'cost')
        tag_ids = parse_id_list(tag_ids)

        self.get_or_404(Vehicle, vehicle_id, 'Vehicle')

        with self.atomic('create maintenance log'):
            log = MaintenanceLog(
                vehicle_id=vehicle_id,
                date=log_date,
                description=description,
                mileage=mileage,
                cost=cost,
            )
            self.session.add(log)
            self.session.flush()  # 获取 log.id
            log_id = log.id
            self._insert_tag_links(log_id, tag_ids)

        self.logger.success(f"车辆 {vehicle_id} 新增维修记录 {log_id}: {description} 标签={tag_ids}")
        return self.get_by_id(log_id)

    def update(self, log_id, patch):
        """
        更新维修记录，并整体替换其标签集合（先删后插）

        任一步骤失败都会回滚，记录的原字段和原标签集合保持不变
        """
        if not isinstance(patch, MaintenanceLogPatch):
            patch = MaintenanceLogPatch.from_dict(patch)

        with self.atomic('update maintenance log'):
            log = self.get_or_404(MaintenanceLog, log_id, 'Maintenance log')
            current_tag_ids = [tag.id for tag in log.tags]
            tag_ids = patch.resolve('tag_ids', current_tag_ids)

            patch.apply(log)
            self.session.flush()

            self.session.execute(delete(maintenance_log_tags).where(maintenance_log_tags.c.log_id == log_id))
            self._insert_tag_links(log_id, tag_ids)

        self.logger.info(f"更新维修记录 {log_id}: {patch.supplied()}")
        return self.get_by_id(log_id)

    def delete(self, log_id):
        """删除维修记录，标签关联随之删除，标签本身保留"""
        with self.atomic('delete maintenance log'):
            log = self.get_or_404(MaintenanceLog, log_id, 'Maintenance log')
            self.session.delete(log)
        self.logger.info(f"已删除维修记录 {log_id}")
        return {"message": "Maintenance log deleted successfully"}

    def quick_add(self, vehicle_id, type_key, mileage=None, today=None):
        """
        按模板快捷添加维修记录

        标签按名称精确匹配，找不到的标签直接跳过；日期为今天，费用为空
        """
        self.get_or_404(Vehicle, vehicle_id, 'Vehicle')

        template = QUICK_ADD_TEMPLATES.get(type_key)
        if template is None:
            raise ValidationError("Invalid maintenance type")

        tag_ids = list(self.session.scalars(
            select(MaintenanceTag.id)
            .where(MaintenanceTag.name.in_(template['tag_names']))
            .order_by(MaintenanceTag.id)
        ))
        return self.create(
            vehicle_id,
            today or date.today(),
            template['description'],
            mileage=mileage,
            cost=None,
            tag_ids=tag_ids,
        )

    # ---------------------------------------------------------------- 标签

    def get_all_tags(self):
        """所有标签及其被引用次数（含 0），按名称排序"""
        stmt = (
            select(MaintenanceTag, func.count(maintenance_log_tags.c.log_id))
            .outerjoin(maintenance_log_tags, MaintenanceTag.id == maintenance_log_tags.c.tag_id)
            .group_by(MaintenanceTag.id)
            .order_by(MaintenanceTag.name)
        )
        return [dict(tag.to_dict(), usage_count=usage_count) for tag, usage_count in self.session.execute(stmt)]

    def create_tag(self, name, color=None, icon=None):
        """创建标签，名称重复时抛出 Conflict 且不修改任何数据"""
        name = parse_text(name)
        if name is None:
            raise ValidationError("Tag name required")

        with self.atomic('create tag'):
            tag = MaintenanceTag(name=name, color=color or DEFAULT_TAG_COLOR, icon=icon or DEFAULT_TAG_ICON)
            self.session.add(tag)
            try:
                self.session.flush()
            except IntegrityError:
                raise Conflict("Tag name already exists")

        self.logger.success(f"新增维修标签: {tag.id} {name}")
        return tag.to_dict()

    def seed_default_tags(self):
        """写入默认标签，已存在的名称跳过，返回新增数量"""
        existing = set(self.session.scalars(select(MaintenanceTag.name)))
        missing = [tag for tag in DEFAULT_TAGS if tag['name'] not in existing]
        if not missing:
            return 0

        with self.atomic('seed default tags'):
            self.session.add_all(MaintenanceTag(**tag) for tag in missing)
        return len(missing)
