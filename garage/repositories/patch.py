"""
部分更新（补丁）结构

每个实体的更新请求都先转换为一个显式的补丁对象：
    - 字段未提供（UNSET）       -> 保留数据库中已有的值
    - 字段提供了 None/空字符串  -> 置为 NULL
    - KEEP_ON_EMPTY 中的字段为空 -> 同样保留已有值（必填的标识性字段）
"""
from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Tuple
from ..errors import ValidationError
from ..models import VehicleType, VideoType
from ..utils.convert import parse_date, parse_float, parse_int, parse_text


class _Unset:
    """表示"未提供"的哨兵，与 None（显式置空）区分"""

    def __repr__(self):
        return 'UNSET'

    def __bool__(self):
        return False


UNSET = _Unset()


def parse_vehicle_type(value, field='type'):
    value = parse_text(value)
    if value is None:
        return None
    if value not in VehicleType.values():
        raise ValidationError("Invalid vehicle type")
    return value


def parse_video_type(value, field='type'):
    value = parse_text(value)
    if value is None:
        return None
    if value not in VideoType.values():
        raise ValidationError("Invalid video type")
    return value


def parse_id_list(value, field='tag_ids'):
    """解析ID列表，支持 [1, 2]、"1,2" 两种形式；去重并保持原顺序"""
    if value is None or value == '':
        return []
    if isinstance(value, str):
        value = [part for part in value.split(',') if part.strip()]
    if not isinstance(value, (list, tuple)):
        value = [value]

    ids = []
    for item in value:
        ident = parse_int(item, field)
        if ident is not None and ident not in ids:
            ids.append(ident)
    return ids


@dataclass
class Patch:
    """补丁基类，子类用 dataclass 字段声明可修改的列"""
    PARSERS: ClassVar[Dict[str, Any]] = {}
    KEEP_ON_EMPTY: ClassVar[Tuple[str, ...]] = ()
    NON_COLUMN: ClassVar[Tuple[str, ...]] = ()

    @classmethod
    def from_dict(cls, data) -> 'Patch':
        """只取请求中出现过的键，其余保持 UNSET"""
        data = data or {}
        return cls(**{f.name: data[f.name] for f in fields(cls) if f.name in data})

    def supplied(self):
        """返回实际提供了的字段名"""
        return [f.name for f in fields(self) if getattr(self, f.name) is not UNSET]

    def resolve(self, name, current):
        """计算某个字段更新后的值"""
        value = getattr(self, name)
        if value is UNSET:
            return current
        parser = self.PARSERS.get(name, parse_text)
        parsed = parser(value, name)
        if parsed is None and name in self.KEEP_ON_EMPTY:
            return current
        return parsed

    def apply(self, obj):
        """将补丁应用到ORM对象上（不提交）"""
        for f in fields(self):
            if f.name in self.NON_COLUMN:
                continue
            setattr(obj, f.name, self.resolve(f.name, getattr(obj, f.name)))
        return obj


@dataclass
class VehiclePatch(Patch):
    type: Any = UNSET
    make: Any = UNSET
    model: Any = UNSET
    year: Any = UNSET
    vin: Any = UNSET
    color: Any = UNSET
    purchase_date: Any = UNSET
    purchase_price: Any = UNSET
    current_mileage: Any = UNSET
    license_plate: Any = UNSET
    insurance_policy: Any = UNSET
    insurance_expiry: Any = UNSET
    oil_type: Any = UNSET
    oil_change_interval_miles: Any = UNSET
    oil_change_interval_months: Any = UNSET
    notes: Any = UNSET
    image_path: Any = UNSET

    PARSERS: ClassVar[Dict[str, Any]] = {
        'type': parse_vehicle_type,
        'year': parse_int,
        'purchase_date': parse_date,
        'purchase_price': parse_float,
        'current_mileage': parse_int,
        'insurance_expiry': parse_date,
        'oil_change_interval_miles': parse_int,
        'oil_change_interval_months': parse_int,
    }
    KEEP_ON_EMPTY: ClassVar[Tuple[str, ...]] = ('type', 'make', 'model', 'year')


@dataclass
class VideoPatch(Patch):
    title: Any = UNSET
    description: Any = UNSET
    thumbnail_path: Any = UNSET

    KEEP_ON_EMPTY: ClassVar[Tuple[str, ...]] = ('title',)


@dataclass
class MaintenanceLogPatch(Patch):
    date: Any = UNSET
    description: Any = UNSET
    mileage: Any = UNSET
    cost: Any = UNSET
    tag_ids: Any = UNSET

    PARSERS: ClassVar[Dict[str, Any]] = {
        'date': parse_date,
        'mileage': parse_int,
        'cost': parse_float,
        'tag_ids': parse_id_list,
    }
    KEEP_ON_EMPTY: ClassVar[Tuple[str, ...]] = ('date', 'description')
    NON_COLUMN: ClassVar[Tuple[str, ...]] = ('tag_ids',)
