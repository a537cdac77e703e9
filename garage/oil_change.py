"""
换油到期推算

纯函数：输入车辆、最近一次换油记录和"今天"，输出到期里程/日期以及状态，
不访问数据库也不读取系统时间，便于单独测试
"""
from dataclasses import asdict, dataclass
from datetime import date
from enum import Enum
from typing import Optional
from dateutil.relativedelta import relativedelta
from .models import VehicleType
from .utils.convert import format_date, parse_date

SOON_MILES = 500
SOON_DAYS = 30

# 只有汽车和摩托车需要换油
OIL_CHANGE_VEHICLE_TYPES = (VehicleType.MOTORCYCLE.value, VehicleType.CAR.value)


class OilChangeStatus(Enum):
    """换油状态，rank 越小越紧急"""
    OVERDUE = ('overdue', 1)
    SOON = ('soon', 2)
    OK = ('ok', 3)
    UNKNOWN = ('unknown', 4)

    def __init__(self, label, rank):
        self.label = label
        self.rank = rank


@dataclass
class OilChangeProjection:
    vehicle_id: int
    make: str
    model: str
    year: Optional[int]
    type: str
    oil_type: Optional[str]
    current_mileage: Optional[int]
    last_change_date: Optional[date]
    last_change_mileage: Optional[int]
    next_due_miles: Optional[int]
    next_due_date: Optional[date]
    miles_remaining: Optional[int]
    days_remaining: Optional[int]
    status: OilChangeStatus

    def to_dict(self):
        data = asdict(self)
        data['status'] = self.status.label
        for field in ('last_change_date', 'next_due_date'):
            data[field] = format_date(data[field])
        return data


def calc_due_miles(last_mileage, interval_miles):
    if last_mileage is None or interval_miles is None:
        return None
    return last_mileage + interval_miles


def calc_due_date(last_date, interval_months):
    """按自然月推算，1月31日 + 1个月 = 2月28/29日"""
    if last_date is None or interval_months is None:
        return None
    return last_date + relativedelta(months=int(interval_months))


def classify(miles_remaining, days_remaining, soon_miles=SOON_MILES, soon_days=SOON_DAYS):
    """
    根据剩余里程/天数判定状态

    任一维度到期即 overdue；否则任一维度进入预警区间即 soon；
    两个维度都无法比较时为 unknown
    """
    remaining = [(value, threshold) for value, threshold in
                 ((miles_remaining, soon_miles), (days_remaining, soon_days)) if value is not None]
    if not remaining:
        return OilChangeStatus.UNKNOWN
    if any(value <= 0 for value, _ in remaining):
        return OilChangeStatus.OVERDUE
    if any(value <= threshold for value, threshold in remaining):
        return OilChangeStatus.SOON
    return OilChangeStatus.OK


def project_oil_change(vehicle, last_change, today, soon_miles=SOON_MILES, soon_days=SOON_DAYS):
    """
    推算单辆车的换油状态

    :param vehicle: 车辆字典（VehicleRepository 返回的数据）
    :param last_change: 最近一次换油记录字典，没有时为 None
    :param today: 参与比较的"今天"
    :return: OilChangeProjection
    """
    today = parse_date(today, 'today')
    current_mileage = vehicle.get('current_mileage')

    last_date = last_mileage = None
    if last_change is not None:
        last_date = parse_date(last_change.get('date'))
        last_mileage = last_change.get('mileage')

    next_due_miles = calc_due_miles(last_mileage, vehicle.get('oil_change_interval_miles'))
    next_due_date = calc_due_date(last_date, vehicle.get('oil_change_interval_months'))

    miles_remaining = None
    if next_due_miles is not None and current_mileage is not None:
        miles_remaining = next_due_miles - current_mileage

    days_remaining = None
    if next_due_date is not None:
        days_remaining = (next_due_date - today).days

    return OilChangeProjection(
        vehicle_id=vehicle.get('id'),
        make=vehicle.get('make'),
        model=vehicle.get('model'),
        year=vehicle.get('year'),
        type=vehicle.get('type'),
        oil_type=vehicle.get('oil_type'),
        current_mileage=current_mileage,
        last_change_date=last_date,
        last_change_mileage=last_mileage,
        next_due_miles=next_due_miles,
        next_due_date=next_due_date,
        miles_remaining=miles_remaining,
        days_remaining=days_remaining,
        status=classify(miles_remaining, days_remaining, soon_miles, soon_days),
    )


def sort_projections(projections):
    """overdue -> soon -> ok -> unknown，同一状态内保持原顺序"""
    return sorted(projections, key=lambda p: p.status.rank)


def build_oil_change_report(vehicle_repo, maintenance_repo, today, soon_miles=SOON_MILES, soon_days=SOON_DAYS):
    """汇总所有汽车/摩托车的换油状态，按紧急程度排序"""
    grouped = vehicle_repo.get_all()
    projections = []
    for vehicle_type in OIL_CHANGE_VEHICLE_TYPES:
        for vehicle in grouped.get(vehicle_type, []):
            last_change = maintenance_repo.get_last_oil_change(vehicle['id'])
            projections.append(project_oil_change(vehicle, last_change, today, soon_miles, soon_days))
    return sort_projections(projections)
