from datetime import date
from flask import Blueprint, current_app, request
from ..extensions import db
from ..oil_change import build_oil_change_report
from ..repositories import MaintenanceRepository, VehicleRepository
from ..utils.convert import parse_date, parse_int
from ..utils.logger import get_logger, log_requests
from ..utils.Response import ApiResponse, api_errors, request_data

maintenance_bp = Blueprint('maintenance_api', __name__)

def _repo():
    return MaintenanceRepository(db.session)

@maintenance_bp.route('', methods=['GET'])
@log_requests()
@api_errors("fetch maintenance logs")
def get_logs():
    """获取全部维修记录"""
    return ApiResponse.success(_repo().get_all()).to_json_response()

@maintenance_bp.route('/recent', methods=['GET'])
@log_requests()
@api_errors("fetch recent maintenance")
def get_recent_logs():
    """最近的维修记录"""
    limit = parse_int(request.args.get('limit'), 'limit') or 5
    return ApiResponse.success(_repo().get_recent(limit)).to_json_response()

@maintenance_bp.route('/cost-summary', methods=['GET'])
@log_requests()
@api_errors("fetch cost summary")
def get_cost_summary():
    """维修费用汇总，可通过 vehicleId 限定车辆"""
    vehicle_id = parse_int(request.args.get('vehicleId'), 'vehicleId')
    return ApiResponse.success(_repo().get_cost_summary(vehicle_id)).to_json_response()

@maintenance_bp.route('/date-range', methods=['GET'])
@log_requests()
@api_errors("fetch maintenance logs")
def get_logs_by_date_range():
    """按日期区间（含两端）查询维修记录"""
    logs = _repo().get_by_date_range(request.args.get('startDate'), request.args.get('endDate'))
    return ApiResponse.success(logs).to_json_response()

@maintenance_bp.route('/tags', methods=['GET'])
@log_requests()
@api_errors("fetch tags")
def get_tags():
    """获取所有标签及使用次数"""
    return ApiResponse.success(_repo().get_all_tags()).to_json_response()

@maintenance_bp.route('/tags', methods=['POST'])
@log_requests()
@api_errors("create tag")
def create_tag():
    """创建维修标签"""
    data = request_data()
    tag = _repo().create_tag(data.get('name'), data.get('color'), data.get('icon'))
    return ApiResponse.created(tag).to_json_response()

@maintenance_bp.route('/tags/<int:tag_id>/logs', methods=['GET'])
@log_requests()
@api_errors("fetch maintenance logs")
def get_logs_by_tag(tag_id):
    """获取使用了某标签的维修记录"""
    return ApiResponse.success(_repo().get_by_tag_id(tag_id)).to_json_response()

@maintenance_bp.route('/vehicle/<int:vehicle_id>', methods=['GET'])
@log_requests()
@api_errors("fetch maintenance logs")
def get_vehicle_logs(vehicle_id):
    """获取某辆车的维修记录"""
    return ApiResponse.success(_repo().get_by_vehicle_id(vehicle_id)).to_json_response()

@maintenance_bp.route('/vehicle/<int:vehicle_id>', methods=['POST'])
@log_requests()
@api_errors("create maintenance log")
def create_log(vehicle_id):
    """为车辆新增维修记录（可附带 tag_ids）"""
    data = request_data()
    log = _repo().create(
        vehicle_id,
        data.get('date'),
        data.get('description'),
        mileage=data.get('mileage'),
        cost=data.get('cost'),
        tag_ids=data.get('tag_ids'),
    )
    return ApiResponse.created(log).to_json_response()

@maintenance_bp.route('/vehicle/<int:vehicle_id>/quick-add', methods=['POST'])
@log_requests()
@api_errors("quick add maintenance")
def quick_add(vehicle_id):
    """
    快捷添加维修记录

    请求体: {"type": "oil-change" | "tire-rotation" | "brake-service" | "inspection", "mileage": 可选}
    """
    data = request_data()
    log = _repo().quick_add(vehicle_id, data.get('type'), mileage=data.get('mileage'))
    return ApiResponse.created(log).to_json_response()

@maintenance_bp.route('/vehicle/<int:vehicle_id>/last-oil-change', methods=['GET'])
@log_requests()
@api_errors("fetch last oil change")
def get_last_oil_change(vehicle_id):
    """最近一次换油记录，没有时返回 null"""
    return ApiResponse.success(_repo().get_last_oil_change(vehicle_id)).to_json_response()

@maintenance_bp.route('/oil-change-status', methods=['GET'])
@log_requests()
@api_errors("fetch oil change status")
def get_oil_change_status():
    """所有汽车/摩托车的换油状态，按 overdue/soon/ok/unknown 排序"""
    logger = get_logger(__name__)
    today = parse_date(request.args.get('today'), 'today') or date.today()

    report = build_oil_change_report(
        VehicleRepository(db.session),
        _repo(),
        today,
        soon_miles=current_app.config['OIL_CHANGE_SOON_MILES'],
        soon_days=current_app.config['OIL_CHANGE_SOON_DAYS'],
    )
    logger.debug(f"换油状态统计完成: {len(report)} 辆车, 基准日期 {today}")
    return ApiResponse.success([projection.to_dict() for projection in report]).to_json_response()

@maintenance_bp.route('/<int:log_id>', methods=['GET'])
@log_requests()
@api_errors("fetch maintenance log")
def get_log(log_id):
    """获取单条维修记录"""
    return ApiResponse.success(_repo().get_by_id(log_id)).to_json_response()

@maintenance_bp.route('/<int:log_id>', methods=['PUT'])
@log_requests()
@api_errors("update maintenance log")
def update_log(log_id):
    """更新维修记录；提供 tag_ids 时整体替换标签"""
    return ApiResponse.success(_repo().update(log_id, request_data())).to_json_response()

@maintenance_bp.route('/<int:log_id>', methods=['DELETE'])
@log_requests()
@api_errors("delete maintenance log")
def delete_log(log_id):
    """删除维修记录（标签本身保留）"""
    return ApiResponse.success(_repo().delete(log_id)).to_json_response()
