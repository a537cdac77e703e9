from flask import Blueprint, request
from ..errors import ValidationError
from ..extensions import db
from ..repositories import ManualRepository, VehicleRepository, VideoRepository
from ..utils.convert import parse_int
from ..utils.logger import get_logger, log_requests
from ..utils.Response import ApiResponse, api_errors, request_data
from ..utils.uploads import remove_upload, save_upload

vehicle_bp = Blueprint('vehicle_api', __name__)

def _repo():
    return VehicleRepository(db.session)

@vehicle_bp.route('', methods=['GET'])
@log_requests()
@api_errors("fetch vehicles")
def get_vehicles():
    """获取所有车辆（按 bike/motorcycle/car 分组）"""
    return ApiResponse.success(_repo().get_all()).to_json_response()

@vehicle_bp.route('/stats', methods=['GET'])
@log_requests()
@api_errors("fetch stats")
def get_stats():
    """车辆数量与手册/视频/维修记录总数统计"""
    return ApiResponse.success(_repo().get_stats()).to_json_response()

@vehicle_bp.route('/search', methods=['GET'])
@log_requests()
@api_errors("search vehicles")
def search_vehicles():
    """按品牌/型号/年份搜索车辆"""
    term = request.args.get('q', '').strip()
    if not term:
        raise ValidationError("Search term required")
    return ApiResponse.success(_repo().search(term)).to_json_response()

@vehicle_bp.route('/type/<vehicle_type>', methods=['GET'])
@log_requests()
@api_errors("fetch vehicles")
def get_vehicles_by_type(vehicle_type):
    """获取某一类型的车辆"""
    return ApiResponse.success(_repo().get_by_type(vehicle_type)).to_json_response()

@vehicle_bp.route('/recent', methods=['GET'])
@log_requests()
@api_errors("fetch recent vehicles")
def get_recent_vehicles():
    """最近添加的车辆"""
    limit = parse_int(request.args.get('limit'), 'limit') or 5
    return ApiResponse.success(_repo().get_recent(limit)).to_json_response()

@vehicle_bp.route('/<int:vehicle_id>', methods=['GET'])
@log_requests()
@api_errors("fetch vehicle")
def get_vehicle(vehicle_id):
    """获取单辆车辆详情"""
    return ApiResponse.success(_repo().get_by_id(vehicle_id)).to_json_response()

@vehicle_bp.route('', methods=['POST'])
@log_requests()
@api_errors("create vehicle")
def create_vehicle():
    """
    创建车辆

    支持 JSON 或 multipart 表单，表单中可附带 image 图片文件；
    数据库写入失败时删除已保存的图片
    """
    logger = get_logger(__name__)
    data = request_data()

    image_path = None
    if request.files.get('image'):
        image_path = save_upload(request.files['image'], 'vehicles')
        data['image_path'] = image_path

    try:
        vehicle = _repo().create(data)
    except Exception:
        if image_path:
            logger.warning(f"车辆创建失败，清理已上传图片 {image_path}")
            remove_upload(image_path)
        raise

    return ApiResponse.created(vehicle).to_json_response()

@vehicle_bp.route('/<int:vehicle_id>', methods=['PUT'])
@log_requests()
@api_errors("update vehicle")
def update_vehicle(vehicle_id):
    """更新车辆信息，上传新图片时替换旧图片"""
    logger = get_logger(__name__)
    repo = _repo()
    data = request_data()

    new_image = None
    if request.files.get('image'):
        old_image = repo.get_by_id(vehicle_id).get('image_path')
        new_image = save_upload(request.files['image'], 'vehicles')
        data['image_path'] = new_image

    try:
        vehicle = repo.update(vehicle_id, data)
    except Exception:
        if new_image:
            logger.warning(f"车辆 {vehicle_id} 更新失败，清理新上传图片 {new_image}")
            remove_upload(new_image)
        raise

    if new_image and old_image and old_image != new_image:
        remove_upload(old_image)

    return ApiResponse.success(vehicle).to_json_response()

@vehicle_bp.route('/<int:vehicle_id>', methods=['DELETE'])
@log_requests()
@api_errors("delete vehicle")
def delete_vehicle(vehicle_id):
    """删除车辆及其手册、视频、维修记录"""
    # 数据库级联删除前先记下手册和本地视频文件
    files = [manual["file_path"] for manual in ManualRepository(db.session).get_by_vehicle_id(vehicle_id)]
    for video in VideoRepository(db.session).get_by_vehicle_id(vehicle_id):
        if video["type"] == "local":
            files += [video["path_or_url"], video["thumbnail_path"]]

    deleted = _repo().delete(vehicle_id)
    for path in [deleted.get("image_path")] + files:
        remove_upload(path)
    return ApiResponse.message_only("Vehicle deleted successfully").to_json_response()
