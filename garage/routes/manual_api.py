import os
from flask import Blueprint, request, send_file
from werkzeug.utils import secure_filename
from ..errors import NotFound, ValidationError
from ..extensions import db
from ..repositories import ManualRepository
from ..utils.convert import parse_int
from ..utils.logger import get_logger, log_requests
from ..utils.Response import ApiResponse, api_errors, request_data
from ..utils.uploads import remove_upload, resolve_upload_path, save_upload

manual_bp = Blueprint('manual_api', __name__)

def _repo():
    return ManualRepository(db.session)

@manual_bp.route('', methods=['GET'])
@log_requests()
@api_errors("fetch manuals")
def get_manuals():
    """获取全部手册"""
    return ApiResponse.success(_repo().get_all()).to_json_response()

@manual_bp.route('/recent', methods=['GET'])
@log_requests()
@api_errors("fetch recent manuals")
def get_recent_manuals():
    limit = parse_int(request.args.get('limit'), 'limit') or 5
    return ApiResponse.success(_repo().get_recent(limit)).to_json_response()

@manual_bp.route('/count-by-type', methods=['GET'])
@log_requests()
@api_errors("fetch manual counts")
def get_manual_counts():
    """按车辆类型统计手册数量"""
    return ApiResponse.success(_repo().get_count_by_type()).to_json_response()

@manual_bp.route('/search', methods=['GET'])
@log_requests()
@api_errors("search manuals")
def search_manuals():
    term = request.args.get('q', '').strip()
    if not term:
        raise ValidationError("Search term required")
    return ApiResponse.success(_repo().search(term)).to_json_response()

@manual_bp.route('/vehicle/<int:vehicle_id>', methods=['GET'])
@log_requests()
@api_errors("fetch manuals")
def get_vehicle_manuals(vehicle_id):
    """获取某辆车的手册"""
    return ApiResponse.success(_repo().get_by_vehicle_id(vehicle_id)).to_json_response()

@manual_bp.route('/vehicle/<int:vehicle_id>', methods=['POST'])
@log_requests()
@api_errors("upload manual")
def upload_manual(vehicle_id):
    """
    上传PDF手册

    multipart 字段: manual (文件), title (可选，默认取文件名)
    """
    logger = get_logger(__name__)
    file = request.files.get('manual')
    if file is None or not file.filename:
        raise ValidationError("Manual file required")

    data = request_data()
    title = data.get('title') or os.path.splitext(file.filename)[0]
    file_path = save_upload(file, 'manuals')

    try:
        manual = _repo().create(vehicle_id, title, file_path)
    except Exception:
        logger.warning(f"手册入库失败，清理已上传文件 {file_path}")
        remove_upload(file_path)
        raise

    return ApiResponse.created(manual).to_json_response()

@manual_bp.route('/<int:manual_id>', methods=['GET'])
@log_requests()
@api_errors("fetch manual")
def get_manual(manual_id):
    return ApiResponse.success(_repo().get_by_id(manual_id)).to_json_response()

@manual_bp.route('/<int:manual_id>', methods=['PUT'])
@log_requests()
@api_errors("update manual")
def update_manual(manual_id):
    """修改手册标题"""
    return ApiResponse.success(_repo().update(manual_id, request_data().get('title'))).to_json_response()

@manual_bp.route('/<int:manual_id>', methods=['DELETE'])
@log_requests()
@api_errors("delete manual")
def delete_manual(manual_id):
    """删除手册及其文件"""
    deleted = _repo().delete(manual_id)
    remove_upload(deleted.get('file_path'))
    return ApiResponse.message_only("Manual deleted successfully").to_json_response()

@manual_bp.route('/<int:manual_id>/download', methods=['GET'])
@log_requests()
@api_errors("download manual")
def download_manual(manual_id):
    """以附件形式下载手册文件"""
    manual = _repo().get_by_id(manual_id)
    path = resolve_upload_path(manual['file_path'])
    if path is None or not os.path.isfile(path):
        raise NotFound('Manual file')

    download_name = f"{secure_filename(manual['title']) or 'manual'}.{manual['file_type']}"
    return send_file(path, as_attachment=True, download_name=download_name)
