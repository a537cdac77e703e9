import os
from flask import Blueprint, request
from ..errors import ValidationError
from ..extensions import db
from ..models import VideoType
from ..repositories import VideoRepository
from ..utils.convert import parse_int
from ..utils.logger import get_logger, log_requests
from ..utils.Response import ApiResponse, api_errors, request_data
from ..utils.uploads import (extract_youtube_id, remove_upload, save_upload,
                             youtube_embed_url, youtube_thumbnail)

video_bp = Blueprint('video_api', __name__)

def _repo():
    return VideoRepository(db.session)

@video_bp.route('', methods=['GET'])
@log_requests()
@api_errors("fetch videos")
def get_videos():
    """获取全部视频"""
    return ApiResponse.success(_repo().get_all()).to_json_response()

@video_bp.route('/recent', methods=['GET'])
@log_requests()
@api_errors("fetch recent videos")
def get_recent_videos():
    limit = parse_int(request.args.get('limit'), 'limit') or 5
    return ApiResponse.success(_repo().get_recent(limit)).to_json_response()

@video_bp.route('/count-by-vehicle-type', methods=['GET'])
@log_requests()
@api_errors("fetch video counts")
def get_counts_by_vehicle_type():
    return ApiResponse.success(_repo().get_count_by_vehicle_type()).to_json_response()

@video_bp.route('/count-by-video-type', methods=['GET'])
@log_requests()
@api_errors("fetch video counts")
def get_counts_by_video_type():
    return ApiResponse.success(_repo().get_count_by_video_type()).to_json_response()

@video_bp.route('/search', methods=['GET'])
@log_requests()
@api_errors("search videos")
def search_videos():
    term = request.args.get('q', '').strip()
    if not term:
        raise ValidationError("Search term required")
    return ApiResponse.success(_repo().search(term)).to_json_response()

@video_bp.route('/type/<video_type>', methods=['GET'])
@log_requests()
@api_errors("fetch videos")
def get_videos_by_type(video_type):
    """按来源 (local/youtube) 获取视频"""
    return ApiResponse.success(_repo().get_by_type(video_type)).to_json_response()

@video_bp.route('/vehicle/<int:vehicle_id>', methods=['GET'])
@log_requests()
@api_errors("fetch videos")
def get_vehicle_videos(vehicle_id):
    return ApiResponse.success(_repo().get_by_vehicle_id(vehicle_id)).to_json_response()

@video_bp.route('/vehicle/<int:vehicle_id>/youtube', methods=['POST'])
@log_requests()
@api_errors("add video")
def add_youtube_video(vehicle_id):
    """
    添加YouTube视频

    请求体: {"title": ..., "url": ..., "description": 可选, "thumbnail_path": 可选}
    链接统一保存为 embed 形式，未提供缩略图时使用YouTube默认封面
    """
    data = request_data()
    youtube_id = extract_youtube_id(data.get('url'))
    if youtube_id is None:
        raise ValidationError("Invalid YouTube URL")

    video = _repo().create(
        vehicle_id,
        data.get('title'),
        VideoType.YOUTUBE.value,
        youtube_embed_url(youtube_id),
        description=data.get('description'),
        thumbnail_path=data.get('thumbnail_path') or youtube_thumbnail(youtube_id),
    )
    return ApiResponse.created(video).to_json_response()

@video_bp.route('/vehicle/<int:vehicle_id>/upload', methods=['POST'])
@log_requests()
@api_errors("upload video")
def upload_video(vehicle_id):
    """
    上传本地视频

    multipart 字段: video (文件), thumbnail (可选图片), title, description
    入库失败时删除本次保存的视频和缩略图
    """
    logger = get_logger(__name__)
    file = request.files.get('video')
    if file is None or not file.filename:
        raise ValidationError("Video file required")

    data = request_data()
    saved = [save_upload(file, 'videos')]
    try:
        if request.files.get('thumbnail'):
            saved.append(save_upload(request.files['thumbnail'], 'thumbnails'))

        video = _repo().create(
            vehicle_id,
            data.get('title') or os.path.splitext(file.filename)[0],
            VideoType.LOCAL.value,
            saved[0],
            description=data.get('description'),
            thumbnail_path=saved[1] if len(saved) > 1 else None,
        )
    except Exception:
        logger.warning(f"视频入库失败，清理已上传文件 {saved}")
        for path in saved:
            remove_upload(path)
        raise

    return ApiResponse.created(video).to_json_response()

@video_bp.route('/<int:video_id>', methods=['GET'])
@log_requests()
@api_errors("fetch video")
def get_video(video_id):
    return ApiResponse.success(_repo().get_by_id(video_id)).to_json_response()

@video_bp.route('/<int:video_id>', methods=['PUT'])
@log_requests()
@api_errors("update video")
def update_video(video_id):
    """修改标题/描述，可上传新的缩略图替换旧图"""
    logger = get_logger(__name__)
    repo = _repo()
    data = request_data()

    new_thumbnail = None
    if request.files.get('thumbnail'):
        old_thumbnail = repo.get_by_id(video_id).get('thumbnail_path')
        new_thumbnail = save_upload(request.files['thumbnail'], 'thumbnails')
        data['thumbnail_path'] = new_thumbnail

    try:
        video = repo.update(video_id, data)
    except Exception:
        if new_thumbnail:
            logger.warning(f"视频 {video_id} 更新失败，清理新缩略图 {new_thumbnail}")
            remove_upload(new_thumbnail)
        raise

    if new_thumbnail and old_thumbnail:
        remove_upload(old_thumbnail)

    return ApiResponse.success(video).to_json_response()

@video_bp.route('/<int:video_id>', methods=['DELETE'])
@log_requests()
@api_errors("delete video")
def delete_video(video_id):
    """删除视频；本地视频同时删除文件"""
    deleted = _repo().delete(video_id)
    if deleted['type'] == VideoType.LOCAL.value:
        remove_upload(deleted['path_or_url'])
    remove_upload(deleted.get('thumbnail_path'))
    return ApiResponse.message_only("Video deleted successfully").to_json_response()
